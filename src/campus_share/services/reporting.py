"""Read-side aggregates for the admin console and public stats."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Final

from sqlalchemy import Select, case, func, select
from sqlalchemy.orm import Session

from campus_share.db.time import utcnow
from campus_share.models.resource import Resource, ResourceVote
from campus_share.models.user import User
from campus_share.repositories import user_repo
from campus_share.repositories.resource_repo import (
    DIRECTION_DOWN,
    DIRECTION_UP,
    ResourceRepository,
)
from campus_share.services.listing import Page, build_page, clamp_limit, clamp_page

DASHBOARD_LIST_SIZE: Final[int] = 5
ADMIN_DEFAULT_PAGE_SIZE: Final[int] = 20
ADMIN_MAX_PAGE_SIZE: Final[int] = 100
ADMIN_SORT_KEYS: Final[tuple[str, ...]] = (
    "newest",
    "oldest",
    "most_downloaded",
    "most_upvoted",
)
DEFAULT_WINDOW_DAYS: Final[int] = 30
MAX_WINDOW_DAYS: Final[int] = 365
CONTRIBUTOR_RANKINGS: Final[tuple[str, ...]] = ("downloads", "upvotes", "net")
DEFAULT_CONTRIBUTORS: Final[int] = 10
MAX_CONTRIBUTORS: Final[int] = 50


@dataclass(frozen=True)
class DashboardStats:
    total_resources: int
    total_users: int
    total_downloads: int
    recent_resources: list[Resource]
    top_resources: list[Resource]


@dataclass(frozen=True)
class ResourceDetails:
    resource: Resource
    upvoters: list[User]
    downvoters: list[User]


@dataclass(frozen=True)
class DownloadPoint:
    date: str
    downloads: int


@dataclass(frozen=True)
class Contributor:
    user: User | None
    downloads: int
    upvotes: int
    downvotes: int

    @property
    def net(self) -> int:
        return self.upvotes - self.downvotes


def _vote_totals() -> Any:
    """Subquery of per-resource upvote and downvote counts."""
    return (
        select(
            ResourceVote.resource_id.label("resource_id"),
            func.sum(case((ResourceVote.direction == DIRECTION_UP, 1), else_=0)).label("upvotes"),
            func.sum(case((ResourceVote.direction == DIRECTION_DOWN, 1), else_=0)).label(
                "downvotes"
            ),
        )
        .group_by(ResourceVote.resource_id)
        .subquery()
    )


def dashboard(db: Session) -> DashboardStats:
    """Return headline counts plus the newest and most downloaded resources."""
    total_resources = int(db.scalar(select(func.count()).select_from(Resource)) or 0)
    total_downloads = int(
        db.scalar(select(func.coalesce(func.sum(Resource.download_count), 0))) or 0
    )
    recent = db.scalars(
        select(Resource)
        .order_by(Resource.created_at.desc(), Resource.id.desc())
        .limit(DASHBOARD_LIST_SIZE)
    ).all()
    top = db.scalars(
        select(Resource)
        .order_by(Resource.download_count.desc(), Resource.created_at.desc(), Resource.id.desc())
        .limit(DASHBOARD_LIST_SIZE)
    ).all()
    return DashboardStats(
        total_resources=total_resources,
        total_users=user_repo.count_users(db),
        total_downloads=total_downloads,
        recent_resources=list(recent),
        top_resources=list(top),
    )


def _admin_order(stmt: Select[Any], sort: str) -> Select[Any]:
    newest_first = (Resource.created_at.desc(), Resource.id.desc())
    if sort == "oldest":
        return stmt.order_by(Resource.created_at.asc(), Resource.id.asc())
    if sort == "most_downloaded":
        return stmt.order_by(Resource.download_count.desc(), *newest_first)
    if sort == "most_upvoted":
        votes = _vote_totals()
        return stmt.outerjoin(votes, votes.c.resource_id == Resource.id).order_by(
            func.coalesce(votes.c.upvotes, 0).desc(), *newest_first
        )
    return stmt.order_by(*newest_first)


def admin_resources(
    db: Session,
    *,
    page: int | None = 1,
    limit: int | None = ADMIN_DEFAULT_PAGE_SIZE,
    sort: str = "newest",
) -> Page:
    """Return every resource, paginated for moderation."""
    page = clamp_page(page)
    limit = clamp_limit(limit, default=ADMIN_DEFAULT_PAGE_SIZE, maximum=ADMIN_MAX_PAGE_SIZE)
    total = int(db.scalar(select(func.count()).select_from(Resource)) or 0)
    stmt = _admin_order(select(Resource), sort if sort in ADMIN_SORT_KEYS else "newest")
    items = db.scalars(stmt.offset((page - 1) * limit).limit(limit)).all()
    return build_page(items, page=page, limit=limit, total=total)


def resource_details(db: Session, resource_id: int) -> ResourceDetails:
    """Return a resource together with the users in each vote set.

    Raises:
        NotFoundError: If the resource does not exist.
    """
    repo = ResourceRepository(db)
    resource = repo.require(resource_id)
    return ResourceDetails(
        resource=resource,
        upvoters=list(repo.voters(resource_id, DIRECTION_UP)),
        downvoters=list(repo.voters(resource_id, DIRECTION_DOWN)),
    )


def admin_users(
    db: Session,
    *,
    page: int | None = 1,
    limit: int | None = ADMIN_DEFAULT_PAGE_SIZE,
    role: str | None = None,
) -> Page:
    """Return users newest first, optionally restricted to one role."""
    page = clamp_page(page)
    limit = clamp_limit(limit, default=ADMIN_DEFAULT_PAGE_SIZE, maximum=ADMIN_MAX_PAGE_SIZE)
    users = user_repo.list_users(db, role=role, offset=(page - 1) * limit, limit=limit)
    return build_page(users, page=page, limit=limit, total=user_repo.count_users(db, role=role))


def clamp_days(days: int | None) -> int:
    if days is None:
        return DEFAULT_WINDOW_DAYS
    return min(MAX_WINDOW_DAYS, max(1, days))


def downloads_over_time(
    db: Session,
    days: int | None = DEFAULT_WINDOW_DAYS,
    *,
    now: datetime | None = None,
) -> list[DownloadPoint]:
    """Sum download counters of resources created in the last ``days`` days.

    Points are keyed by creation date (``YYYY-MM-DD``, UTC) in ascending
    order; days without new resources are omitted.
    """
    since = (now or utcnow()) - timedelta(days=clamp_days(days))
    rows = db.execute(
        select(Resource.created_at, Resource.download_count).where(Resource.created_at >= since)
    )
    totals: dict[str, int] = defaultdict(int)
    for created_at, download_count in rows:
        totals[created_at.date().isoformat()] += int(download_count or 0)
    return [DownloadPoint(date=day, downloads=totals[day]) for day in sorted(totals)]


def top_contributors(
    db: Session,
    *,
    limit: int | None = DEFAULT_CONTRIBUTORS,
    by: str | None = "downloads",
) -> list[Contributor]:
    """Rank uploaders by total downloads, upvotes or net upvotes.

    Unknown rankings fall back to ``downloads``; ties go to the lower user id.
    """
    limit = clamp_limit(limit, default=DEFAULT_CONTRIBUTORS, maximum=MAX_CONTRIBUTORS)
    ranking = (by or "downloads").lower()
    if ranking not in CONTRIBUTOR_RANKINGS:
        ranking = "downloads"

    votes = _vote_totals()
    downloads = func.sum(Resource.download_count)
    upvotes = func.sum(func.coalesce(votes.c.upvotes, 0))
    downvotes = func.sum(func.coalesce(votes.c.downvotes, 0))
    rank_by = {"downloads": downloads, "upvotes": upvotes, "net": upvotes - downvotes}[ranking]

    stmt = (
        select(
            Resource.uploaded_by_id,
            downloads.label("downloads"),
            upvotes.label("upvotes"),
            downvotes.label("downvotes"),
        )
        .outerjoin(votes, votes.c.resource_id == Resource.id)
        .group_by(Resource.uploaded_by_id)
        .order_by(rank_by.desc(), Resource.uploaded_by_id.asc())
        .limit(limit)
    )
    rows = db.execute(stmt).all()

    user_ids = [row.uploaded_by_id for row in rows]
    users = {user.id: user for user in db.scalars(select(User).where(User.id.in_(user_ids)))}
    return [
        Contributor(
            user=users.get(row.uploaded_by_id),
            downloads=int(row.downloads or 0),
            upvotes=int(row.upvotes or 0),
            downvotes=int(row.downvotes or 0),
        )
        for row in rows
    ]
