"""Paginated, filtered, sorted and searchable resource listings."""
from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Final

from sqlalchemy import Select, case, func, literal, select
from sqlalchemy.orm import Session

from campus_share.models.resource import Resource, ResourceVote
from campus_share.repositories.resource_repo import DIRECTION_UP

DEFAULT_PAGE_SIZE: Final[int] = 10
MAX_PAGE_SIZE: Final[int] = 50
SORT_KEYS: Final[tuple[str, ...]] = ("new", "old", "top", "downloads")

# Relevance weight per field for free-text search.
SEARCH_WEIGHTS: Final[dict[str, int]] = {
    "title": 10,
    "description": 5,
    "subject": 4,
    "department": 2,
}


@dataclass(frozen=True)
class ListingQuery:
    """Parameters accepted by :func:`list_resources`."""

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    department: str | None = None
    subject: str | None = None
    semester: int | None = None
    sort: str = "new"
    search: str | None = None


@dataclass(frozen=True)
class Page:
    """One page of results plus the pagination envelope."""

    items: list[Any]
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool
    scores: dict[int, int] = field(default_factory=dict)


def clamp_page(page: int | None) -> int:
    """Return a 1-indexed page number."""
    return max(1, page or 1)


def clamp_limit(
    limit: int | None,
    *,
    default: int = DEFAULT_PAGE_SIZE,
    maximum: int = MAX_PAGE_SIZE,
) -> int:
    """Bound a requested page size to ``[1, maximum]``."""
    if limit is None:
        return default
    return min(maximum, max(1, limit))


def build_page(
    items: Sequence[Any],
    *,
    page: int,
    limit: int,
    total: int,
    scores: dict[int, int] | None = None,
) -> Page:
    """Wrap ``items`` with pagination metadata."""
    total_pages = math.ceil(total / limit) if total else 0
    return Page(
        items=list(items),
        current_page=page,
        total_pages=total_pages,
        total_items=total,
        items_per_page=limit,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
        scores=scores or {},
    )


def search_terms(text: str | None) -> list[str]:
    """Split a search string into distinct lower-cased terms."""
    if not text:
        return []
    seen: dict[str, None] = {}
    for term in text.lower().split():
        seen.setdefault(term, None)
    return list(seen)


def relevance_score(terms: list[str]) -> Any:
    """Build a SQL expression scoring a resource against ``terms``."""
    score: Any = literal(0)
    for term in terms:
        for field_name, weight in SEARCH_WEIGHTS.items():
            column = getattr(Resource, field_name)
            score = score + case(
                (column.icontains(term, autoescape=True), weight),
                else_=0,
            )
    return score


def _apply_filters(stmt: Select[Any], query: ListingQuery) -> Select[Any]:
    if query.department:
        stmt = stmt.where(Resource.department.icontains(query.department, autoescape=True))
    if query.subject:
        stmt = stmt.where(Resource.subject.icontains(query.subject, autoescape=True))
    if query.semester is not None:
        stmt = stmt.where(Resource.semester == query.semester)
    return stmt


def _upvote_counts() -> Any:
    return (
        select(ResourceVote.resource_id, func.count().label("upvotes"))
        .where(ResourceVote.direction == DIRECTION_UP)
        .group_by(ResourceVote.resource_id)
        .subquery()
    )


def _order_by(stmt: Select[Any], sort: str) -> Select[Any]:
    newest_first = (Resource.created_at.desc(), Resource.id.desc())
    if sort == "old":
        return stmt.order_by(Resource.created_at.asc(), Resource.id.asc())
    if sort == "top":
        upvotes = _upvote_counts()
        return stmt.outerjoin(upvotes, upvotes.c.resource_id == Resource.id).order_by(
            func.coalesce(upvotes.c.upvotes, 0).desc(), *newest_first
        )
    if sort == "downloads":
        return stmt.order_by(Resource.download_count.desc(), *newest_first)
    return stmt.order_by(*newest_first)


def list_resources(db: Session, query: ListingQuery) -> Page:
    """Return one page of resources matching ``query``.

    Unknown sort keys fall back to ``new``. When ``query.search`` has terms,
    only resources scoring above zero are returned, best match first.
    """
    page = clamp_page(query.page)
    limit = clamp_limit(query.limit)
    terms = search_terms(query.search)

    filtered = _apply_filters(select(Resource), query)
    if terms:
        score = relevance_score(terms)
        filtered = filtered.where(score > 0)

    total = int(db.scalar(select(func.count()).select_from(filtered.subquery())) or 0)

    scores: dict[int, int] = {}
    if terms:
        stmt = filtered.add_columns(score.label("score")).order_by(
            score.desc(), Resource.created_at.desc(), Resource.id.desc()
        )
        rows = db.execute(stmt.offset((page - 1) * limit).limit(limit)).unique().all()
        items = [row[0] for row in rows]
        scores = {row[0].id: int(row[1]) for row in rows}
    else:
        stmt = _order_by(filtered, query.sort if query.sort in SORT_KEYS else "new")
        items = list(db.scalars(stmt.offset((page - 1) * limit).limit(limit)).unique())

    return build_page(items, page=page, limit=limit, total=total, scores=scores)
