"""Data access helpers for resources, vote membership and download counters.

Every mutation of shared per-resource state (vote membership and the download
counter) is a single SQL statement, so concurrent requests never lose each
other's updates and nothing is read-modify-written in Python.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.orm import Session

from campus_share.core.errors import NotFoundError
from campus_share.models.resource import Resource, ResourceVote
from campus_share.models.user import User

__all__ = ["ResourceRepository", "DIRECTION_UP", "DIRECTION_DOWN"]

DIRECTION_UP = 1
DIRECTION_DOWN = -1


def _dialect_insert(db: Session) -> Any:
    """Return the dialect-specific ``insert`` that supports ON CONFLICT."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:  # pragma: no cover - only sqlite and postgresql are deployed
        raise NotImplementedError(f"Atomic vote upsert is not available for {dialect}")
    return insert


class ResourceRepository:
    """Thin wrapper around database access for resource entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, resource_id: int) -> Resource | None:
        """Return a resource by identifier."""
        return self.session.get(Resource, resource_id)

    def require(self, resource_id: int) -> Resource:
        """Return a resource by identifier or raise ``NotFoundError``."""
        resource = self.get_by_id(resource_id)
        if resource is None:
            raise NotFoundError("Resource not found")
        return resource

    def exists(self, resource_id: int) -> bool:
        """Return True when a resource with ``resource_id`` exists."""
        stmt = select(Resource.id).where(Resource.id == resource_id)
        return self.session.scalar(stmt) is not None

    def create(
        self,
        *,
        title: str,
        description: str,
        department: str,
        subject: str,
        semester: int,
        file_location: str,
        uploaded_by_id: int,
        external_storage_id: str | None = None,
    ) -> Resource:
        """Insert a new resource and return the persisted ORM instance."""
        resource = Resource(
            title=title,
            description=description,
            department=department,
            subject=subject,
            semester=semester,
            file_location=file_location,
            external_storage_id=external_storage_id,
            uploaded_by_id=uploaded_by_id,
            download_count=0,
        )
        self.session.add(resource)
        self.session.flush()
        return resource

    def delete(self, resource: Resource) -> None:
        """Remove a resource together with its vote membership rows."""
        self.session.execute(delete(ResourceVote).where(ResourceVote.resource_id == resource.id))
        self.session.delete(resource)
        self.session.flush()

    # -- vote membership -------------------------------------------------

    def remove_vote(self, resource_id: int, user_id: int, direction: int) -> bool:
        """Remove the user from one vote set; return True if they were in it."""
        result = self.session.execute(
            delete(ResourceVote).where(
                ResourceVote.resource_id == resource_id,
                ResourceVote.user_id == user_id,
                ResourceVote.direction == direction,
            )
        )
        return bool(result.rowcount)

    def put_vote(self, resource_id: int, user_id: int, direction: int) -> None:
        """Place the user in one vote set and out of the opposite set.

        Implemented as a single upsert on the (resource, user) key.
        """
        insert = _dialect_insert(self.session)
        stmt = insert(ResourceVote).values(
            resource_id=resource_id,
            user_id=user_id,
            direction=direction,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[ResourceVote.resource_id, ResourceVote.user_id],
            set_={"direction": stmt.excluded.direction},
        )
        self.session.execute(stmt)

    def vote_counts(self, resource_id: int) -> tuple[int, int]:
        """Return ``(upvotes, downvotes)`` for a resource."""
        up = case((ResourceVote.direction == DIRECTION_UP, 1), else_=0)
        down = case((ResourceVote.direction == DIRECTION_DOWN, 1), else_=0)
        stmt = select(
            func.coalesce(func.sum(up), 0),
            func.coalesce(func.sum(down), 0),
        ).where(ResourceVote.resource_id == resource_id)
        upvotes, downvotes = self.session.execute(stmt).one()
        return int(upvotes), int(downvotes)

    def vote_counts_for(self, resource_ids: Iterable[int]) -> dict[int, tuple[int, int]]:
        """Return ``{resource_id: (upvotes, downvotes)}`` for many resources."""
        ids = list(resource_ids)
        counts = {resource_id: (0, 0) for resource_id in ids}
        if not ids:
            return counts
        stmt = (
            select(
                ResourceVote.resource_id,
                func.sum(case((ResourceVote.direction == DIRECTION_UP, 1), else_=0)),
                func.sum(case((ResourceVote.direction == DIRECTION_DOWN, 1), else_=0)),
            )
            .where(ResourceVote.resource_id.in_(ids))
            .group_by(ResourceVote.resource_id)
        )
        for resource_id, upvotes, downvotes in self.session.execute(stmt):
            counts[resource_id] = (int(upvotes or 0), int(downvotes or 0))
        return counts

    def user_direction(self, resource_id: int, user_id: int) -> int | None:
        """Return the caller's vote direction on a resource, if any."""
        stmt = select(ResourceVote.direction).where(
            ResourceVote.resource_id == resource_id,
            ResourceVote.user_id == user_id,
        )
        return self.session.scalar(stmt)

    def user_directions(self, resource_ids: Iterable[int], user_id: int) -> dict[int, int]:
        """Return ``{resource_id: direction}`` for the caller's votes."""
        ids = list(resource_ids)
        if not ids:
            return {}
        stmt = select(ResourceVote.resource_id, ResourceVote.direction).where(
            ResourceVote.resource_id.in_(ids),
            ResourceVote.user_id == user_id,
        )
        return {resource_id: direction for resource_id, direction in self.session.execute(stmt)}

    def voters(self, resource_id: int, direction: int) -> Sequence[User]:
        """Return the users holding ``direction`` on a resource."""
        stmt = (
            select(User)
            .join(ResourceVote, ResourceVote.user_id == User.id)
            .where(ResourceVote.resource_id == resource_id, ResourceVote.direction == direction)
            .order_by(User.id)
        )
        return self.session.scalars(stmt).all()

    # -- download counter ------------------------------------------------

    def increment_downloads(self, resource_id: int) -> bool:
        """Add one to the download counter; return False if the row is gone."""
        result = self.session.execute(
            update(Resource)
            .where(Resource.id == resource_id)
            .values(download_count=Resource.download_count + 1)
            .execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)

    def download_count(self, resource_id: int) -> int:
        """Return the current download counter straight from the database."""
        stmt = select(Resource.download_count).where(Resource.id == resource_id)
        return int(self.session.scalar(stmt) or 0)
