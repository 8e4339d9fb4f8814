"""Vote engine: the exclusive up/down reaction state machine.

Each (user, resource) pair is in exactly one of three states: no vote,
upvoted, or downvoted. Two moves exist from every state:

* issuing the vote the user already holds clears it (back to no vote);
* issuing any other vote moves the user straight into that set, leaving the
  opposite set in the same statement.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campus_share.core.errors import (
    InternalError,
    InvalidArgumentError,
    UnauthenticatedError,
)
from campus_share.repositories.resource_repo import (
    DIRECTION_DOWN,
    DIRECTION_UP,
    ResourceRepository,
)

logger = logging.getLogger(__name__)

VOTE_DIRECTIONS: Final[dict[str, int]] = {"up": DIRECTION_UP, "down": DIRECTION_DOWN}


@dataclass(frozen=True)
class VoteResult:
    """Aggregate counts plus the caller's resulting membership."""

    upvotes: int
    downvotes: int
    user_has_upvoted: bool
    user_has_downvoted: bool


def parse_direction(direction: str) -> int:
    """Map ``"up"``/``"down"`` onto the stored direction value."""
    try:
        return VOTE_DIRECTIONS[direction]
    except (KeyError, TypeError) as err:
        raise InvalidArgumentError('Invalid vote type. Must be "up" or "down"') from err


def apply_vote(
    db: Session,
    resource_id: int,
    user_id: int | None,
    direction: str,
) -> VoteResult:
    """Toggle or flip the caller's vote on a resource and commit.

    Args:
        db: Database session.
        resource_id: Resource being voted on.
        user_id: Authenticated caller; ``None`` means no identity.
        direction: ``"up"`` or ``"down"``.

    Returns:
        Updated counts and the caller's membership flags.

    Raises:
        UnauthenticatedError: If there is no caller identity.
        InvalidArgumentError: If ``direction`` is not ``"up"`` or ``"down"``.
        NotFoundError: If the resource does not exist.
    """
    if user_id is None:
        raise UnauthenticatedError("Authentication required")
    value = parse_direction(direction)

    repo = ResourceRepository(db)
    repo.require(resource_id)

    try:
        if repo.remove_vote(resource_id, user_id, value):
            final_direction: int | None = None
        else:
            repo.put_vote(resource_id, user_id, value)
            final_direction = value
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Vote on resource %s failed", resource_id, exc_info=True)
        raise InternalError("Internal server error during voting") from err

    upvotes, downvotes = repo.vote_counts(resource_id)
    logger.info(
        "User %s voted %s on resource %s -> %s",
        user_id,
        direction,
        resource_id,
        "cleared" if final_direction is None else direction,
    )
    return VoteResult(
        upvotes=upvotes,
        downvotes=downvotes,
        user_has_upvoted=final_direction == DIRECTION_UP,
        user_has_downvoted=final_direction == DIRECTION_DOWN,
    )


def get_user_vote(db: Session, resource_id: int, user_id: int) -> str | None:
    """Return ``"up"``, ``"down"`` or ``None`` for the caller's current vote."""
    direction = ResourceRepository(db).user_direction(resource_id, user_id)
    if direction == DIRECTION_UP:
        return "up"
    if direction == DIRECTION_DOWN:
        return "down"
    return None
