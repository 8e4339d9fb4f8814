# src/campus_share/schemas/vote.py
"""Vote-related Pydantic schemas."""

from pydantic import Field

from campus_share.schemas.common import CamelModel


class VoteRequest(CamelModel):
    """Schema for casting, flipping or clearing a vote."""

    type: str = Field(..., description='"up" or "down"')


class VoteResponse(CamelModel):
    """Counts and the caller's membership after a vote."""

    message: str = "Vote updated successfully"
    upvotes: int
    downvotes: int
    user_has_upvoted: bool
    user_has_downvoted: bool
