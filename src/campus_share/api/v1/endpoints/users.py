"""Self-service profile endpoints."""

from fastapi import APIRouter

from campus_share.schemas.user import ProfileUpdateRequest, UserEnvelope, UserResponse
from campus_share.services import accounts

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/users", tags=["users"])


@router.patch("/me", response_model=UserEnvelope)
async def update_me(
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> UserEnvelope:
    """Update the caller's name and/or department."""
    user = accounts.update_profile(
        db,
        current_user,
        name=payload.name,
        department=payload.department,
    )
    return UserEnvelope(user=UserResponse.model_validate(user))
