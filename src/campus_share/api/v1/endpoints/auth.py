"""Authentication endpoints: registration, login and identity lookup."""

from fastapi import APIRouter, status

from campus_share.core.security import create_access_token
from campus_share.schemas.user import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserEnvelope,
    UserResponse,
)
from campus_share.services import accounts

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: SessionDep) -> AuthResponse:
    """Create an account and return a bearer token for it."""
    user = accounts.register(
        db,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        department=payload.department,
    )
    return AuthResponse(
        token=create_access_token(user.id),
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, db: SessionDep) -> AuthResponse:
    """Exchange email and password for a bearer token."""
    user = accounts.authenticate_credentials(db, payload.email, payload.password)
    return AuthResponse(
        token=create_access_token(user.id),
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserEnvelope)
async def read_me(current_user: CurrentUserDep) -> UserEnvelope:
    """Return the authenticated caller."""
    return UserEnvelope(user=UserResponse.model_validate(current_user))
