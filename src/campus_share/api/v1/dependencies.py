"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from campus_share.core.errors import (
    CampusShareError,
    ForbiddenError,
    InvalidTokenError,
    UnauthenticatedError,
)
from campus_share.core.security import decode_access_token
from campus_share.db.session import get_db
from campus_share.models import User
from campus_share.repositories import user_repo
from campus_share.services.storage import LocalFileStorage, get_storage

# HTTP Bearer scheme for JWT authentication; absent credentials yield None.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def get_storage_dep() -> LocalFileStorage:
    """Return the shared file storage backend."""
    return get_storage()


StorageDep = Annotated[LocalFileStorage, Depends(get_storage_dep)]


def authenticate(db: Session, token: str | None) -> User:
    """Resolve a bearer token to a stored user.

    Raises:
        UnauthenticatedError: If no token was supplied.
        InvalidTokenError: If the token is malformed, badly signed, or names
            a user that no longer exists.
        TokenExpiredError: If the token has expired.
    """
    if not token:
        raise UnauthenticatedError()
    user_id = decode_access_token(token)
    user = user_repo.get_user(db, user_id)
    if user is None:
        raise InvalidTokenError()
    return user


def get_current_user(credentials: CredentialsDep, db: SessionDep) -> User:
    """Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token credentials, if any were sent
        db: Database session

    Returns:
        User object for the authenticated user
    """
    return authenticate(db, credentials.credentials if credentials else None)


def get_optional_user(credentials: CredentialsDep, db: SessionDep) -> User | None:
    """Return the caller when a valid token is present, otherwise ``None``."""
    if credentials is None:
        return None
    try:
        return authenticate(db, credentials.credentials)
    except CampusShareError:
        return None


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]


def require_admin(current_user: CurrentUserDep) -> User:
    """Allow only callers holding the admin role."""
    if not current_user.is_admin:
        raise ForbiddenError("Access denied. Admin role required.")
    return current_user


AdminDep = Annotated[User, Depends(require_admin)]
