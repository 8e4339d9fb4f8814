"""Account lifecycle: registration, credential login, profile and role edits."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_share.core.errors import ConflictError, InvalidArgumentError, UnauthenticatedError
from campus_share.models.user import ROLES, User
from campus_share.repositories import user_repo

__all__ = [
    "register",
    "authenticate_credentials",
    "update_profile",
    "set_role",
]

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "User already exists with this email"


def register(
    db: Session,
    *,
    name: str,
    email: str,
    password: str,
    department: str,
) -> User:
    """Create a regular user account.

    Raises:
        InvalidArgumentError: If a field fails validation.
        ConflictError: If the email is already registered.
    """
    user = user_repo.new_user(
        name=name,
        email=email,
        password=password,
        department=department,
    )
    if user_repo.get_user_by_email(db, user.email) is not None:
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

    db.add(user)
    try:
        db.commit()
    except IntegrityError as err:
        # A concurrent registration won the unique index.
        db.rollback()
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE) from err
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


def authenticate_credentials(db: Session, email: str, password: str) -> User:
    """Return the user owning ``email`` when ``password`` matches.

    Unknown emails and wrong passwords fail identically.
    """
    user = user_repo.verify_credentials(db, email, password)
    if user is None:
        logger.warning("Failed login attempt")
        raise UnauthenticatedError("Invalid email or password")
    return user


def update_profile(
    db: Session,
    user: User,
    *,
    name: str | None = None,
    department: str | None = None,
) -> User:
    """Apply self-service profile edits to ``user``."""
    if name is not None:
        name = name.strip()
        if not user_repo.NAME_MIN_LENGTH <= len(name) <= user_repo.NAME_MAX_LENGTH:
            raise InvalidArgumentError(
                f"Name must be between {user_repo.NAME_MIN_LENGTH} and "
                f"{user_repo.NAME_MAX_LENGTH} characters long"
            )
        user.name = name
    if department is not None:
        department = department.strip()
        if not department or len(department) > user_repo.DEPARTMENT_MAX_LENGTH:
            raise InvalidArgumentError(
                "Department is required and must be at most "
                f"{user_repo.DEPARTMENT_MAX_LENGTH} characters long"
            )
        user.department = department

    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def set_role(db: Session, user_id: int, role: str) -> User:
    """Change a user's role.

    Raises:
        InvalidArgumentError: If ``role`` is not ``user`` or ``admin``.
        NotFoundError: If the user does not exist.
    """
    if role not in ROLES:
        raise InvalidArgumentError('Invalid role. Must be "user" or "admin"')
    user = user_repo.require_user(db, user_id)
    user.role = role
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User %s role set to %s", user_id, role)
    return user
