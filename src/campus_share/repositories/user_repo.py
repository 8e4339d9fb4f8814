"""Credential store: constructing, finding and verifying user accounts."""
from __future__ import annotations

import re
from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from campus_share.core import security
from campus_share.core.errors import InvalidArgumentError, NotFoundError
from campus_share.models.user import ROLE_USER, ROLES, User

__all__ = [
    "new_user",
    "normalize_email",
    "get_user",
    "require_user",
    "get_user_by_email",
    "list_users",
    "count_users",
    "verify_credentials",
]

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
DEPARTMENT_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_BYTES = 72


def normalize_email(email: str) -> str:
    """Return the canonical (trimmed, lower-cased) form of an email address."""
    return email.strip().lower()


def new_user(
    *,
    name: str,
    email: str,
    password: str,
    department: str,
    role: str = ROLE_USER,
) -> User:
    """Build a validated, unsaved ``User`` with a hashed password.

    All normalization happens here so that no ``User`` instance ever carries
    an unhashed password or a non-canonical email.

    Raises:
        InvalidArgumentError: If any field fails validation. ``details`` lists
            every problem found.
    """
    name = (name or "").strip()
    department = (department or "").strip()
    email = normalize_email(email or "")
    password = password or ""

    problems: list[str] = []
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        problems.append(
            f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters long"
        )
    if not _EMAIL_PATTERN.match(email):
        problems.append("Please provide a valid email")
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    elif len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        problems.append(f"Password must be at most {PASSWORD_MAX_BYTES} bytes long")
    if not department or len(department) > DEPARTMENT_MAX_LENGTH:
        problems.append(
            f"Department is required and must be at most {DEPARTMENT_MAX_LENGTH} characters long"
        )
    if role not in ROLES:
        problems.append('Role must be "user" or "admin"')
    if problems:
        raise InvalidArgumentError("Validation failed", details=problems)

    return User(
        name=name,
        email=email,
        password_hash=security.hash_password(password),
        department=department,
        role=role,
    )


def get_user(db: Session, user_id: int) -> User | None:
    """Return a single user by primary key."""
    return db.get(User, user_id)


def require_user(db: Session, user_id: int) -> User:
    """Return a user by primary key or raise ``NotFoundError``."""
    user = get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    """Return the user registered under ``email`` (case-insensitive)."""
    return db.scalars(select(User).where(User.email == normalize_email(email))).first()


def list_users(
    db: Session,
    *,
    role: str | None = None,
    offset: int = 0,
    limit: int = 20,
) -> Sequence[User]:
    """Return users newest first, optionally filtered by role."""
    stmt = select(User)
    if role:
        stmt = stmt.where(User.role == role)
    stmt = stmt.order_by(User.created_at.desc(), User.id.desc()).offset(offset).limit(limit)
    return db.scalars(stmt).all()


def count_users(db: Session, *, role: str | None = None) -> int:
    """Return the number of users, optionally restricted to one role."""
    stmt = select(func.count()).select_from(User)
    if role:
        stmt = stmt.where(User.role == role)
    return int(db.scalar(stmt) or 0)


def verify_credentials(db: Session, email: str, password: str) -> User | None:
    """Return the user when ``password`` matches, otherwise ``None``."""
    user = get_user_by_email(db, email)
    if user is None:
        return None
    if not security.verify_password(password, user.password_hash):
        return None
    return user
