"""Tests for account management and admin seeding."""

import pytest

from campus_share.core.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    UnauthenticatedError,
)
from campus_share.core.security import verify_password
from campus_share.models import User
from campus_share.scripts.seed_admin import seed_admin
from campus_share.services import accounts


def test_register_normalizes_email(db_session) -> None:
    user = accounts.register(
        db_session,
        name="Ada Lovelace",
        email="  Ada@Campus.EDU ",
        password="engines",
        department="Mathematics",
    )

    assert user.email == "ada@campus.edu"
    assert user.role == "user"
    assert verify_password("engines", user.password_hash)


def test_register_rejects_long_password(db_session) -> None:
    with pytest.raises(InvalidArgumentError) as exc_info:
        accounts.register(
            db_session,
            name="Ada Lovelace",
            email="ada@campus.edu",
            password="\u00e9" * 40,
            department="Mathematics",
        )

    assert exc_info.value.details == ["Password must be at most 72 bytes long"]
    assert db_session.query(User).count() == 0


def test_register_duplicate_email(db_session, test_user) -> None:
    with pytest.raises(ConflictError):
        accounts.register(
            db_session,
            name="Someone Else",
            email=test_user.email.upper(),
            password="password123",
            department="Physics",
        )


def test_authenticate_rejects_wrong_password(db_session, test_user) -> None:
    with pytest.raises(UnauthenticatedError, match="Invalid email or password"):
        accounts.authenticate_credentials(db_session, test_user.email, "wrong-password")


def test_set_role(db_session, test_user) -> None:
    assert accounts.set_role(db_session, test_user.id, "admin").role == "admin"

    with pytest.raises(InvalidArgumentError):
        accounts.set_role(db_session, test_user.id, "owner")
    with pytest.raises(NotFoundError):
        accounts.set_role(db_session, 424242, "user")


def test_seed_admin_creates_then_updates(db_session) -> None:
    user, created = seed_admin(
        db_session,
        email="admin@campus.edu",
        password="first-pass",
        name="Campus Admin",
    )
    again, created_again = seed_admin(
        db_session,
        email="ADMIN@campus.edu",
        password="second-pass",
        name="Renamed Admin",
    )

    assert created is True
    assert created_again is False
    assert again.id == user.id
    assert again.role == "admin"
    assert again.name == "Renamed Admin"
    assert verify_password("second-pass", again.password_hash)


def test_seed_admin_promotes_existing_user(db_session, test_user) -> None:
    user, created = seed_admin(
        db_session,
        email=test_user.email,
        password="password123",
        name=test_user.name,
    )

    assert created is False
    assert user.id == test_user.id
    assert user.role == "admin"
