# tests/v1/test_dependencies.py
"""Tests for API dependencies module."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import status
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from campus_share.api.v1.dependencies import (
    get_current_user,
    get_optional_user,
    require_admin,
)
from campus_share.core.errors import (
    ForbiddenError,
    InvalidTokenError,
    TokenExpiredError,
    UnauthenticatedError,
)
from campus_share.core.security import create_access_token
from campus_share.core.settings import settings


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def _token(claims: dict) -> str:
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


class TestGetCurrentUser:
    """Test the get_current_user dependency function."""

    def test_valid_token(self, db_session, test_user):
        user = get_current_user(_credentials(create_access_token(test_user.id)), db_session)

        assert user.id == test_user.id

    def test_missing_token(self, db_session):
        with pytest.raises(UnauthenticatedError) as exc_info:
            get_current_user(None, db_session)

        assert exc_info.value.kind == "unauthenticated"

    def test_garbage_token(self, db_session):
        with pytest.raises(InvalidTokenError):
            get_current_user(_credentials("not.a.jwt"), db_session)

    def test_wrong_secret(self, db_session, test_user):
        token = jwt.encode({"sub": str(test_user.id)}, "other-secret", algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            get_current_user(_credentials(token), db_session)

    def test_missing_subject(self, db_session):
        with pytest.raises(InvalidTokenError):
            get_current_user(_credentials(_token({"role": "user"})), db_session)

    def test_non_numeric_subject(self, db_session):
        with pytest.raises(InvalidTokenError):
            get_current_user(_credentials(_token({"sub": "abc"})), db_session)

    def test_unknown_user(self, db_session):
        with pytest.raises(InvalidTokenError):
            get_current_user(_credentials(create_access_token(987654)), db_session)

    def test_expired_token(self, db_session, test_user):
        expired = _token(
            {
                "sub": str(test_user.id),
                "exp": datetime.now(UTC) - timedelta(minutes=1),
            }
        )

        with pytest.raises(TokenExpiredError):
            get_current_user(_credentials(expired), db_session)


class TestGetOptionalUser:
    """Test the get_optional_user dependency function."""

    def test_absent_token_yields_none(self, db_session):
        assert get_optional_user(None, db_session) is None

    def test_invalid_token_yields_none(self, db_session):
        assert get_optional_user(_credentials("broken"), db_session) is None

    def test_valid_token_yields_user(self, db_session, test_user):
        credentials = _credentials(create_access_token(test_user.id))

        assert get_optional_user(credentials, db_session).id == test_user.id


class TestRequireAdmin:
    """Test the require_admin dependency function."""

    def test_admin_passes(self, admin_user):
        assert require_admin(admin_user) is admin_user

    def test_regular_user_is_forbidden(self, test_user):
        with pytest.raises(ForbiddenError):
            require_admin(test_user)


class TestErrorRendering:
    """Authentication failures render with distinct error kinds."""

    def test_missing_token_response(self, client):
        response = client.get("/api/v1/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {
            "error": "unauthenticated",
            "message": "Access denied. No token provided.",
        }
        assert response.headers["www-authenticate"] == "Bearer"

    def test_invalid_token_response(self, client):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer nope"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "invalid_token"

    def test_expired_token_response(self, client, test_user):
        expired = _token(
            {"sub": str(test_user.id), "exp": datetime.now(UTC) - timedelta(seconds=5)}
        )

        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {expired}"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "token_expired"

    def test_admin_route_forbidden_for_users(self, client, auth_token):
        response = client.get("/api/v1/admin/dashboard", headers=auth_token)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["message"] == "Access denied. Admin role required."
