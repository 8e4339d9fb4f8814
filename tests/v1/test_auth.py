# tests/v1/test_auth.py
"""Tests for registration, login and identity lookup."""

from fastapi import status

from campus_share.core.security import decode_access_token
from campus_share.models import User

REGISTRATION = {
    "name": "Ada Lovelace",
    "email": "Ada@Campus.edu ",
    "password": "engine42",
    "department": "Mathematics",
}


def test_register_returns_token_and_user(client, db_session) -> None:
    response = client.post("/api/v1/auth/register", json=REGISTRATION)

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["user"]["email"] == "ada@campus.edu"
    assert body["user"]["role"] == "user"
    assert "password" not in body["user"]
    assert "passwordHash" not in body["user"]
    assert decode_access_token(body["token"]) == body["user"]["id"]

    stored = db_session.get(User, body["user"]["id"])
    assert stored.password_hash != REGISTRATION["password"]
    assert stored.password_hash.startswith("$2")


def test_register_duplicate_email_conflicts(client) -> None:
    client.post("/api/v1/auth/register", json=REGISTRATION)

    response = client.post(
        "/api/v1/auth/register",
        json={**REGISTRATION, "email": "ADA@campus.edu"},
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["error"] == "conflict"


def test_register_validation_lists_problems(client) -> None:
    response = client.post(
        "/api/v1/auth/register",
        json={"name": "A", "email": "not-an-email", "password": "123", "department": ""},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["error"] == "invalid_argument"
    assert len(body["details"]) == 4


def test_register_rejects_password_over_bcrypt_limit(client) -> None:
    response = client.post("/api/v1/auth/register", json={**REGISTRATION, "password": "x" * 100})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["details"] == ["Password must be at most 72 bytes long"]


def test_register_cannot_choose_role(client) -> None:
    response = client.post("/api/v1/auth/register", json={**REGISTRATION, "role": "admin"})

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["user"]["role"] == "user"


def test_login_success(client, test_user) -> None:
    response = client.post(
        "/api/v1/auth/login",
        json={"email": test_user.email.upper(), "password": "password123"},
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["user"]["id"] == test_user.id
    assert decode_access_token(body["token"]) == test_user.id


def test_login_wrong_password(client, test_user) -> None:
    response = client.post(
        "/api/v1/auth/login",
        json={"email": test_user.email, "password": "wrong-password"},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["message"] == "Invalid email or password"


def test_login_unknown_email(client) -> None:
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@campus.edu", "password": "password123"},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["message"] == "Invalid email or password"


def test_me(client, auth_token, test_user) -> None:
    response = client.get("/api/v1/auth/me", headers=auth_token)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["user"]["id"] == test_user.id
    assert response.json()["user"]["name"] == "Test User"
