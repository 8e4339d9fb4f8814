# tests/v1/test_users.py
"""Tests for self-service profile updates."""

from fastapi import status


def test_update_name_and_department(client, auth_token) -> None:
    response = client.patch(
        "/api/v1/users/me",
        json={"name": "  Grace Hopper ", "department": "Naval Computing"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_200_OK
    user = response.json()["user"]
    assert user["name"] == "Grace Hopper"
    assert user["department"] == "Naval Computing"


def test_partial_update_keeps_other_fields(client, auth_token, test_user) -> None:
    response = client.patch("/api/v1/users/me", json={"name": "Renamed"}, headers=auth_token)

    assert response.json()["user"]["department"] == test_user.department


def test_update_rejects_short_name(client, auth_token) -> None:
    response = client.patch("/api/v1/users/me", json={"name": "X"}, headers=auth_token)

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_update_cannot_change_role(client, auth_token) -> None:
    response = client.patch("/api/v1/users/me", json={"role": "admin"}, headers=auth_token)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["user"]["role"] == "user"


def test_update_requires_authentication(client) -> None:
    response = client.patch("/api/v1/users/me", json={"name": "Nobody"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
