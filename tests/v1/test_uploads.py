# tests/v1/test_uploads.py
"""Tests for the upload endpoint."""

from fastapi import status


def test_upload_pdf(client, auth_token, storage) -> None:
    response = client.post(
        "/api/v1/uploads",
        files={"file": ("My Notes (final).pdf", b"%PDF-1.4 notes", "application/pdf")},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["filename"].endswith("-My_Notes__final_.pdf")
    assert body["fileUrl"] == f"/uploads/{body['filename']}"
    assert (storage.base_dir / body["filename"]).read_bytes() == b"%PDF-1.4 notes"


def test_upload_image_is_allowed(client, auth_token) -> None:
    response = client.post(
        "/api/v1/uploads",
        files={"file": ("diagram.png", b"\x89PNG", "image/png")},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_201_CREATED


def test_upload_rejects_disallowed_type(client, auth_token, storage) -> None:
    response = client.post(
        "/api/v1/uploads",
        files={"file": ("run.sh", b"#!/bin/sh", "application/x-sh")},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Invalid file type"
    assert list(storage.base_dir.iterdir()) == []


def test_upload_rejects_oversized_file(client, auth_token, storage) -> None:
    response = client.post(
        "/api/v1/uploads",
        files={"file": ("big.txt", b"x" * 2048, "text/plain")},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"].startswith("File too large")
    assert list(storage.base_dir.iterdir()) == []


def test_upload_without_file(client, auth_token) -> None:
    response = client.post("/api/v1/uploads", headers=auth_token)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "No file uploaded"


def test_upload_requires_authentication(client) -> None:
    response = client.post(
        "/api/v1/uploads",
        files={"file": ("notes.pdf", b"%PDF", "application/pdf")},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
