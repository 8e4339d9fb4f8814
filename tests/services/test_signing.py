"""Tests for download link signing and the referer gate."""

import hashlib
import hmac

import pytest

from campus_share.core.errors import ForbiddenError, NotFoundError
from campus_share.core.settings import settings
from campus_share.services.downloads import (
    authorize_download,
    check_referer,
    issue_signed_url,
    sign_download,
    verify_signature,
)

TTL = settings.download_url_ttl_ms


def test_signature_is_hmac_sha256_over_id_and_timestamp() -> None:
    expected = hmac.new(b"k", b"12:1700000000000", hashlib.sha256).hexdigest()

    assert sign_download(12, 1_700_000_000_000, secret="k") == expected


def test_signature_depends_on_secret() -> None:
    assert sign_download(1, 5, secret="a") != sign_download(1, 5, secret="b")


def test_issued_link_validity_window(db_session, test_resource) -> None:
    signed = issue_signed_url(db_session, test_resource.id, now_ms=0)

    assert signed.timestamp == 0
    assert signed.url.startswith(f"/api/v1/resources/{test_resource.id}/download?sig=")
    verify_signature(test_resource.id, signed.signature, "0", now_ms=TTL - 1)
    verify_signature(test_resource.id, signed.signature, "0", now_ms=TTL)
    with pytest.raises(ForbiddenError, match="expired"):
        verify_signature(test_resource.id, signed.signature, "0", now_ms=TTL + 1)


def test_issue_for_missing_resource(db_session) -> None:
    with pytest.raises(NotFoundError):
        issue_signed_url(db_session, 31337, now_ms=0)


def test_expires_at_is_one_ttl_after_issue(db_session, test_resource) -> None:
    signed = issue_signed_url(db_session, test_resource.id, now_ms=1_700_000_000_000)

    assert int(signed.expires_at.timestamp() * 1000) == 1_700_000_000_000 + TTL


@pytest.mark.parametrize("position", [0, 17, 63])
def test_any_changed_character_invalidates(position) -> None:
    signature = sign_download(9, 1_000)
    replacement = "a" if signature[position] != "a" else "b"
    tampered = signature[:position] + replacement + signature[position + 1 :]

    with pytest.raises(ForbiddenError, match="Invalid download signature"):
        verify_signature(9, tampered, 1_000, now_ms=1_000)


@pytest.mark.parametrize("timestamp", ["", "soon", "12.5"])
def test_unparseable_timestamp(timestamp) -> None:
    with pytest.raises(ForbiddenError):
        verify_signature(9, sign_download(9, 1_000), timestamp, now_ms=1_000)


def test_allowed_referer_passes() -> None:
    check_referer("http://localhost:3000/browse", ["localhost:3000"], allow_missing=False)


def test_foreign_referer_fails() -> None:
    with pytest.raises(ForbiddenError):
        check_referer("http://localhost:4000/", ["localhost:3000"], allow_missing=True)


def test_missing_referer_follows_policy() -> None:
    check_referer(None, ["localhost:3000"], allow_missing=True)
    with pytest.raises(ForbiddenError):
        check_referer(None, ["localhost:3000"], allow_missing=False)


def test_rejected_download_leaves_counter(db_session, test_resource, storage) -> None:
    with pytest.raises(ForbiddenError):
        authorize_download(
            db_session,
            test_resource.id,
            storage=storage,
            signature="deadbeef",
            timestamp="0",
            now_ms=0,
        )

    db_session.refresh(test_resource)
    assert test_resource.download_count == 0
