"""Download authorization: signed expiring links and the download counter.

A download link carries ``sig`` and ``t`` query parameters where ``t`` is the
issuance time in epoch milliseconds and ``sig`` is the hex HMAC-SHA256 of
``"{resource_id}:{t}"`` under the server's download secret. Validity is
recomputed on every request; nothing is stored.
"""
from __future__ import annotations

import hashlib
import hmac
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import urlsplit

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campus_share.core.errors import ForbiddenError, InternalError, NotFoundError
from campus_share.core.settings import settings
from campus_share.db.time import epoch_millis, from_epoch_millis
from campus_share.repositories.resource_repo import ResourceRepository
from campus_share.services.storage import DownloadTarget, LocalFileStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignedDownloadUrl:
    url: str
    expires_at: datetime
    signature: str
    timestamp: int


def sign_download(resource_id: int, timestamp_ms: int, secret: str | None = None) -> str:
    """Return the hex HMAC-SHA256 signature for a resource/timestamp pair."""
    key = (secret or settings.download_secret).encode("utf-8")
    message = f"{resource_id}:{timestamp_ms}".encode("utf-8")
    return hmac.new(key, message, hashlib.sha256).hexdigest()


def download_path(resource_id: int) -> str:
    return f"/api/v1/resources/{resource_id}/download"


def issue_signed_url(
    db: Session,
    resource_id: int,
    *,
    now_ms: int | None = None,
    base_url: str = "",
) -> SignedDownloadUrl:
    """Issue a signed, time-limited download URL for an existing resource.

    Raises:
        NotFoundError: If the resource does not exist.
    """
    if not ResourceRepository(db).exists(resource_id):
        raise NotFoundError("Resource not found")

    timestamp = epoch_millis() if now_ms is None else now_ms
    signature = sign_download(resource_id, timestamp)
    url = f"{base_url.rstrip('/')}{download_path(resource_id)}?sig={signature}&t={timestamp}"
    return SignedDownloadUrl(
        url=url,
        expires_at=from_epoch_millis(timestamp + settings.download_url_ttl_ms),
        signature=signature,
        timestamp=timestamp,
    )


def verify_signature(
    resource_id: int,
    signature: str,
    timestamp: str | int,
    *,
    now_ms: int | None = None,
) -> None:
    """Validate a signed download request.

    Raises:
        ForbiddenError: If the timestamp is unusable, the link has expired, or
            the signature does not match.
    """
    try:
        issued_at = int(timestamp)
    except (TypeError, ValueError) as err:
        raise ForbiddenError("Invalid download signature") from err

    now = epoch_millis() if now_ms is None else now_ms
    if now - issued_at > settings.download_url_ttl_ms:
        raise ForbiddenError("Download link has expired")

    expected = sign_download(resource_id, issued_at)
    if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
        raise ForbiddenError("Invalid download signature")


def _origin_host(value: str) -> str:
    """Return the ``host[:port]`` part of a Referer or Origin header."""
    parsed = urlsplit(value if "//" in value else f"//{value}")
    return (parsed.netloc or "").lower()


def check_referer(
    referer: str | None,
    allowed_origins: Iterable[str] | None = None,
    *,
    allow_missing: bool | None = None,
) -> None:
    """Gate an unsigned download on the request's referring origin.

    Raises:
        ForbiddenError: If the referer is absent (unless ``allow_missing``) or
            its host is not on the allow-list.
    """
    if allowed_origins is None:
        allowed_origins = settings.download_allowed_origins
    allowed = {_origin_host(origin) for origin in allowed_origins}
    if allow_missing is None:
        allow_missing = settings.download_allow_missing_referer

    if not referer:
        if allow_missing:
            return
        raise ForbiddenError("Download requires a signed link")

    if _origin_host(referer) not in allowed:
        raise ForbiddenError(
            "Invalid referer. Download must be initiated from authorized domain."
        )


def authorize_download(
    db: Session,
    resource_id: int,
    *,
    storage: LocalFileStorage,
    signature: str | None = None,
    timestamp: str | None = None,
    referer: str | None = None,
    now_ms: int | None = None,
) -> DownloadTarget:
    """Authorize a download, count it, and return where to fetch the bytes.

    The counter is incremented exactly once per authorized call, after every
    check has passed and before any bytes are served; a later streaming
    failure does not undo it.

    Raises:
        NotFoundError: If the resource or its backing file is missing.
        ForbiddenError: If the signature or referer check fails.
        InternalError: If the counter update cannot be stored.
    """
    repo = ResourceRepository(db)
    resource = repo.require(resource_id)

    if signature and timestamp:
        verify_signature(resource_id, signature, timestamp, now_ms=now_ms)
    else:
        check_referer(referer)

    target = storage.resolve(resource.file_location)

    try:
        if not repo.increment_downloads(resource_id):
            raise NotFoundError("Resource not found")
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Download counter update failed for resource %s", resource_id, exc_info=True)
        raise InternalError("Internal server error during download") from err
    db.expire(resource, ["download_count"])

    logger.info(
        "Authorized download of resource %s (%s)",
        resource_id,
        "signed" if signature and timestamp else "referer",
    )
    return target
