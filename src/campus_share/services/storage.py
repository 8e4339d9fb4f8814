"""File storage for uploaded resources.

Files either live in the local upload directory (``/uploads/<name>``
locations) or in a remote object store, in which case the stored location is
an absolute URL that downloads redirect to.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Final

from fastapi import UploadFile

from campus_share.core.errors import InvalidArgumentError, NotFoundError
from campus_share.core.settings import settings
from campus_share.db.time import epoch_millis

logger = logging.getLogger(__name__)

LOCAL_PREFIX: Final[str] = "/uploads/"
CHUNK_SIZE: Final[int] = 1024 * 1024

ALLOWED_CONTENT_TYPES: Final[frozenset[str]] = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "text/plain",
    }
)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def sanitize_filename(filename: str) -> str:
    """Replace anything outside ``[A-Za-z0-9_.-]`` with underscores."""
    cleaned = _UNSAFE_CHARS.sub("_", PurePosixPath(filename.replace("\\", "/")).name)
    return cleaned.strip(".") or "upload"


def is_allowed_content_type(content_type: str | None) -> bool:
    """Return True for images and the supported document formats."""
    if not content_type:
        return False
    return content_type.startswith("image/") or content_type in ALLOWED_CONTENT_TYPES


def is_remote_location(file_location: str) -> bool:
    """Return True when the file lives in remote object storage."""
    return file_location.startswith(("http://", "https://"))


@dataclass(frozen=True)
class StoredFile:
    filename: str
    file_location: str
    size_bytes: int
    content_type: str | None


@dataclass(frozen=True)
class DownloadTarget:
    """Where the bytes for a download come from.

    Exactly one of ``redirect_url`` and ``path`` is set.
    """

    filename: str
    redirect_url: str | None = None
    path: Path | None = None


class LocalFileStorage:
    """Stores uploads on the local filesystem and resolves download targets."""

    def __init__(self, base_dir: Path, *, max_bytes: int | None = None) -> None:
        self._base_dir = base_dir
        self._max_bytes = max_bytes if max_bytes is not None else settings.max_upload_bytes
        self._base_dir.mkdir(parents=True, exist_ok=True)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    async def save_upload(self, upload: UploadFile | None) -> StoredFile:
        """Persist an uploaded file, enforcing type and size limits.

        Raises:
            InvalidArgumentError: If no file was sent, its type is not allowed,
                or it exceeds the size limit. No partial file is left behind.
        """
        if upload is None or not upload.filename:
            raise InvalidArgumentError("No file uploaded")
        if not is_allowed_content_type(upload.content_type):
            raise InvalidArgumentError("Invalid file type")

        stored_name = f"{epoch_millis()}-{sanitize_filename(upload.filename)}"
        target = self._base_dir / stored_name
        size = 0
        try:
            with target.open("wb") as handle:
                while chunk := await upload.read(CHUNK_SIZE):
                    size += len(chunk)
                    if size > self._max_bytes:
                        raise InvalidArgumentError(
                            f"File too large (limit {self._max_bytes} bytes)"
                        )
                    handle.write(chunk)
        except BaseException:
            target.unlink(missing_ok=True)
            raise
        finally:
            await upload.close()

        logger.info("Stored upload %s (%d bytes)", stored_name, size)
        return StoredFile(
            filename=stored_name,
            file_location=f"{LOCAL_PREFIX}{stored_name}",
            size_bytes=size,
            content_type=upload.content_type,
        )

    def local_path(self, file_location: str) -> Path:
        """Map a stored location onto a path inside the upload directory."""
        return self._base_dir / PurePosixPath(file_location).name

    def resolve(self, file_location: str) -> DownloadTarget:
        """Return the redirect or local path that serves ``file_location``.

        Raises:
            NotFoundError: If a local file is missing from disk.
        """
        if is_remote_location(file_location):
            name = PurePosixPath(file_location.split("?", 1)[0]).name or "download"
            return DownloadTarget(filename=name, redirect_url=file_location)

        path = self.local_path(file_location)
        if not path.is_file():
            raise NotFoundError("File not found on server")
        return DownloadTarget(filename=path.name, path=path)

    def delete(self, file_location: str) -> None:
        """Remove a local file; remote objects are left to their provider."""
        if is_remote_location(file_location):
            return
        path = self.local_path(file_location)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to remove stored file %s: %s", path, exc)


@lru_cache(maxsize=1)
def get_storage() -> LocalFileStorage:
    """Return the process-wide storage backend."""
    return LocalFileStorage(Path(settings.upload_dir).expanduser().resolve())
