"""File upload endpoint."""

import logging

from fastapi import APIRouter, File, UploadFile, status

from campus_share.schemas.resource import UploadResponse

from ..dependencies import CurrentUserDep, StorageDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    current_user: CurrentUserDep,
    storage: StorageDep,
    file: UploadFile | None = File(None),
) -> UploadResponse:
    """Store an uploaded document and return the location to publish it under."""
    stored = await storage.save_upload(file)
    logger.info("User %s uploaded %s", current_user.id, stored.filename)
    return UploadResponse(file_url=stored.file_location, filename=stored.filename)
