"""Resource-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field

from campus_share.models.resource import SEMESTER_MAX, SEMESTER_MIN, Resource
from campus_share.repositories.resource_repo import DIRECTION_DOWN, DIRECTION_UP
from campus_share.schemas.common import CamelModel, Pagination
from campus_share.schemas.user import UserSummary


class ResourceCreate(CamelModel):
    """Metadata submitted when publishing an uploaded file."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    department: str = Field(..., min_length=1, max_length=100)
    subject: str = Field(..., min_length=1, max_length=100)
    semester: int = Field(..., ge=SEMESTER_MIN, le=SEMESTER_MAX)
    file_url: str = Field(..., min_length=1, description="Location returned by the upload endpoint")
    file_public_id: str | None = Field(None, description="Identifier in remote object storage")


class ResourceResponse(CamelModel):
    """A resource with aggregate vote counts and the caller's vote state."""

    id: int
    title: str
    description: str
    department: str
    subject: str
    semester: int
    file_url: str
    file_public_id: str | None = None
    uploaded_by: UserSummary
    upvotes: int = 0
    downvotes: int = 0
    downloads: int = 0
    created_at: datetime
    user_has_upvoted: bool = False
    user_has_downvoted: bool = False
    score: int | None = Field(None, description="Search relevance, present on search results")

    @classmethod
    def from_resource(
        cls,
        resource: Resource,
        *,
        counts: tuple[int, int] = (0, 0),
        direction: int | None = None,
        score: int | None = None,
    ) -> ResourceResponse:
        upvotes, downvotes = counts
        return cls(
            id=resource.id,
            title=resource.title,
            description=resource.description,
            department=resource.department,
            subject=resource.subject,
            semester=resource.semester,
            file_url=resource.file_location,
            file_public_id=resource.external_storage_id,
            uploaded_by=UserSummary.model_validate(resource.uploaded_by),
            upvotes=upvotes,
            downvotes=downvotes,
            downloads=resource.download_count,
            created_at=resource.created_at,
            user_has_upvoted=direction == DIRECTION_UP,
            user_has_downvoted=direction == DIRECTION_DOWN,
            score=score,
        )


class ResourceEnvelope(CamelModel):
    resource: ResourceResponse


class ResourceCreatedResponse(ResourceEnvelope):
    message: str = "Resource created successfully"


class ResourceListResponse(CamelModel):
    resources: list[ResourceResponse]
    pagination: Pagination


class DownloadUrlResponse(CamelModel):
    download_url: str
    expires_at: datetime


class UploadResponse(CamelModel):
    message: str = "File uploaded successfully"
    file_url: str
    filename: str
