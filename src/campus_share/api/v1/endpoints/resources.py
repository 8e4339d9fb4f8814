"""Resource endpoints: publishing, browsing, voting and downloading."""

from typing import Annotated

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import FileResponse, RedirectResponse, Response
from sqlalchemy.orm import Session

from campus_share.core.errors import InvalidArgumentError
from campus_share.models import User
from campus_share.repositories.resource_repo import ResourceRepository
from campus_share.schemas.common import MessageResponse, Pagination
from campus_share.schemas.resource import (
    DownloadUrlResponse,
    ResourceCreate,
    ResourceCreatedResponse,
    ResourceEnvelope,
    ResourceListResponse,
    ResourceResponse,
)
from campus_share.schemas.vote import VoteRequest, VoteResponse
from campus_share.services import downloads, listing, resources, votes
from campus_share.services.listing import ListingQuery, Page

from ..dependencies import CurrentUserDep, OptionalUserDep, SessionDep, StorageDep

router = APIRouter(prefix="/resources", tags=["resources"])

PageParam = Annotated[int, Query(description="1-indexed page number")]
LimitParam = Annotated[int, Query(description="Items per page (1-50)")]


def _render_page(db: Session, page: Page, viewer: User | None) -> ResourceListResponse:
    """Attach vote counts and the viewer's vote state to a page of resources."""
    repo = ResourceRepository(db)
    ids = [resource.id for resource in page.items]
    counts = repo.vote_counts_for(ids)
    directions = repo.user_directions(ids, viewer.id) if viewer else {}
    return ResourceListResponse(
        resources=[
            ResourceResponse.from_resource(
                resource,
                counts=counts[resource.id],
                direction=directions.get(resource.id),
                score=page.scores.get(resource.id),
            )
            for resource in page.items
        ],
        pagination=Pagination.from_page(page),
    )


def _render_resource(db: Session, resource_id: int, viewer: User | None) -> ResourceResponse:
    repo = ResourceRepository(db)
    resource = repo.require(resource_id)
    direction = repo.user_direction(resource_id, viewer.id) if viewer else None
    return ResourceResponse.from_resource(
        resource,
        counts=repo.vote_counts(resource_id),
        direction=direction,
    )


@router.post("", response_model=ResourceCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_resource(
    payload: ResourceCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ResourceCreatedResponse:
    """Publish metadata for a previously uploaded file."""
    resource = resources.create_resource(
        db,
        current_user,
        title=payload.title,
        description=payload.description,
        department=payload.department,
        subject=payload.subject,
        semester=payload.semester,
        file_location=payload.file_url,
        external_storage_id=payload.file_public_id,
    )
    return ResourceCreatedResponse(resource=ResourceResponse.from_resource(resource))


@router.get("", response_model=ResourceListResponse)
async def list_resources(
    db: SessionDep,
    viewer: OptionalUserDep,
    page: PageParam = 1,
    limit: LimitParam = listing.DEFAULT_PAGE_SIZE,
    department: str | None = None,
    subject: str | None = None,
    semester: int | None = None,
    sort: str = "new",
    search: str | None = None,
) -> ResourceListResponse:
    """Browse resources with filters, sorting, pagination and optional search."""
    query = ListingQuery(
        page=page,
        limit=limit,
        department=department,
        subject=subject,
        semester=semester,
        sort=sort,
        search=search,
    )
    return _render_page(db, listing.list_resources(db, query), viewer)


@router.get("/search", response_model=ResourceListResponse)
async def search_resources(
    db: SessionDep,
    viewer: OptionalUserDep,
    q: str | None = None,
    page: PageParam = 1,
    limit: LimitParam = listing.DEFAULT_PAGE_SIZE,
) -> ResourceListResponse:
    """Rank resources by weighted relevance to ``q``."""
    if not q or not q.strip():
        raise InvalidArgumentError("Search query is required")
    query = ListingQuery(page=page, limit=limit, search=q)
    return _render_page(db, listing.list_resources(db, query), viewer)


@router.get("/{resource_id}", response_model=ResourceEnvelope)
async def get_resource(
    resource_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> ResourceEnvelope:
    """Return a single resource."""
    return ResourceEnvelope(resource=_render_resource(db, resource_id, viewer))


@router.delete("/{resource_id}", response_model=MessageResponse)
async def delete_resource(
    resource_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    storage: StorageDep,
) -> MessageResponse:
    """Delete a resource; only its uploader or an admin may do so."""
    resources.delete_resource(db, resource_id, current_user, storage=storage)
    return MessageResponse(message="Resource deleted successfully")


@router.post("/{resource_id}/vote", response_model=VoteResponse)
async def vote_resource(
    resource_id: int,
    payload: VoteRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VoteResponse:
    """Cast, flip or clear the caller's vote."""
    result = votes.apply_vote(db, resource_id, current_user.id, payload.type)
    return VoteResponse(
        upvotes=result.upvotes,
        downvotes=result.downvotes,
        user_has_upvoted=result.user_has_upvoted,
        user_has_downvoted=result.user_has_downvoted,
    )


@router.get("/{resource_id}/download-url", response_model=DownloadUrlResponse)
async def get_download_url(
    resource_id: int,
    request: Request,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DownloadUrlResponse:
    """Issue a signed, time-limited download link."""
    signed = downloads.issue_signed_url(db, resource_id, base_url=str(request.base_url))
    return DownloadUrlResponse(download_url=signed.url, expires_at=signed.expires_at)


@router.get("/{resource_id}/download")
async def download_resource(
    resource_id: int,
    request: Request,
    db: SessionDep,
    storage: StorageDep,
    sig: str | None = None,
    t: str | None = None,
) -> Response:
    """Serve the file behind a signed link or an allowed referer."""
    target = downloads.authorize_download(
        db,
        resource_id,
        storage=storage,
        signature=sig,
        timestamp=t,
        referer=request.headers.get("referer") or request.headers.get("origin"),
    )
    if target.redirect_url is not None:
        return RedirectResponse(target.redirect_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    return FileResponse(target.path, filename=target.filename)
