"""Administrative endpoints for moderating resources and users."""

from typing import Annotated

from fastapi import APIRouter, Query

from campus_share.models.resource import Resource
from campus_share.repositories.resource_repo import ResourceRepository
from campus_share.schemas.admin import (
    AdminResourceDetails,
    AdminResourceDetailsResponse,
    DashboardResponse,
    DashboardTotals,
    DownloadPointResponse,
    DownloadsOverTimeResponse,
)
from campus_share.schemas.common import MessageResponse, Pagination
from campus_share.schemas.resource import ResourceListResponse, ResourceResponse
from campus_share.schemas.user import (
    RoleUpdateRequest,
    RoleUpdateResponse,
    UserListResponse,
    UserResponse,
    VoterSummary,
)
from campus_share.services import accounts, reporting, resources

from ..dependencies import AdminDep, SessionDep, StorageDep

router = APIRouter(prefix="/admin", tags=["admin"])

AdminPageParam = Annotated[int, Query(description="1-indexed page number")]
AdminLimitParam = Annotated[int, Query(description="Items per page (1-100)")]


def _with_counts(repo: ResourceRepository, items: list[Resource]) -> list[ResourceResponse]:
    counts = repo.vote_counts_for(resource.id for resource in items)
    return [ResourceResponse.from_resource(item, counts=counts[item.id]) for item in items]


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(admin: AdminDep, db: SessionDep) -> DashboardResponse:
    """Return headline totals with the newest and most downloaded resources."""
    stats = reporting.dashboard(db)
    repo = ResourceRepository(db)
    return DashboardResponse(
        stats=DashboardTotals(
            total_resources=stats.total_resources,
            total_users=stats.total_users,
            total_downloads=stats.total_downloads,
        ),
        recent_resources=_with_counts(repo, stats.recent_resources),
        top_resources=_with_counts(repo, stats.top_resources),
    )


@router.get("/resources", response_model=ResourceListResponse)
async def list_resources(
    admin: AdminDep,
    db: SessionDep,
    page: AdminPageParam = 1,
    limit: AdminLimitParam = reporting.ADMIN_DEFAULT_PAGE_SIZE,
    sort: str = "newest",
) -> ResourceListResponse:
    """List every resource for moderation."""
    result = reporting.admin_resources(db, page=page, limit=limit, sort=sort)
    return ResourceListResponse(
        resources=_with_counts(ResourceRepository(db), result.items),
        pagination=Pagination.from_page(result),
    )


@router.get("/resources/{resource_id}", response_model=AdminResourceDetailsResponse)
async def get_resource_details(
    resource_id: int,
    admin: AdminDep,
    db: SessionDep,
) -> AdminResourceDetailsResponse:
    """Return a resource with its uploader and both voter lists."""
    details = reporting.resource_details(db, resource_id)
    base = ResourceResponse.from_resource(
        details.resource,
        counts=(len(details.upvoters), len(details.downvoters)),
    )
    return AdminResourceDetailsResponse(
        resource=AdminResourceDetails(
            **base.model_dump(exclude={"uploaded_by"}),
            uploaded_by=UserResponse.model_validate(details.resource.uploaded_by),
            upvoters=[VoterSummary.model_validate(user) for user in details.upvoters],
            downvoters=[VoterSummary.model_validate(user) for user in details.downvoters],
        )
    )


@router.delete("/resources/{resource_id}", response_model=MessageResponse)
async def delete_resource(
    resource_id: int,
    admin: AdminDep,
    db: SessionDep,
    storage: StorageDep,
) -> MessageResponse:
    """Remove any resource."""
    resources.delete_resource(db, resource_id, admin, storage=storage)
    return MessageResponse(message="Resource deleted successfully")


@router.get("/users", response_model=UserListResponse)
async def list_users(
    admin: AdminDep,
    db: SessionDep,
    page: AdminPageParam = 1,
    limit: AdminLimitParam = reporting.ADMIN_DEFAULT_PAGE_SIZE,
    role: str | None = None,
) -> UserListResponse:
    """List accounts newest first."""
    result = reporting.admin_users(db, page=page, limit=limit, role=role)
    return UserListResponse(
        users=[UserResponse.model_validate(user) for user in result.items],
        pagination=Pagination.from_page(result),
    )


@router.put("/users/{user_id}/role", response_model=RoleUpdateResponse)
async def update_user_role(
    user_id: int,
    payload: RoleUpdateRequest,
    admin: AdminDep,
    db: SessionDep,
) -> RoleUpdateResponse:
    """Grant or revoke the admin role."""
    user = accounts.set_role(db, user_id, payload.role)
    return RoleUpdateResponse(user=UserResponse.model_validate(user))


@router.get("/metrics/downloads-over-time", response_model=DownloadsOverTimeResponse)
async def downloads_over_time(
    admin: AdminDep,
    db: SessionDep,
    days: Annotated[
        int, Query(description="Window size in days (1-365)")
    ] = reporting.DEFAULT_WINDOW_DAYS,
) -> DownloadsOverTimeResponse:
    """Downloads of recently created resources, bucketed by creation day."""
    points = reporting.downloads_over_time(db, days)
    return DownloadsOverTimeResponse(
        points=[
            DownloadPointResponse(date=point.date, downloads=point.downloads) for point in points
        ]
    )
