"""Admin console and statistics schemas."""
from __future__ import annotations

from pydantic import Field

from campus_share.schemas.common import CamelModel
from campus_share.schemas.resource import ResourceResponse
from campus_share.schemas.user import UserResponse, UserSummary, VoterSummary


class DashboardTotals(CamelModel):
    total_resources: int
    total_users: int
    total_downloads: int


class DashboardResponse(CamelModel):
    stats: DashboardTotals
    recent_resources: list[ResourceResponse]
    top_resources: list[ResourceResponse]


class AdminResourceDetails(ResourceResponse):
    """Resource detail including the members of each vote set."""

    uploaded_by: UserResponse
    upvoters: list[VoterSummary] = Field(default_factory=list)
    downvoters: list[VoterSummary] = Field(default_factory=list)


class AdminResourceDetailsResponse(CamelModel):
    resource: AdminResourceDetails


class DownloadPointResponse(CamelModel):
    date: str = Field(..., description="Creation day, YYYY-MM-DD")
    downloads: int


class DownloadsOverTimeResponse(CamelModel):
    points: list[DownloadPointResponse]


class ContributorTotals(CamelModel):
    downloads: int
    upvotes: int
    downvotes: int
    net: int


class ContributorResponse(CamelModel):
    user: UserSummary | None
    totals: ContributorTotals


class TopContributorsResponse(CamelModel):
    contributors: list[ContributorResponse]
