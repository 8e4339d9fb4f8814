"""Public statistics endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from campus_share.schemas.admin import (
    ContributorResponse,
    ContributorTotals,
    TopContributorsResponse,
)
from campus_share.schemas.user import UserSummary
from campus_share.services import reporting

from ..dependencies import SessionDep

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/top-contributors", response_model=TopContributorsResponse)
async def top_contributors(
    db: SessionDep,
    limit: Annotated[
        int, Query(description="Number of contributors (1-50)")
    ] = reporting.DEFAULT_CONTRIBUTORS,
    by: Annotated[str, Query(description="downloads, upvotes or net")] = "downloads",
) -> TopContributorsResponse:
    """Rank uploaders by the reach of their resources."""
    ranked = reporting.top_contributors(db, limit=limit, by=by)
    return TopContributorsResponse(
        contributors=[
            ContributorResponse(
                user=UserSummary.model_validate(entry.user) if entry.user else None,
                totals=ContributorTotals(
                    downloads=entry.downloads,
                    upvotes=entry.upvotes,
                    downvotes=entry.downvotes,
                    net=entry.net,
                ),
            )
            for entry in ranked
        ]
    )
