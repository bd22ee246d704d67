"""Reporter credibility API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from fastapi import status

from content_moderation_api.api.dependencies import get_credibility_service
from content_moderation_api.auth.dependencies import get_current_caller
from content_moderation_api.auth.dependencies import require_moderator
from content_moderation_api.auth.models import Caller
from content_moderation_api.database.models.reporter_credibility import (
    CredibilityStats,
)
from content_moderation_api.database.models.reporter_credibility import (
    CredibilityUpdate,
)
from content_moderation_api.database.models.reporter_credibility import (
    ReporterCredibility,
)
from content_moderation_api.database.models.reporter_credibility import (
    ReportOutcome,
)
from content_moderation_api.database.models.reporter_credibility import (
    ReportTrustScore,
)
from content_moderation_api.database.models.reporter_credibility import TopReporter
from content_moderation_api.errors import ErrorKind
from content_moderation_api.services.credibility_service import CredibilityService

router = APIRouter(prefix="/moderation/credibility", tags=["moderation-credibility"])

CredibilityServiceDep = Annotated[CredibilityService, Depends(get_credibility_service)]


@router.get("/top", response_model=list[TopReporter])
async def get_top_reporters(
    caller: Annotated[Caller, Depends(get_current_caller)],
    credibility_service: CredibilityServiceDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
):
    """Get the most credible reporters."""
    return await credibility_service.get_top_reporters(limit)


@router.get("/stats", response_model=CredibilityStats)
async def get_credibility_stats(
    moderator: Annotated[Caller, Depends(require_moderator)],
    credibility_service: CredibilityServiceDep,
):
    """Get system-wide credibility statistics."""
    return await credibility_service.get_stats()


@router.post("/outcomes", response_model=CredibilityUpdate)
async def record_report_outcome(
    outcome: ReportOutcome,
    moderator: Annotated[Caller, Depends(require_moderator)],
    credibility_service: CredibilityServiceDep,
):
    """Record whether a report turned out to be accurate."""
    return await credibility_service.record_outcome(outcome)


@router.get("/{user_pk}", response_model=ReporterCredibility)
async def get_reporter_credibility(
    user_pk: UUID,
    caller: Annotated[Caller, Depends(get_current_caller)],
    credibility_service: CredibilityServiceDep,
):
    """Get a reporter's credibility profile."""
    profile = await credibility_service.get_profile(user_pk)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "kind": ErrorKind.NOT_FOUND.value,
                "message": "No credibility profile for this user",
            },
        )
    return profile


@router.get("/{user_pk}/trust", response_model=ReportTrustScore)
async def get_report_trust(
    user_pk: UUID,
    caller: Annotated[Caller, Depends(get_current_caller)],
    credibility_service: CredibilityServiceDep,
    report_id: Annotated[str, Query(min_length=1, max_length=255)],
):
    """Get the trust weight of a report by this user."""
    return await credibility_service.get_report_trust_score(user_pk, report_id)
