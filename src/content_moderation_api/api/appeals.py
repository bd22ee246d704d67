"""Appeals API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from fastapi import status

from content_moderation_api.api.dependencies import get_appeal_service
from content_moderation_api.api.errors import unwrap_or_raise
from content_moderation_api.auth.dependencies import get_current_caller
from content_moderation_api.auth.models import Caller
from content_moderation_api.database.models.appeal import Appeal
from content_moderation_api.database.models.appeal import AppealCreate
from content_moderation_api.database.models.appeal import AppealDecision
from content_moderation_api.database.models.appeal import AppealNotification
from content_moderation_api.database.models.appeal import AppealPage
from content_moderation_api.database.models.base import AppealStatus
from content_moderation_api.services.appeal_service import AppealService

router = APIRouter(prefix="/appeals", tags=["appeals"])

AppealServiceDep = Annotated[AppealService, Depends(get_appeal_service)]
CallerDep = Annotated[Caller, Depends(get_current_caller)]


# User-facing endpoints
@router.post("", response_model=Appeal, status_code=status.HTTP_201_CREATED)
async def file_appeal(
    appeal_data: AppealCreate,
    caller: CallerDep,
    appeal_service: AppealServiceDep,
):
    """File an appeal against a moderation decision."""
    return unwrap_or_raise(await appeal_service.file_appeal(caller, appeal_data))


@router.get("/mine", response_model=AppealPage)
async def get_my_appeals(
    caller: CallerDep,
    appeal_service: AppealServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
    """Get the caller's appeals."""
    return unwrap_or_raise(await appeal_service.list_user_appeals(caller, page, limit))


@router.get("/notifications", response_model=list[AppealNotification])
async def get_my_notifications(
    caller: CallerDep,
    appeal_service: AppealServiceDep,
    unread_only: bool = False,
):
    """Get the caller's appeal notifications."""
    return unwrap_or_raise(
        await appeal_service.list_notifications(caller, unread_only=unread_only)
    )


@router.patch("/{appeal_pk}/notifications/read")
async def mark_notifications_read(
    appeal_pk: UUID,
    caller: CallerDep,
    appeal_service: AppealServiceDep,
):
    """Mark the caller's notifications for an appeal as read."""
    updated = unwrap_or_raise(
        await appeal_service.mark_notifications_read(caller, appeal_pk)
    )
    return {"updated": updated}


# Moderator endpoints
@router.get("/queue", response_model=AppealPage)
async def get_appeals_queue(
    caller: CallerDep,
    appeal_service: AppealServiceDep,
    status_filter: Annotated[AppealStatus | None, Query(alias="status")] = (
        AppealStatus.PENDING
    ),
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
    """Get appeals awaiting review (moderators only)."""
    return unwrap_or_raise(
        await appeal_service.list_appeals(caller, status_filter, page, limit)
    )


@router.get("/{appeal_pk}", response_model=Appeal)
async def get_appeal(
    appeal_pk: UUID,
    caller: CallerDep,
    appeal_service: AppealServiceDep,
):
    """Get an appeal."""
    return unwrap_or_raise(await appeal_service.get_appeal(caller, appeal_pk))


@router.put("/{appeal_pk}/decision", response_model=Appeal)
async def decide_appeal(
    appeal_pk: UUID,
    decision: AppealDecision,
    caller: CallerDep,
    appeal_service: AppealServiceDep,
):
    """Approve or reject an appeal (moderators only)."""
    return unwrap_or_raise(
        await appeal_service.decide_appeal(caller, appeal_pk, decision)
    )
