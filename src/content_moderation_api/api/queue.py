"""Moderation queue API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from fastapi import Response
from fastapi import status

from content_moderation_api.api.dependencies import get_queue_service
from content_moderation_api.api.errors import unwrap_or_raise
from content_moderation_api.auth.dependencies import get_current_caller
from content_moderation_api.auth.models import Caller
from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.base import ModerationPriority
from content_moderation_api.database.models.base import ModerationStatus
from content_moderation_api.database.models.queue import QueueFilters
from content_moderation_api.database.models.queue import QueueItem
from content_moderation_api.database.models.queue import QueueItemDetail
from content_moderation_api.database.models.queue import QueueListResponse
from content_moderation_api.database.models.queue import QueueResolution
from content_moderation_api.database.models.queue import QueueSubmission
from content_moderation_api.database.models.queue import ResolutionResult
from content_moderation_api.database.models.queue import SubmissionResult
from content_moderation_api.services.queue_service import QueueService

router = APIRouter(prefix="/moderation/queue", tags=["moderation-queue"])

QueueServiceDep = Annotated[QueueService, Depends(get_queue_service)]
CallerDep = Annotated[Caller, Depends(get_current_caller)]


@router.post(
    "", response_model=SubmissionResult, status_code=status.HTTP_201_CREATED
)
async def submit_content(
    submission: QueueSubmission,
    response: Response,
    caller: CallerDep,
    queue_service: QueueServiceDep,
):
    """Submit content for moderation."""
    reporter_pk = caller.pk if submission.is_report else None
    result = unwrap_or_raise(await queue_service.submit(submission, reporter_pk))
    if result.already_queued:
        response.status_code = status.HTTP_200_OK
    return result


@router.get("", response_model=QueueListResponse)
async def list_queue(
    caller: CallerDep,
    queue_service: QueueServiceDep,
    status_filter: Annotated[ModerationStatus | None, Query(alias="status")] = None,
    content_type: ContentType | None = None,
    priority: ModerationPriority | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
    """List queue items (moderators only)."""
    filters = QueueFilters(
        status=status_filter,
        content_type=content_type,
        priority=priority,
        page=page,
        limit=limit,
    )
    return unwrap_or_raise(await queue_service.list_items(caller, filters))


@router.get("/{item_pk}", response_model=QueueItemDetail)
async def get_queue_item(
    item_pk: UUID,
    caller: CallerDep,
    queue_service: QueueServiceDep,
):
    """Get a queue item with its history. Claims unassigned items."""
    return unwrap_or_raise(await queue_service.get_item(caller, item_pk))


@router.post("/{item_pk}/claim", response_model=QueueItem)
async def claim_queue_item(
    item_pk: UUID,
    caller: CallerDep,
    queue_service: QueueServiceDep,
):
    """Claim a queue item for review."""
    return unwrap_or_raise(await queue_service.claim(caller, item_pk))


@router.put("/{item_pk}", response_model=ResolutionResult)
async def resolve_queue_item(
    item_pk: UUID,
    resolution: QueueResolution,
    caller: CallerDep,
    queue_service: QueueServiceDep,
):
    """Approve or reject a queue item."""
    return unwrap_or_raise(await queue_service.resolve(caller, item_pk, resolution))
