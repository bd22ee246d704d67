"""Maintenance API endpoints."""

from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends

from content_moderation_api.api.dependencies import get_cleanup_service
from content_moderation_api.auth.dependencies import require_moderator
from content_moderation_api.auth.models import Caller
from content_moderation_api.services.cleanup_service import CleanupReport
from content_moderation_api.services.cleanup_service import CleanupService

router = APIRouter(prefix="/moderation/maintenance", tags=["moderation-maintenance"])


@router.post("/cleanup", response_model=CleanupReport)
async def run_cleanup(
    moderator: Annotated[Caller, Depends(require_moderator)],
    cleanup_service: Annotated[CleanupService, Depends(get_cleanup_service)],
):
    """Purge expired tokens and auto-approve stale pending content."""
    return await cleanup_service.run()
