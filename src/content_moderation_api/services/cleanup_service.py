"""Periodic maintenance for the moderation pipeline."""

import logging

from datetime import UTC
from datetime import datetime
from datetime import timedelta

from pydantic import BaseModel

from content_moderation_api.config.moderation import ModerationSettings
from content_moderation_api.database.repositories.moderated_content import (
    ModeratedContentRepository,
)
from content_moderation_api.database.repositories.queue import QueueItemRepository
from content_moderation_api.services.content_actions import ContentActionService
from content_moderation_api.services.token_service import TokenService

logger = logging.getLogger(__name__)


class CleanupReport(BaseModel):
    """What a cleanup run changed."""

    tokens_purged: int = 0
    content_auto_approved: int = 0
    ran_at: datetime


class CleanupService:
    """Purges expired tokens and auto-approves content left pending too long."""

    def __init__(
        self,
        token_service: TokenService,
        content_repository: ModeratedContentRepository,
        queue_repository: QueueItemRepository,
        content_actions: ContentActionService,
        settings: ModerationSettings,
    ):
        self.token_service = token_service
        self.content_repository = content_repository
        self.queue_repository = queue_repository
        self.content_actions = content_actions
        self.settings = settings

    async def run(self, now: datetime | None = None) -> CleanupReport:
        now = now or datetime.now(UTC)

        tokens_purged = await self.token_service.purge_expired(
            now - timedelta(hours=self.settings.token_retention_hours)
        )
        approved = await self.auto_approve_stale_content(
            now - timedelta(hours=self.settings.stale_pending_hours)
        )

        logger.info(
            f"Cleanup finished: {tokens_purged} tokens purged, "
            f"{approved} stale items auto-approved"
        )
        return CleanupReport(
            tokens_purged=tokens_purged, content_auto_approved=approved, ran_at=now
        )

    async def auto_approve_stale_content(self, cutoff: datetime) -> int:
        """Auto-approve content still pending since before the cutoff.

        The open queue item is closed as auto-approved along with the record.
        """
        notes = f"Auto-approved after {self.settings.stale_pending_hours}h pending"
        stale = await self.content_repository.list_stale_pending(cutoff)
        approved = 0
        for record in stale:
            changed = await self.queue_repository.auto_approve_stale(
                record.content_type, record.content_id, notes
            )
            if not changed:
                logger.info(
                    f"Skipping {record.content_type.value} {record.content_id}: "
                    "moderated since it was listed"
                )
                continue
            await self.content_actions.restore(
                record.content_type, record.content_id, None
            )
            approved += 1
        return approved
