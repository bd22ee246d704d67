"""Appeal service for the Content Moderation API."""

import logging

from uuid import UUID

import asyncpg

from content_moderation_api.auth.models import Caller
from content_moderation_api.config.moderation import AppealCredibilityPolicy
from content_moderation_api.database.models.appeal import Appeal
from content_moderation_api.database.models.appeal import AppealCreate
from content_moderation_api.database.models.appeal import AppealDecision
from content_moderation_api.database.models.appeal import AppealNotification
from content_moderation_api.database.models.appeal import AppealPage
from content_moderation_api.database.models.base import REMOVED_STATUSES
from content_moderation_api.database.models.base import AppealStatus
from content_moderation_api.database.models.base import ModerationStatus
from content_moderation_api.database.models.base import PaginationInfo
from content_moderation_api.database.models.queue import QueueItem
from content_moderation_api.database.models.reporter_credibility import (
    ReportOutcome,
)
from content_moderation_api.database.repositories.appeal import AppealRepository
from content_moderation_api.database.repositories.appeal import (
    AppealNotificationRepository,
)
from content_moderation_api.database.repositories.moderated_content import (
    ModeratedContentRepository,
)
from content_moderation_api.database.repositories.queue import QueueItemRepository
from content_moderation_api.errors import ErrorKind
from content_moderation_api.errors import ModerationError
from content_moderation_api.errors import Result
from content_moderation_api.services.content_actions import ContentActionService
from content_moderation_api.services.credibility_service import CredibilityService
from content_moderation_api.services.notification_service import (
    AppealNotificationDispatcher,
)

logger = logging.getLogger(__name__)


def appeal_feeds_credibility(
    policy: AppealCredibilityPolicy, queue_item: QueueItem | None
) -> bool:
    """Whether an appeal decision on this queue item adjusts its reporter's score.

    REPORTED_ONLY counts only decisions a moderator made on a reported item,
    not automated rejections.
    """
    if policy == AppealCredibilityPolicy.NEVER:
        return False
    if queue_item is None or queue_item.reporter_pk is None:
        return False
    if policy == AppealCredibilityPolicy.ALWAYS:
        return True
    return queue_item.status == ModerationStatus.REJECTED


def _duplicate_appeal() -> ModerationError:
    return ModerationError(
        kind=ErrorKind.DUPLICATE_APPEAL,
        message="A pending appeal already exists for this content",
    )


class AppealService:
    """Service for managing the appeals workflow."""

    def __init__(
        self,
        appeal_repository: AppealRepository,
        notification_repository: AppealNotificationRepository,
        content_repository: ModeratedContentRepository,
        queue_repository: QueueItemRepository,
        content_actions: ContentActionService,
        credibility_service: CredibilityService,
        notification_dispatcher: AppealNotificationDispatcher,
        credibility_policy: AppealCredibilityPolicy = (
            AppealCredibilityPolicy.REPORTED_ONLY
        ),
    ):
        self.appeal_repository = appeal_repository
        self.notification_repository = notification_repository
        self.content_repository = content_repository
        self.queue_repository = queue_repository
        self.content_actions = content_actions
        self.credibility_service = credibility_service
        self.notification_dispatcher = notification_dispatcher
        self.credibility_policy = credibility_policy

    async def file_appeal(
        self, caller: Caller, appeal_data: AppealCreate
    ) -> Result[Appeal]:
        """File an appeal against the rejection of the caller's content."""
        record = await self.content_repository.get_for_content(
            appeal_data.content_type, appeal_data.content_id
        )
        if record is None:
            return Result.fail(ModerationError.not_found("Content not found"))

        if record.owner_pk is None:
            logger.warning(
                f"Appeal by {caller.pk} refused: no owner recorded for "
                f"{appeal_data.content_type.value} {appeal_data.content_id}"
            )
            return Result.fail(
                ModerationError.forbidden("Content owner is unknown; cannot appeal")
            )
        if record.owner_pk != caller.pk:
            return Result.fail(
                ModerationError.forbidden("Only the content owner can appeal")
            )

        if record.moderation_status not in REMOVED_STATUSES:
            return Result.fail(
                ModerationError.validation("Only rejected content can be appealed")
            )

        pending = await self.appeal_repository.get_pending_for_content(
            appeal_data.content_type, appeal_data.content_id
        )
        if pending is not None:
            return Result.fail(_duplicate_appeal())

        queue_item = await self.queue_repository.find_latest_for_content(
            appeal_data.content_type, appeal_data.content_id
        )

        try:
            appeal = await self.appeal_repository.create_appeal(
                appeal_data, caller.pk, queue_item.pk if queue_item else None
            )
        except asyncpg.UniqueViolationError:
            return Result.fail(_duplicate_appeal())

        logger.info(
            f"Appeal {appeal.pk} filed by user {caller.pk} for "
            f"{appeal.content_type.value} {appeal.content_id}"
        )
        return Result.ok(appeal)

    async def decide_appeal(
        self, caller: Caller, appeal_pk: UUID, decision: AppealDecision
    ) -> Result[Appeal]:
        """Approve or reject a pending appeal."""
        if not caller.can_moderate:
            return Result.fail(ModerationError.forbidden())

        appeal = await self.appeal_repository.get_by_pk(appeal_pk)
        if appeal is None:
            return Result.fail(ModerationError.not_found("Appeal not found"))
        if appeal.status != AppealStatus.PENDING:
            return Result.fail(
                ModerationError.conflict(f"Appeal already {appeal.status.value}")
            )

        decided = await self.appeal_repository.decide(
            appeal_pk, decision.status, caller.pk, decision.moderator_notes
        )
        if decided is None:
            logger.warning(f"Appeal {appeal_pk} was decided concurrently")
            return Result.fail(
                ModerationError.conflict("Appeal was decided concurrently")
            )
        appeal = decided.appeal

        if appeal.status == AppealStatus.APPROVED:
            await self.content_actions.restore(
                appeal.content_type, appeal.content_id, caller.pk
            )

        await self.notification_dispatcher.dispatch(decided.notification, appeal)

        await self._feed_credibility(appeal)

        logger.info(
            f"Appeal {appeal.pk} {appeal.status.value} by moderator {caller.pk}"
        )
        return Result.ok(appeal)

    async def mark_notifications_read(
        self, caller: Caller, appeal_pk: UUID
    ) -> Result[int]:
        """Mark the caller's notifications for an appeal as read."""
        appeal = await self.appeal_repository.get_by_pk(appeal_pk)
        if appeal is None:
            return Result.fail(ModerationError.not_found("Appeal not found"))
        if appeal.user_pk != caller.pk:
            return Result.fail(
                ModerationError.forbidden(
                    "Only the appellant can read these notifications"
                )
            )

        updated = await self.notification_repository.mark_read(appeal_pk, caller.pk)
        return Result.ok(updated)

    async def get_appeal(self, caller: Caller, appeal_pk: UUID) -> Result[Appeal]:
        """Get an appeal visible to the appellant or a moderator."""
        appeal = await self.appeal_repository.get_by_pk(appeal_pk)
        if appeal is None:
            return Result.fail(ModerationError.not_found("Appeal not found"))
        if appeal.user_pk != caller.pk and not caller.can_moderate:
            return Result.fail(
                ModerationError.forbidden("Not allowed to view this appeal")
            )
        return Result.ok(appeal)

    async def list_appeals(
        self,
        caller: Caller,
        status: AppealStatus | None = AppealStatus.PENDING,
        page: int = 1,
        limit: int = 20,
    ) -> Result[AppealPage]:
        """List appeals for review, oldest first."""
        if not caller.can_moderate:
            return Result.fail(ModerationError.forbidden())

        appeals = await self.appeal_repository.list_by_status(
            status, limit, (page - 1) * limit
        )
        total = await self.appeal_repository.count_by_status(status)
        return Result.ok(
            AppealPage(
                appeals=appeals, pagination=PaginationInfo.build(page, limit, total)
            )
        )

    async def list_user_appeals(
        self, caller: Caller, page: int = 1, limit: int = 20
    ) -> Result[AppealPage]:
        """List the caller's own appeals."""
        appeals = await self.appeal_repository.list_for_user(
            caller.pk, limit, (page - 1) * limit
        )
        total = await self.appeal_repository.count_for_user(caller.pk)
        return Result.ok(
            AppealPage(
                appeals=appeals, pagination=PaginationInfo.build(page, limit, total)
            )
        )

    async def list_notifications(
        self, caller: Caller, unread_only: bool = False
    ) -> Result[list[AppealNotification]]:
        """List the caller's appeal notifications."""
        notifications = await self.notification_repository.list_for_user(
            caller.pk, unread_only=unread_only
        )
        return Result.ok(notifications)

    async def _feed_credibility(self, appeal: Appeal) -> None:
        if appeal.queue_item_pk is None:
            return
        queue_item = await self.queue_repository.get_by_pk(appeal.queue_item_pk)
        if queue_item is None or queue_item.reporter_pk is None:
            return
        if not appeal_feeds_credibility(self.credibility_policy, queue_item):
            return

        # An upheld rejection confirms the report, an approved appeal reverses it
        await self.credibility_service.record_outcome(
            ReportOutcome(
                user_pk=queue_item.reporter_pk,
                report_id=str(queue_item.pk),
                was_accurate=appeal.status == AppealStatus.REJECTED,
                notes=f"Appeal {appeal.pk} {appeal.status.value}",
                metadata={"appeal_pk": str(appeal.pk)},
            )
        )
