"""Moderation queue state machine for the Content Moderation API."""

import asyncio
import logging

from datetime import UTC
from datetime import datetime
from uuid import UUID

import asyncpg

from pydantic import BaseModel

from content_moderation_api.auth.models import Caller
from content_moderation_api.config.moderation import ModerationSettings
from content_moderation_api.database.models.base import CLAIMABLE_STATUSES
from content_moderation_api.database.models.base import ModerationAction
from content_moderation_api.database.models.base import ModerationPriority
from content_moderation_api.database.models.base import ModerationStatus
from content_moderation_api.database.models.base import PaginationInfo
from content_moderation_api.database.models.moderated_content import (
    ModeratedContentUpsert,
)
from content_moderation_api.database.models.queue import HistoryEntryCreate
from content_moderation_api.database.models.queue import QueueFilters
from content_moderation_api.database.models.queue import QueueItem
from content_moderation_api.database.models.queue import QueueItemCreate
from content_moderation_api.database.models.queue import QueueItemDetail
from content_moderation_api.database.models.queue import QueueListResponse
from content_moderation_api.database.models.queue import QueueResolution
from content_moderation_api.database.models.queue import QueueSubmission
from content_moderation_api.database.models.queue import ResolutionResult
from content_moderation_api.database.models.queue import SubmissionResult
from content_moderation_api.database.models.reporter_credibility import (
    ReportOutcome,
)
from content_moderation_api.database.repositories.moderated_content import (
    ModeratedContentRepository,
)
from content_moderation_api.database.repositories.queue import (
    ModerationHistoryRepository,
)
from content_moderation_api.database.repositories.queue import QueueItemRepository
from content_moderation_api.errors import ClassifierUnavailableError
from content_moderation_api.errors import ErrorKind
from content_moderation_api.errors import ModerationError
from content_moderation_api.errors import Result
from content_moderation_api.services.classifier_service import ClassificationResult
from content_moderation_api.services.classifier_service import ClassifierService
from content_moderation_api.services.content_actions import ContentActionService
from content_moderation_api.services.content_registry import ContentRegistry
from content_moderation_api.services.credibility_service import CredibilityService
from content_moderation_api.services.queue_ordering import PriorityOrdering
from content_moderation_api.services.queue_ordering import QueueOrdering
from content_moderation_api.services.rules_engine import RuleEvaluation
from content_moderation_api.services.rules_engine import RulesEngine
from content_moderation_api.services.token_service import TokenService

logger = logging.getLogger(__name__)

TOKEN_STATUSES = frozenset({ModerationStatus.PENDING, ModerationStatus.NEEDS_REVIEW})


class SubmissionVerdict(BaseModel):
    """Combined classifier and rules verdict for a submission."""

    status: ModerationStatus
    priority: ModerationPriority
    auto_flagged: bool
    auto_action: ModerationAction | None = None
    reason: str | None = None
    classifier_confidence: float | None = None


def merge_verdicts(
    classification: ClassificationResult | None,
    evaluation: RuleEvaluation,
    requested_priority: ModerationPriority | None = None,
    auto_reject_confidence: float | None = None,
) -> SubmissionVerdict:
    """
    Merge the classifier and rules verdicts.

    A rules auto action wins. Otherwise the classifier may auto-reject when
    ``auto_reject_confidence`` is set; anything flagged by either side needs
    review, and everything else is pending.
    """
    classifier_flagged = classification is not None and classification.flagged
    confidence = classification.confidence_score if classification else None
    categories = ", ".join(classification.flagged_categories) if classification else ""

    status: ModerationStatus
    auto_action = evaluation.auto_action
    reason = evaluation.reason

    if auto_action is not None and evaluation.status is not None:
        status = evaluation.status
    elif (
        classifier_flagged
        and auto_reject_confidence is not None
        and confidence is not None
        and confidence >= auto_reject_confidence
    ):
        auto_action = ModerationAction.REJECT
        status = ModerationStatus.AUTO_REJECTED
        reason = f"Classifier flagged {categories} with confidence {confidence:.2f}"
    elif classifier_flagged or evaluation.auto_flagged:
        status = ModerationStatus.NEEDS_REVIEW
        if reason is None and classifier_flagged:
            reason = f"Classifier flagged: {categories}"
    else:
        status = ModerationStatus.PENDING

    return SubmissionVerdict(
        status=status,
        priority=requested_priority or evaluation.priority,
        auto_flagged=classifier_flagged or evaluation.auto_flagged,
        auto_action=auto_action,
        reason=reason,
        classifier_confidence=confidence,
    )


def default_action_for(status: ModerationStatus) -> ModerationAction:
    if status == ModerationStatus.REJECTED:
        return ModerationAction.REJECT
    return ModerationAction.APPROVE


class QueueService:
    """Service orchestrating submissions, claims and resolutions."""

    def __init__(
        self,
        queue_repository: QueueItemRepository,
        history_repository: ModerationHistoryRepository,
        content_repository: ModeratedContentRepository,
        classifier: ClassifierService,
        rules_engine: RulesEngine,
        token_service: TokenService,
        credibility_service: CredibilityService,
        content_actions: ContentActionService,
        content_registry: ContentRegistry,
        settings: ModerationSettings,
        ordering: QueueOrdering | None = None,
    ):
        self.queue_repository = queue_repository
        self.history_repository = history_repository
        self.content_repository = content_repository
        self.classifier = classifier
        self.rules_engine = rules_engine
        self.token_service = token_service
        self.credibility_service = credibility_service
        self.content_actions = content_actions
        self.content_registry = content_registry
        self.settings = settings
        self.ordering = ordering or PriorityOrdering()

    async def submit(
        self, submission: QueueSubmission, reporter_pk: UUID | None = None
    ) -> Result[SubmissionResult]:
        """
        Queue content for moderation.

        Submitting content that already has an open queue item returns that
        item unchanged with ``already_queued`` set.
        """
        existing = await self.queue_repository.find_open_item(
            submission.content_type, submission.content_id
        )
        if existing is not None:
            return Result.ok(self._already_queued(existing))

        try:
            classification, evaluation = await self._evaluate(submission)
        except ClassifierUnavailableError as e:
            return Result.fail(
                ModerationError(
                    kind=ErrorKind.CLASSIFIER_UNAVAILABLE,
                    message=f"Content classifier unavailable: {e}",
                )
            )

        verdict = merge_verdicts(
            classification,
            evaluation,
            submission.priority,
            self.settings.classifier_auto_reject_confidence,
        )

        history = None
        if verdict.auto_action is not None:
            history = HistoryEntryCreate(
                status=verdict.status,
                action_taken=verdict.auto_action,
                notes=verdict.reason,
            )

        item_data = QueueItemCreate(
            content_type=submission.content_type,
            content_id=submission.content_id,
            status=verdict.status,
            priority=verdict.priority,
            reporter_pk=reporter_pk,
            auto_flagged=verdict.auto_flagged,
            classifier_confidence=verdict.classifier_confidence,
            action_taken=verdict.auto_action,
            reason=submission.reason or verdict.reason,
            resolved_at=datetime.now(UTC) if verdict.status.is_terminal else None,
        )

        try:
            item = await self.queue_repository.create_item(item_data, history)
        except asyncpg.UniqueViolationError:
            # A concurrent submission opened the item first
            existing = await self.queue_repository.find_open_item(
                submission.content_type, submission.content_id
            )
            if existing is None:
                raise
            logger.warning(
                f"Concurrent submission for {submission.content_type.value} "
                f"{submission.content_id}, returning existing item {existing.pk}"
            )
            return Result.ok(self._already_queued(existing))

        if submission.content is not None:
            await self.content_repository.upsert(
                submission.content_type,
                submission.content_id,
                ModeratedContentUpsert(
                    owner_pk=submission.owner_pk,
                    original_content=submission.content,
                    moderation_status=verdict.status,
                    classifier_score=verdict.classifier_confidence,
                    classifier_checked=classification is not None,
                    reason=verdict.reason,
                ),
            )

        if verdict.auto_action is not None:
            await self.content_actions.perform(
                item.content_type, item.content_id, verdict.auto_action
            )

        moderation_token = None
        if item.status in TOKEN_STATUSES:
            token = await self.token_service.issue(
                item.content_type,
                item.content_id,
                issuer_pk=reporter_pk,
                reason="Queued for moderation",
            )
            moderation_token = token.token

        logger.info(
            f"Queued {item.content_type.value} {item.content_id} as {item.pk}: "
            f"status={item.status.value}, priority={item.priority.value}, "
            f"auto_flagged={item.auto_flagged}"
        )
        return Result.ok(
            SubmissionResult(
                id=item.pk,
                status=item.status,
                auto_flagged=item.auto_flagged,
                moderation_token=moderation_token,
                already_queued=False,
            )
        )

    async def claim(self, caller: Caller, pk: UUID) -> Result[QueueItem]:
        """Assign an unclaimed item to the calling moderator."""
        if not caller.can_moderate:
            return Result.fail(ModerationError.forbidden())

        item = await self.queue_repository.get_by_pk(pk)
        if item is None:
            return Result.fail(ModerationError.not_found("Queue item not found"))

        claimed = await self.queue_repository.claim(pk, caller.pk)
        if claimed is None:
            logger.warning(f"Moderator {caller.pk} lost claim on queue item {pk}")
            return Result.fail(
                ModerationError.conflict("Queue item is no longer available")
            )

        logger.info(f"Queue item {pk} claimed by moderator {caller.pk}")
        return Result.ok(claimed)

    async def get_item(self, caller: Caller, pk: UUID) -> Result[QueueItemDetail]:
        """Get an item with its history and content. Claims it when unassigned."""
        if not caller.can_moderate:
            return Result.fail(ModerationError.forbidden())

        item = await self.queue_repository.get_by_pk(pk)
        if item is None:
            return Result.fail(ModerationError.not_found("Queue item not found"))

        if item.moderator_pk is None and item.status in CLAIMABLE_STATUSES:
            claimed = await self.queue_repository.claim(pk, caller.pk)
            if claimed is not None:
                logger.info(f"Queue item {pk} claimed by moderator {caller.pk}")
                item = claimed
            else:
                item = await self.queue_repository.get_by_pk(pk) or item

        history = await self.history_repository.get_for_item(pk)
        content = await self.content_registry.fetch(item.content_type, item.content_id)
        return Result.ok(QueueItemDetail(item=item, history=history, content=content))

    async def resolve(
        self, caller: Caller, pk: UUID, resolution: QueueResolution
    ) -> Result[ResolutionResult]:
        """Approve or reject an item."""
        if not caller.can_moderate:
            return Result.fail(ModerationError.forbidden())

        item = await self.queue_repository.get_by_pk(pk)
        if item is None:
            return Result.fail(ModerationError.not_found("Queue item not found"))
        if item.status.is_terminal:
            return Result.fail(
                ModerationError.conflict(
                    f"Queue item already resolved as {item.status.value}"
                )
            )

        action = resolution.action or default_action_for(resolution.status)
        resolved = await self.queue_repository.resolve(
            pk, caller.pk, resolution.status, action, resolution.notes
        )
        if resolved is None:
            logger.warning(f"Queue item {pk} was resolved concurrently")
            return Result.fail(
                ModerationError.conflict("Queue item was resolved concurrently")
            )

        await self.content_repository.upsert(
            resolved.content_type,
            resolved.content_id,
            ModeratedContentUpsert(
                modified_content=resolution.content_edits,
                moderation_status=resolution.status,
                moderated_by_pk=caller.pk,
                reason=resolution.notes,
            ),
        )
        await self.content_actions.perform(
            resolved.content_type,
            resolved.content_id,
            action,
            moderator_pk=caller.pk,
            content_edits=resolution.content_edits,
        )

        if resolved.reporter_pk is not None:
            await self.credibility_service.record_outcome(
                ReportOutcome(
                    user_pk=resolved.reporter_pk,
                    report_id=str(resolved.pk),
                    was_accurate=resolution.status == ModerationStatus.REJECTED,
                    notes=resolution.notes,
                    metadata={
                        "content_type": resolved.content_type.value,
                        "content_id": resolved.content_id,
                    },
                )
            )

        logger.info(
            f"Queue item {pk} resolved as {resolution.status.value} "
            f"({action.value}) by moderator {caller.pk}"
        )
        return Result.ok(
            ResolutionResult(
                id=resolved.pk, status=resolved.status, action_taken=action
            )
        )

    async def list_items(
        self, caller: Caller, filters: QueueFilters
    ) -> Result[QueueListResponse]:
        """List queue items with filters and pagination."""
        if not caller.can_moderate:
            return Result.fail(ModerationError.forbidden())

        items = await self.queue_repository.list_items(
            filters, self.ordering.order_by()
        )
        total = await self.queue_repository.count_items(filters)
        return Result.ok(
            QueueListResponse(
                items=items,
                pagination=PaginationInfo.build(filters.page, filters.limit, total),
            )
        )

    async def _evaluate(
        self, submission: QueueSubmission
    ) -> tuple[ClassificationResult | None, RuleEvaluation]:
        content = submission.content or ""
        if self.settings.enable_ai_moderation and content.strip():
            classification, evaluation = await asyncio.gather(
                self.classifier.classify(content, submission.content_type),
                self.rules_engine.evaluate(
                    submission.content_type, content, submission.metadata
                ),
            )
            return classification, evaluation
        evaluation = await self.rules_engine.evaluate(
            submission.content_type, content, submission.metadata
        )
        return None, evaluation

    @staticmethod
    def _already_queued(item: QueueItem) -> SubmissionResult:
        return SubmissionResult(
            id=item.pk,
            status=item.status,
            auto_flagged=item.auto_flagged,
            already_queued=True,
        )
