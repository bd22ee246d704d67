"""Moderation queue models for the Content Moderation API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from content_moderation_api.database.models.base import BaseDBModel
from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.base import ModerationAction
from content_moderation_api.database.models.base import ModerationPriority
from content_moderation_api.database.models.base import ModerationStatus
from content_moderation_api.database.models.base import PaginationInfo


class QueueItem(BaseDBModel):
    """Moderation queue item database model."""

    content_type: ContentType
    content_id: str
    status: ModerationStatus = ModerationStatus.PENDING
    priority: ModerationPriority = ModerationPriority.NORMAL
    reporter_pk: UUID | None = None
    moderator_pk: UUID | None = None
    auto_flagged: bool = False
    classifier_confidence: float | None = None
    action_taken: ModerationAction | None = None
    reason: str | None = None
    notes: str | None = None
    assigned_at: datetime | None = None
    resolved_at: datetime | None = None


class QueueItemCreate(BaseModel):
    """Queue item creation model."""

    content_type: ContentType
    content_id: str
    status: ModerationStatus
    priority: ModerationPriority
    reporter_pk: UUID | None = None
    auto_flagged: bool = False
    classifier_confidence: float | None = None
    action_taken: ModerationAction | None = None
    reason: str | None = None
    resolved_at: datetime | None = None


class HistoryEntry(BaseModel):
    """Append-only record of a queue item state change."""

    pk: UUID
    queue_item_pk: UUID
    status: ModerationStatus
    action_taken: ModerationAction | None = None
    moderator_pk: UUID | None = None
    notes: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class HistoryEntryCreate(BaseModel):
    """History entry creation model. ``moderator_pk`` is None for automated entries."""

    status: ModerationStatus
    action_taken: ModerationAction | None = None
    moderator_pk: UUID | None = None
    notes: str | None = None


class QueueSubmission(BaseModel):
    """Content submitted for moderation."""

    content_type: ContentType
    content_id: str = Field(..., min_length=1, max_length=255)
    content: str | None = Field(None, max_length=100_000)
    metadata: dict[str, Any] | None = None
    priority: ModerationPriority | None = None
    reason: str | None = Field(None, max_length=1000)
    owner_pk: UUID | None = None
    # True when the submitter is reporting someone else's content
    is_report: bool = False


class SubmissionResult(BaseModel):
    """Outcome of a submission."""

    id: UUID
    status: ModerationStatus
    auto_flagged: bool
    moderation_token: str | None = None
    already_queued: bool = False


class QueueResolution(BaseModel):
    """Moderator decision on a queue item."""

    status: ModerationStatus
    action: ModerationAction | None = None
    notes: str | None = Field(None, max_length=2000)
    content_edits: str | None = None

    @field_validator("status")
    @classmethod
    def _human_decision_only(cls, value: ModerationStatus) -> ModerationStatus:
        if value not in (ModerationStatus.APPROVED, ModerationStatus.REJECTED):
            raise ValueError("status must be approved or rejected")
        return value


class ResolutionResult(BaseModel):
    """Outcome of a resolution."""

    id: UUID
    status: ModerationStatus
    action_taken: ModerationAction | None = None


class QueueFilters(BaseModel):
    """Filters and paging for queue listings."""

    status: ModerationStatus | None = None
    content_type: ContentType | None = None
    priority: ModerationPriority | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class QueueListResponse(BaseModel):
    """Paginated queue listing."""

    items: list[QueueItem]
    pagination: PaginationInfo


class QueueItemDetail(BaseModel):
    """Queue item with its history and content details."""

    item: QueueItem
    history: list[HistoryEntry]
    content: dict[str, Any] | None = None
