"""Moderated content snapshot models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from content_moderation_api.database.models.base import BaseDBModel
from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.base import ModerationStatus


class ModeratedContentRecord(BaseDBModel):
    """Per-content moderation state, unique on (content_type, content_id)."""

    content_type: ContentType
    content_id: str
    owner_pk: UUID | None = None
    original_content: str | None = None
    modified_content: str | None = None
    moderation_status: ModerationStatus = ModerationStatus.PENDING
    classifier_score: float | None = None
    classifier_checked: bool = False
    moderated_by_pk: UUID | None = None
    reason: str | None = None
    moderated_at: datetime | None = None


class ModeratedContentUpsert(BaseModel):
    """Fields written on upsert. None leaves the stored value unchanged."""

    owner_pk: UUID | None = None
    original_content: str | None = None
    modified_content: str | None = None
    moderation_status: ModerationStatus | None = None
    classifier_score: float | None = None
    classifier_checked: bool | None = None
    moderated_by_pk: UUID | None = None
    reason: str | None = None
