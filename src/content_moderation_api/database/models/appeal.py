"""Appeal models for the Content Moderation API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from content_moderation_api.database.models.base import AppealStatus
from content_moderation_api.database.models.base import BaseDBModel
from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.base import PaginationInfo


class Appeal(BaseDBModel):
    """Appeal database model."""

    content_type: ContentType
    content_id: str
    user_pk: UUID
    reason: str
    additional_info: str | None = None
    status: AppealStatus = AppealStatus.PENDING
    queue_item_pk: UUID | None = None

    # Review details
    moderator_notes: str | None = None
    reviewed_by_pk: UUID | None = None
    reviewed_at: datetime | None = None


class AppealCreate(BaseModel):
    """Appeal creation model."""

    content_type: ContentType
    content_id: str = Field(..., min_length=1, max_length=255)
    reason: str = Field(..., min_length=10, max_length=1000)
    additional_info: str | None = Field(None, max_length=2000)

    model_config = ConfigDict(from_attributes=True)


class AppealDecision(BaseModel):
    """Appeal decision model for moderator actions."""

    status: AppealStatus
    moderator_notes: str | None = Field(None, max_length=2000)

    @field_validator("status")
    @classmethod
    def _final_status_only(cls, value: AppealStatus) -> AppealStatus:
        if value == AppealStatus.PENDING:
            raise ValueError("status must be approved or rejected")
        return value


class AppealPage(BaseModel):
    """Paginated appeal listing."""

    appeals: list[Appeal]
    pagination: PaginationInfo


class AppealNotification(BaseDBModel):
    """User-visible notification about an appeal decision."""

    appeal_pk: UUID
    user_pk: UUID
    status: AppealStatus
    read: bool = False


class DecidedAppeal(BaseModel):
    """Decided appeal with the notification written alongside it."""

    appeal: Appeal
    notification: AppealNotification
