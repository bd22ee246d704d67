"""Base models and types for the Content Moderation API database."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel
from pydantic import ConfigDict


class ContentType(str, Enum):
    """Content type enumeration."""

    POST = "post"
    COMMENT = "comment"
    PRODUCT = "product"
    RESOURCE = "resource"
    GROUP = "group"
    EVENT = "event"
    PROFILE = "profile"
    MESSAGE = "message"
    REVIEW = "review"


class ModerationStatus(str, Enum):
    """Moderation status enumeration."""

    PENDING = "pending"
    IN_REVIEW = "in_review"
    NEEDS_REVIEW = "needs_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    AUTO_APPROVED = "auto_approved"
    AUTO_REJECTED = "auto_rejected"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {
        ModerationStatus.APPROVED,
        ModerationStatus.REJECTED,
        ModerationStatus.AUTO_APPROVED,
        ModerationStatus.AUTO_REJECTED,
    }
)

OPEN_STATUSES = frozenset(
    {
        ModerationStatus.PENDING,
        ModerationStatus.IN_REVIEW,
        ModerationStatus.NEEDS_REVIEW,
    }
)

CLAIMABLE_STATUSES = frozenset(
    {ModerationStatus.PENDING, ModerationStatus.NEEDS_REVIEW}
)

REMOVED_STATUSES = frozenset(
    {ModerationStatus.REJECTED, ModerationStatus.AUTO_REJECTED}
)


class ModerationAction(str, Enum):
    """Action taken on moderated content."""

    APPROVE = "approve"
    REJECT = "reject"
    WARN = "warn"
    EDIT_CONTENT = "edit_content"
    SUSPEND_USER = "suspend_user"
    BAN_USER = "ban_user"
    RESTRICT_VISIBILITY = "restrict_visibility"
    NO_ACTION = "no_action"


class ModerationPriority(str, Enum):
    """Queue priority enumeration."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class AppealStatus(str, Enum):
    """Appeal status enumeration."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class BaseDBModel(BaseModel):
    """Base model for database entities."""

    pk: UUID
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class PaginationInfo(BaseModel):
    """Pagination block returned by list endpoints."""

    page: int
    limit: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total_items: int) -> "PaginationInfo":
        total_pages = (total_items + limit - 1) // limit if limit else 0
        return cls(
            page=page,
            limit=limit,
            total_items=total_items,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )
