"""Moderation token models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel
from pydantic import Field

from content_moderation_api.database.models.base import BaseDBModel
from content_moderation_api.database.models.base import ContentType


class TokenError(str, Enum):
    """Reason a token failed validation."""

    INVALID = "invalid"
    REVOKED = "revoked"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"


class ModerationToken(BaseDBModel):
    """Short-lived, usage-bounded token tied to a content item."""

    token: str
    content_type: ContentType
    content_id: str
    created_by_pk: UUID | None = None
    expires_at: datetime
    max_usage_count: int | None = None
    current_usage_count: int = 0
    revoked: bool = False
    issued_reason: str | None = None


class ModerationTokenCreate(BaseModel):
    """Token creation model."""

    token: str
    content_type: ContentType
    content_id: str
    created_by_pk: UUID | None = None
    expires_at: datetime
    max_usage_count: int | None = None
    issued_reason: str | None = None


class TokenIssueRequest(BaseModel):
    """Request body for issuing a token."""

    content_type: ContentType
    content_id: str = Field(..., min_length=1, max_length=255)
    ttl_hours: int | None = Field(None, ge=1, le=24 * 30)
    max_uses: int | None = Field(None, ge=1)
    reason: str | None = Field(None, max_length=500)


class TokenValidateRequest(BaseModel):
    """Request body for validating and consuming a token."""

    token: str = Field(..., min_length=1)


class TokenValidation(BaseModel):
    """Outcome of token validation."""

    valid: bool
    token: ModerationToken | None = None
    error: TokenError | None = None
