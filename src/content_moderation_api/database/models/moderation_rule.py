"""Rule configuration models."""

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.base import ModerationPriority


class RuleConfiguration(BaseModel):
    """Deterministic rule set for one content type."""

    content_type: ContentType
    enabled: bool = False
    blocked_keywords: list[str] = Field(default_factory=list)
    auto_reject_threshold: int = Field(default=1, ge=1)
    max_links: int | None = Field(None, ge=0)
    match_priority: ModerationPriority = ModerationPriority.HIGH

    model_config = ConfigDict(from_attributes=True)


class RuleConfigurationUpdate(BaseModel):
    """Replacement rule set for a content type."""

    enabled: bool = True
    blocked_keywords: list[str] = Field(default_factory=list, max_length=500)
    auto_reject_threshold: int = Field(default=1, ge=1)
    max_links: int | None = Field(None, ge=0)
    match_priority: ModerationPriority = ModerationPriority.HIGH
