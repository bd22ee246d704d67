"""Deterministic rules engine for the Content Moderation API."""

import logging
import re

from typing import Any

from pydantic import BaseModel
from pydantic import Field

from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.base import ModerationAction
from content_moderation_api.database.models.base import ModerationPriority
from content_moderation_api.database.models.base import ModerationStatus
from content_moderation_api.database.models.moderation_rule import RuleConfiguration
from content_moderation_api.database.models.moderation_rule import (
    RuleConfigurationUpdate,
)
from content_moderation_api.database.repositories.moderation_rule import (
    RuleConfigurationRepository,
)

logger = logging.getLogger(__name__)

LINK_PATTERN = re.compile(r"https?://", re.IGNORECASE)


class RuleEvaluation(BaseModel):
    """Verdict of the rules engine."""

    priority: ModerationPriority = ModerationPriority.NORMAL
    auto_action: ModerationAction | None = None
    auto_flagged: bool = False
    status: ModerationStatus | None = None
    reason: str | None = None
    matched_keywords: list[str] = Field(default_factory=list)


def _scanned_text(content: str, metadata: dict[str, Any] | None) -> str:
    parts = [content or ""]
    if metadata and isinstance(metadata.get("title"), str):
        parts.append(metadata["title"])
    return "\n".join(parts)


def apply_rules(
    config: RuleConfiguration | None,
    content: str,
    metadata: dict[str, Any] | None = None,
) -> RuleEvaluation:
    """Evaluate content against a rule configuration.

    Keywords match as case-insensitive substrings of the content and of a
    ``title`` metadata field. Each blocked keyword counts once.
    """
    if config is None or not config.enabled:
        return RuleEvaluation()

    text = _scanned_text(content, metadata)
    lowered = text.lower()
    matched = [
        keyword
        for keyword in config.blocked_keywords
        if keyword and keyword.lower() in lowered
    ]

    if len(matched) > config.auto_reject_threshold:
        return RuleEvaluation(
            priority=ModerationPriority.HIGH,
            auto_action=ModerationAction.REJECT,
            auto_flagged=True,
            status=ModerationStatus.AUTO_REJECTED,
            reason=f"Content contains {len(matched)} blocked keywords",
            matched_keywords=matched,
        )

    if matched:
        return RuleEvaluation(
            priority=config.match_priority,
            auto_flagged=True,
            status=ModerationStatus.NEEDS_REVIEW,
            reason=f"Content contains blocked keywords: {', '.join(matched)}",
            matched_keywords=matched,
        )

    if config.max_links is not None:
        link_count = len(LINK_PATTERN.findall(text))
        if link_count > config.max_links:
            return RuleEvaluation(
                priority=config.match_priority,
                auto_flagged=True,
                status=ModerationStatus.NEEDS_REVIEW,
                reason=f"Content contains {link_count} links (limit {config.max_links})",
            )

    return RuleEvaluation()


class RulesEngine:
    """Reads rule configurations and evaluates content against them."""

    def __init__(self, rule_repository: RuleConfigurationRepository):
        self.rule_repository = rule_repository

    async def evaluate(
        self,
        content_type: ContentType,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> RuleEvaluation:
        """Evaluate content against the rules of its content type."""
        config = await self.rule_repository.get_for_content_type(content_type)
        evaluation = apply_rules(config, content, metadata)
        if evaluation.auto_flagged:
            logger.info(
                f"Rules flagged {content_type.value} content: {evaluation.reason}"
            )
        return evaluation

    async def get_configuration(self, content_type: ContentType) -> RuleConfiguration:
        """Get the rule configuration of a content type, disabled when unset."""
        config = await self.rule_repository.get_for_content_type(content_type)
        return config or RuleConfiguration(content_type=content_type)

    async def set_configuration(
        self, content_type: ContentType, update: RuleConfigurationUpdate
    ) -> RuleConfiguration:
        """Replace the rule configuration of a content type."""
        config = await self.rule_repository.save(content_type, update)
        logger.info(
            f"Rules for {content_type.value} updated: enabled={config.enabled}, "
            f"{len(config.blocked_keywords)} keywords"
        )
        return config
