"""Tests for the rules engine."""

from unittest.mock import AsyncMock

import pytest

from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.base import ModerationAction
from content_moderation_api.database.models.base import ModerationPriority
from content_moderation_api.database.models.base import ModerationStatus
from content_moderation_api.database.models.moderation_rule import RuleConfiguration
from content_moderation_api.database.models.moderation_rule import (
    RuleConfigurationUpdate,
)
from content_moderation_api.services.rules_engine import RulesEngine
from content_moderation_api.services.rules_engine import apply_rules


def _config(**overrides) -> RuleConfiguration:
    values = {
        "content_type": ContentType.POST,
        "enabled": True,
        "blocked_keywords": ["spam", "scam", "free money"],
        "auto_reject_threshold": 1,
    }
    values.update(overrides)
    return RuleConfiguration(**values)


class TestApplyRules:
    """Test the pure rule evaluation."""

    def test_above_threshold_auto_rejects(self):
        evaluation = apply_rules(_config(), "This SPAM is a scam")

        assert evaluation.status == ModerationStatus.AUTO_REJECTED
        assert evaluation.auto_action == ModerationAction.REJECT
        assert evaluation.priority == ModerationPriority.HIGH
        assert evaluation.auto_flagged is True
        assert evaluation.matched_keywords == ["spam", "scam"]

    def test_at_threshold_needs_review(self):
        evaluation = apply_rules(
            _config(match_priority=ModerationPriority.URGENT), "only spam here"
        )

        assert evaluation.status == ModerationStatus.NEEDS_REVIEW
        assert evaluation.auto_action is None
        assert evaluation.priority == ModerationPriority.URGENT
        assert evaluation.matched_keywords == ["spam"]

    def test_repeated_keyword_counts_once(self):
        evaluation = apply_rules(_config(), "spam spam spam")

        assert evaluation.status == ModerationStatus.NEEDS_REVIEW

    def test_title_metadata_is_scanned(self):
        evaluation = apply_rules(
            _config(), "nothing here", {"title": "Get FREE MONEY now"}
        )

        assert evaluation.matched_keywords == ["free money"]

    def test_link_limit(self):
        evaluation = apply_rules(
            _config(blocked_keywords=[], max_links=1),
            "see http://a.example and https://b.example",
        )

        assert evaluation.status == ModerationStatus.NEEDS_REVIEW
        assert "2 links" in evaluation.reason

    def test_disabled_or_missing_configuration(self):
        assert apply_rules(_config(enabled=False), "spam scam").auto_flagged is False
        assert apply_rules(None, "spam scam").status is None

    def test_clean_content(self):
        evaluation = apply_rules(_config(), "A lovely afternoon")

        assert evaluation.auto_flagged is False
        assert evaluation.priority == ModerationPriority.NORMAL


class TestRulesEngine:
    """Test RulesEngine."""

    @pytest.fixture
    def repository(self):
        return AsyncMock()

    @pytest.mark.asyncio
    async def test_evaluate_reads_configuration(self, repository):
        repository.get_for_content_type.return_value = _config()

        evaluation = await RulesEngine(repository).evaluate(
            ContentType.POST, "spam and scam"
        )

        assert evaluation.status == ModerationStatus.AUTO_REJECTED
        repository.get_for_content_type.assert_awaited_once_with(ContentType.POST)

    @pytest.mark.asyncio
    async def test_unset_configuration_is_disabled(self, repository):
        repository.get_for_content_type.return_value = None

        config = await RulesEngine(repository).get_configuration(ContentType.GROUP)

        assert config.content_type == ContentType.GROUP
        assert config.enabled is False

    @pytest.mark.asyncio
    async def test_set_configuration(self, repository):
        update = RuleConfigurationUpdate(blocked_keywords=["scam"])
        repository.save.return_value = _config(blocked_keywords=["scam"])

        config = await RulesEngine(repository).set_configuration(
            ContentType.POST, update
        )

        assert config.blocked_keywords == ["scam"]
        repository.save.assert_awaited_once_with(ContentType.POST, update)
