"""Tests for reporter credibility scoring."""

from datetime import UTC
from datetime import datetime
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from content_moderation_api.database.models.reporter_credibility import (
    CredibilityStats,
)
from content_moderation_api.database.models.reporter_credibility import (
    RecordedOutcome,
)
from content_moderation_api.database.models.reporter_credibility import (
    ReporterCredibility,
)
from content_moderation_api.database.models.reporter_credibility import (
    ReportOutcome,
)
from content_moderation_api.services.credibility_service import CredibilityService
from content_moderation_api.services.credibility_service import calculate_adjustment
from content_moderation_api.services.credibility_service import (
    calculate_revised_adjustment,
)
from content_moderation_api.services.credibility_service import clamp_score


def _profile(user_pk, score=50.0, total=0) -> ReporterCredibility:
    return ReporterCredibility(
        pk=uuid4(),
        user_pk=user_pk,
        credibility_score=score,
        total_reports=total,
        created_at=datetime.now(UTC),
    )


class TestScoring:
    """Test the score arithmetic."""

    def test_first_outcome_is_baseline(self):
        assert calculate_adjustment(0, True) == 0.0
        assert calculate_adjustment(0, False) == 0.0

    def test_accurate_and_false_reports(self):
        assert calculate_adjustment(3, True) == 2.0
        assert calculate_adjustment(3, False) == -3.0

    def test_revised_adjustment(self):
        assert calculate_revised_adjustment(2.0, False) == -3.0
        assert calculate_revised_adjustment(-3.0, True) == 2.0
        assert calculate_revised_adjustment(0.0, False) == 0.0

    def test_clamp(self):
        assert clamp_score(104.0) == 100.0
        assert clamp_score(-2.0) == 0.0
        assert clamp_score(42.5) == 42.5


class TestCredibilityService:
    """Test CredibilityService."""

    @pytest.fixture
    def repository(self):
        repository = AsyncMock()
        repository.get_outcome.return_value = None
        return repository

    @pytest.fixture
    def cache(self):
        cache = AsyncMock()
        cache.get_json.return_value = None
        return cache

    @pytest.fixture
    def service(self, repository, cache, moderation_settings):
        return CredibilityService(repository, cache, moderation_settings)

    @pytest.mark.asyncio
    async def test_record_first_outcome(self, service, repository, cache):
        user_pk = uuid4()
        repository.get_or_create.return_value = _profile(user_pk)
        repository.apply_outcome.return_value = _profile(user_pk, 50.0, 1)

        update = await service.record_outcome(
            ReportOutcome(user_pk=user_pk, report_id="r1", was_accurate=True)
        )

        assert update.adjustment == 0.0
        assert update.previous_score == 50.0
        assert update.updated_score == 50.0
        args = repository.apply_outcome.call_args.args
        assert args[1:4] == ("r1", 0.0, True)
        assert args[4]["last_report_id"] == "r1"
        assert args[5:] == (0.0, 100.0)
        cache.delete.assert_awaited_once_with(f"credibility:profile:{user_pk}")

    @pytest.mark.asyncio
    async def test_record_false_report(self, service, repository):
        user_pk = uuid4()
        repository.get_or_create.return_value = _profile(user_pk, 60.0, 4)
        repository.apply_outcome.return_value = _profile(user_pk, 57.0, 5)

        update = await service.record_outcome(
            ReportOutcome(user_pk=user_pk, report_id="r5", was_accurate=False)
        )

        assert update.adjustment == -3.0
        assert update.updated_score == 57.0

    @pytest.mark.asyncio
    async def test_trust_weight(self, service, repository):
        repository.get_by_user.return_value = _profile(uuid4(), 80.0, 10)

        assert await service.get_trust_weight(uuid4()) == 0.8

    @pytest.mark.asyncio
    async def test_unknown_reporter_weight(self, service, repository):
        repository.get_by_user.return_value = None

        trust = await service.get_report_trust_score(uuid4(), "report-1")

        assert trust.trust_score == 0.5
        assert trust.report_id == "report-1"

    @pytest.mark.asyncio
    async def test_profile_served_from_cache(self, service, repository, cache):
        user_pk = uuid4()
        cache.get_json.return_value = _profile(user_pk, 70.0).model_dump(mode="json")

        profile = await service.get_profile(user_pk)

        assert profile.credibility_score == 70.0
        repository.get_by_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stats_cached_after_miss(self, service, repository, cache):
        repository.get_stats.return_value = CredibilityStats(total_reporters=4)

        stats = await service.get_stats()

        assert stats.total_reporters == 4
        key, value, ttl = cache.set_json.call_args.args
        assert key == "credibility:stats"
        assert value["total_reporters"] == 4
        assert ttl == 600

    @pytest.mark.asyncio
    async def test_top_reporters_require_history(self, service, repository):
        repository.get_top_reporters.return_value = []

        await service.get_top_reporters(limit=3)

        repository.get_top_reporters.assert_awaited_once_with(limit=3, min_reports=5)


class TestOutcomeRevision:
    """Test that each report is counted once."""

    @pytest.fixture
    def repository(self):
        return AsyncMock()

    @pytest.fixture
    def service(self, repository, moderation_settings):
        cache = AsyncMock()
        cache.get_json.return_value = None
        return CredibilityService(repository, cache, moderation_settings)

    @pytest.mark.asyncio
    async def test_same_verdict_is_not_counted_again(self, service, repository):
        user_pk = uuid4()
        repository.get_outcome.return_value = RecordedOutcome(
            user_pk=user_pk, report_id="r1", was_accurate=True, adjustment=2.0
        )
        repository.get_or_create.return_value = _profile(user_pk, 62.0, 4)

        update = await service.record_outcome(
            ReportOutcome(user_pk=user_pk, report_id="r1", was_accurate=True)
        )

        assert update.adjustment == 0.0
        assert update.updated_score == 62.0
        repository.apply_outcome.assert_not_awaited()
        repository.revise_outcome.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_opposite_verdict_replaces_earlier_outcome(
        self, service, repository
    ):
        user_pk = uuid4()
        repository.get_outcome.return_value = RecordedOutcome(
            user_pk=user_pk, report_id="r1", was_accurate=True, adjustment=2.0
        )
        repository.get_or_create.return_value = _profile(user_pk, 62.0, 4)
        repository.revise_outcome.return_value = _profile(user_pk, 57.0, 4)

        update = await service.record_outcome(
            ReportOutcome(user_pk=user_pk, report_id="r1", was_accurate=False)
        )

        assert update.adjustment == -5.0
        assert update.updated_score == 57.0
        args = repository.revise_outcome.call_args.args
        assert args[:5] == (user_pk, "r1", False, -3.0, -5.0)
        repository.apply_outcome.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_first_outcome_falls_back_to_revision(
        self, service, repository
    ):
        user_pk = uuid4()
        repository.get_outcome.side_effect = [
            None,
            RecordedOutcome(
                user_pk=user_pk, report_id="r1", was_accurate=False, adjustment=-3.0
            ),
        ]
        repository.get_or_create.return_value = _profile(user_pk, 47.0, 5)
        repository.apply_outcome.return_value = None

        update = await service.record_outcome(
            ReportOutcome(user_pk=user_pk, report_id="r1", was_accurate=False)
        )

        assert update.adjustment == 0.0
        repository.revise_outcome.assert_not_awaited()
