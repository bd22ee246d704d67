"""Reporter credibility scoring for the Content Moderation API."""

import logging

from datetime import UTC
from datetime import datetime
from uuid import UUID

from content_moderation_api.config.moderation import ModerationSettings
from content_moderation_api.database.models.reporter_credibility import (
    CredibilityStats,
)
from content_moderation_api.database.models.reporter_credibility import (
    CredibilityUpdate,
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
from content_moderation_api.database.models.reporter_credibility import (
    ReportTrustScore,
)
from content_moderation_api.database.models.reporter_credibility import TopReporter
from content_moderation_api.database.redis_connection import ModerationCache
from content_moderation_api.database.repositories.reporter_credibility import (
    ReporterCredibilityRepository,
)

logger = logging.getLogger(__name__)

INITIAL_SCORE = 50.0
MIN_SCORE = 0.0
MAX_SCORE = 100.0
ACCURATE_REPORT_ADJUSTMENT = 2.0
FALSE_REPORT_ADJUSTMENT = -3.0
UNKNOWN_REPORTER_WEIGHT = 0.5
TOP_REPORTER_MIN_REPORTS = 5


def calculate_adjustment(total_reports: int, was_accurate: bool) -> float:
    """Score change for one outcome. The first outcome establishes a baseline."""
    if total_reports == 0:
        return 0.0
    return ACCURATE_REPORT_ADJUSTMENT if was_accurate else FALSE_REPORT_ADJUSTMENT


def calculate_revised_adjustment(
    previous_adjustment: float, was_accurate: bool
) -> float:
    """Score change a report would have earned with the other verdict."""
    if previous_adjustment == 0.0:
        return 0.0
    return ACCURATE_REPORT_ADJUSTMENT if was_accurate else FALSE_REPORT_ADJUSTMENT


def clamp_score(score: float) -> float:
    return min(MAX_SCORE, max(MIN_SCORE, score))


class CredibilityService:
    """Service for tracking how trustworthy reporters are."""

    def __init__(
        self,
        credibility_repository: ReporterCredibilityRepository,
        cache: ModerationCache,
        settings: ModerationSettings,
    ):
        self.credibility_repository = credibility_repository
        self.cache = cache
        self.cache_ttl = {
            "profile": settings.profile_cache_ttl,
            "trust_score": settings.trust_score_cache_ttl,
            "top_reporters": settings.top_reporters_cache_ttl,
            "stats": settings.stats_cache_ttl,
        }

    async def record_outcome(self, outcome: ReportOutcome) -> CredibilityUpdate:
        """Adjust a reporter's credibility after a report was confirmed or reversed.

        Each report counts once. A later outcome with the opposite verdict
        replaces the earlier one; a repeated verdict changes nothing.
        """
        existing = await self.credibility_repository.get_outcome(
            outcome.user_pk, outcome.report_id
        )
        if existing is not None:
            return await self._revise_outcome(outcome, existing)

        profile = await self.credibility_repository.get_or_create(
            outcome.user_pk, INITIAL_SCORE
        )
        previous_score = profile.credibility_score
        adjustment = calculate_adjustment(profile.total_reports, outcome.was_accurate)

        updated = await self.credibility_repository.apply_outcome(
            outcome.user_pk,
            outcome.report_id,
            adjustment,
            outcome.was_accurate,
            self._outcome_metadata(outcome),
            MIN_SCORE,
            MAX_SCORE,
        )
        if updated is None:
            logger.info(f"Report {outcome.report_id} was counted concurrently")
            existing = await self.credibility_repository.get_outcome(
                outcome.user_pk, outcome.report_id
            )
            if existing is None:
                raise ValueError(f"Outcome for report {outcome.report_id} disappeared")
            return await self._revise_outcome(outcome, existing)

        await self._invalidate_user_cache(outcome.user_pk)

        logger.info(
            f"Credibility for {outcome.user_pk}: {previous_score} -> "
            f"{updated.credibility_score} (report {outcome.report_id}, "
            f"accurate={outcome.was_accurate})"
        )
        return CredibilityUpdate(
            updated_score=updated.credibility_score,
            adjustment=adjustment,
            previous_score=previous_score,
            profile=updated,
        )

    async def get_profile(self, user_pk: UUID) -> ReporterCredibility | None:
        """Get a reporter's profile."""
        cache_key = f"credibility:profile:{user_pk}"
        cached = await self.cache.get_json(cache_key)
        if cached is not None:
            return ReporterCredibility.model_validate(cached)

        profile = await self.credibility_repository.get_by_user(user_pk)
        if profile is not None:
            await self.cache.set_json(
                cache_key, profile.model_dump(mode="json"), self.cache_ttl["profile"]
            )
        return profile

    async def get_trust_weight(self, user_pk: UUID) -> float:
        """Trust weight in [0, 1] for a reporter; unknown reporters weigh 0.5."""
        profile = await self.get_profile(user_pk)
        if profile is None:
            return UNKNOWN_REPORTER_WEIGHT
        return clamp_score(profile.credibility_score) / MAX_SCORE

    async def get_report_trust_score(
        self, user_pk: UUID, report_id: str
    ) -> ReportTrustScore:
        """Trust weight of one report, derived from its reporter."""
        cache_key = f"credibility:trust:{user_pk}:{report_id}"
        cached = await self.cache.get_json(cache_key)
        if cached is not None:
            return ReportTrustScore.model_validate(cached)

        trust = ReportTrustScore(
            report_id=report_id,
            user_pk=user_pk,
            trust_score=await self.get_trust_weight(user_pk),
        )
        await self.cache.set_json(
            cache_key, trust.model_dump(mode="json"), self.cache_ttl["trust_score"]
        )
        return trust

    async def get_top_reporters(self, limit: int = 10) -> list[TopReporter]:
        """Most credible reporters with at least five reports. May be stale."""
        cache_key = f"credibility:top:{limit}"
        cached = await self.cache.get_json(cache_key)
        if cached is not None:
            return [TopReporter.model_validate(entry) for entry in cached]

        reporters = await self.credibility_repository.get_top_reporters(
            limit=limit, min_reports=TOP_REPORTER_MIN_REPORTS
        )
        await self.cache.set_json(
            cache_key,
            [reporter.model_dump(mode="json") for reporter in reporters],
            self.cache_ttl["top_reporters"],
        )
        return reporters

    async def get_stats(self) -> CredibilityStats:
        """System-wide credibility statistics. May be stale."""
        cache_key = "credibility:stats"
        cached = await self.cache.get_json(cache_key)
        if cached is not None:
            return CredibilityStats.model_validate(cached)

        stats = await self.credibility_repository.get_stats()
        await self.cache.set_json(
            cache_key, stats.model_dump(mode="json"), self.cache_ttl["stats"]
        )
        return stats

    async def _revise_outcome(
        self, outcome: ReportOutcome, existing: RecordedOutcome
    ) -> CredibilityUpdate:
        profile = await self.credibility_repository.get_or_create(
            outcome.user_pk, INITIAL_SCORE
        )
        previous_score = profile.credibility_score
        if existing.was_accurate == outcome.was_accurate:
            return CredibilityUpdate(
                updated_score=previous_score,
                adjustment=0.0,
                previous_score=previous_score,
                profile=profile,
            )

        adjustment = calculate_revised_adjustment(
            existing.adjustment, outcome.was_accurate
        )
        score_delta = adjustment - existing.adjustment
        updated = await self.credibility_repository.revise_outcome(
            outcome.user_pk,
            outcome.report_id,
            outcome.was_accurate,
            adjustment,
            score_delta,
            self._outcome_metadata(outcome),
            MIN_SCORE,
            MAX_SCORE,
        )
        if updated is None:
            # Already flipped by a concurrent request
            return CredibilityUpdate(
                updated_score=previous_score,
                adjustment=0.0,
                previous_score=previous_score,
                profile=profile,
            )

        await self._invalidate_user_cache(outcome.user_pk)

        logger.info(
            f"Credibility for {outcome.user_pk}: {previous_score} -> "
            f"{updated.credibility_score} (report {outcome.report_id} revised, "
            f"accurate={outcome.was_accurate})"
        )
        return CredibilityUpdate(
            updated_score=updated.credibility_score,
            adjustment=score_delta,
            previous_score=previous_score,
            profile=updated,
        )

    @staticmethod
    def _outcome_metadata(outcome: ReportOutcome) -> dict:
        return {
            "last_report_id": outcome.report_id,
            "last_outcome": "accurate" if outcome.was_accurate else "false",
            "last_outcome_at": datetime.now(UTC).isoformat(),
            "last_notes": outcome.notes,
            **(outcome.metadata or {}),
        }

    async def _invalidate_user_cache(self, user_pk: UUID) -> None:
        await self.cache.delete(f"credibility:profile:{user_pk}")
