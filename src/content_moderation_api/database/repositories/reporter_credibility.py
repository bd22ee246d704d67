"""Reporter credibility repository for the Content Moderation API."""

from typing import Any
from uuid import UUID

from asyncpg import Record

from content_moderation_api.database.connection import Database
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
    ScoreDistribution,
)
from content_moderation_api.database.models.reporter_credibility import TopReporter
from content_moderation_api.database.repositories.base import BaseRepository


class ReporterCredibilityRepository(BaseRepository[ReporterCredibility]):
    """Repository for reporter credibility profiles."""

    def __init__(self, db: Database):
        super().__init__(db, "reporter_credibility")

    def _record_to_model(self, record: Record) -> ReporterCredibility:
        """Convert database record to ReporterCredibility model."""
        return ReporterCredibility.model_validate(dict(record))

    async def get_by_user(self, user_pk: UUID) -> ReporterCredibility | None:
        """Get the profile of a user."""
        query = "SELECT * FROM reporter_credibility WHERE user_pk = $1"

        async with self.db.get_connection() as connection:
            record = await connection.fetchrow(query, user_pk)
            return self._record_to_model(record) if record else None

    async def get_or_create(
        self, user_pk: UUID, initial_score: float
    ) -> ReporterCredibility:
        """Get the profile of a user, creating a fresh one when missing."""
        query = """
            INSERT INTO reporter_credibility (user_pk, credibility_score)
            VALUES ($1, $2)
            ON CONFLICT (user_pk) DO NOTHING
        """

        async with self.db.get_connection() as connection:
            await connection.execute(query, user_pk, initial_score)
            record = await connection.fetchrow(
                "SELECT * FROM reporter_credibility WHERE user_pk = $1", user_pk
            )
            if record is None:
                raise ValueError(f"Failed to load credibility profile for {user_pk}")
            return self._record_to_model(record)

    async def get_outcome(
        self, user_pk: UUID, report_id: str
    ) -> RecordedOutcome | None:
        """Get the outcome already counted for a report, if any."""
        query = """
            SELECT user_pk, report_id, was_accurate, adjustment
            FROM report_outcomes
            WHERE user_pk = $1 AND report_id = $2
        """

        async with self.db.get_connection() as connection:
            record = await connection.fetchrow(query, user_pk, report_id)
            return RecordedOutcome.model_validate(dict(record)) if record else None

    async def apply_outcome(
        self,
        user_pk: UUID,
        report_id: str,
        adjustment: float,
        was_accurate: bool,
        metadata: dict[str, Any],
        min_score: float,
        max_score: float,
    ) -> ReporterCredibility | None:
        """Count the first outcome of a report and bump the counters atomically.

        Returns None when the report already has an outcome.
        """
        insert_query = """
            INSERT INTO report_outcomes (user_pk, report_id, was_accurate, adjustment)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (user_pk, report_id) DO NOTHING
            RETURNING report_id
        """
        update_query = """
            UPDATE reporter_credibility
            SET credibility_score = LEAST($6, GREATEST($5, credibility_score + $2)),
                total_reports = total_reports + 1,
                accurate_reports = accurate_reports + CASE WHEN $3 THEN 1 ELSE 0 END,
                false_reports = false_reports + CASE WHEN $3 THEN 0 ELSE 1 END,
                metadata = COALESCE(metadata, '{}'::jsonb) || $4::jsonb,
                updated_at = NOW()
            WHERE user_pk = $1
            RETURNING *
        """

        async with self.db.get_transaction() as connection:
            inserted = await connection.fetchval(
                insert_query, user_pk, report_id, was_accurate, adjustment
            )
            if inserted is None:
                return None
            record = await connection.fetchrow(
                update_query,
                user_pk,
                adjustment,
                was_accurate,
                metadata,
                min_score,
                max_score,
            )
            if record is None:
                raise ValueError(f"Credibility profile for {user_pk} disappeared")
            return self._record_to_model(record)

    async def revise_outcome(
        self,
        user_pk: UUID,
        report_id: str,
        was_accurate: bool,
        adjustment: float,
        score_delta: float,
        metadata: dict[str, Any],
        min_score: float,
        max_score: float,
    ) -> ReporterCredibility | None:
        """Flip a counted outcome, moving its counter and score with it.

        Returns None when the report has no outcome to flip.
        """
        outcome_query = """
            UPDATE report_outcomes
            SET was_accurate = $3, adjustment = $4, updated_at = NOW()
            WHERE user_pk = $1 AND report_id = $2 AND was_accurate <> $3
            RETURNING report_id
        """
        update_query = """
            UPDATE reporter_credibility
            SET credibility_score = LEAST($6, GREATEST($5, credibility_score + $2)),
                accurate_reports = accurate_reports + CASE WHEN $3 THEN 1 ELSE -1 END,
                false_reports = false_reports + CASE WHEN $3 THEN -1 ELSE 1 END,
                metadata = COALESCE(metadata, '{}'::jsonb) || $4::jsonb,
                updated_at = NOW()
            WHERE user_pk = $1
            RETURNING *
        """

        async with self.db.get_transaction() as connection:
            revised = await connection.fetchval(
                outcome_query, user_pk, report_id, was_accurate, adjustment
            )
            if revised is None:
                return None
            record = await connection.fetchrow(
                update_query,
                user_pk,
                score_delta,
                was_accurate,
                metadata,
                min_score,
                max_score,
            )
            if record is None:
                raise ValueError(f"Credibility profile for {user_pk} disappeared")
            return self._record_to_model(record)

    async def get_top_reporters(
        self, limit: int = 10, min_reports: int = 5
    ) -> list[TopReporter]:
        """Get the most credible reporters with enough history."""
        query = """
            SELECT user_pk, credibility_score, total_reports, accurate_reports,
                   false_reports
            FROM reporter_credibility
            WHERE total_reports >= $1
            ORDER BY credibility_score DESC, accurate_reports DESC
            LIMIT $2
        """

        async with self.db.get_connection() as connection:
            records = await connection.fetch(query, min_reports, limit)

        return [
            TopReporter(
                user_pk=record["user_pk"],
                credibility_score=float(record["credibility_score"]),
                total_reports=record["total_reports"],
                accurate_reports=record["accurate_reports"],
                false_reports=record["false_reports"],
                accuracy_percentage=round(
                    record["accurate_reports"] / record["total_reports"] * 100, 2
                )
                if record["total_reports"]
                else 0.0,
            )
            for record in records
        ]

    async def get_stats(self) -> CredibilityStats:
        """Aggregate statistics over all reporters."""
        query = """
            SELECT
                COUNT(*) AS total_reporters,
                COALESCE(AVG(credibility_score), 0) AS average_score,
                COALESCE(SUM(total_reports), 0) AS total_reports,
                COALESCE(SUM(accurate_reports), 0) AS accurate_reports,
                COALESCE(SUM(false_reports), 0) AS false_reports,
                COUNT(*) FILTER (WHERE credibility_score >= 75) AS high,
                COUNT(*) FILTER (
                    WHERE credibility_score >= 40 AND credibility_score < 75
                ) AS medium,
                COUNT(*) FILTER (WHERE credibility_score < 40) AS low
            FROM reporter_credibility
        """

        async with self.db.get_connection() as connection:
            record = await connection.fetchrow(query)

        if record is None:
            return CredibilityStats()

        total_reports = int(record["total_reports"])
        accurate_reports = int(record["accurate_reports"])
        return CredibilityStats(
            total_reporters=record["total_reporters"],
            average_score=round(float(record["average_score"]), 2),
            total_reports=total_reports,
            accurate_reports=accurate_reports,
            false_reports=int(record["false_reports"]),
            accuracy_percentage=round(accurate_reports / total_reports * 100, 2)
            if total_reports
            else 0.0,
            distribution=ScoreDistribution(
                high=record["high"], medium=record["medium"], low=record["low"]
            ),
        )
