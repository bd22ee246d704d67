"""Reporter credibility models."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel
from pydantic import Field

from content_moderation_api.database.models.base import BaseDBModel


class ReporterCredibility(BaseDBModel):
    """Trust profile for a reporting user."""

    user_pk: UUID
    credibility_score: float = Field(default=50.0, ge=0.0, le=100.0)
    total_reports: int = 0
    accurate_reports: int = 0
    false_reports: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)


class ReportOutcome(BaseModel):
    """Confirmed or reversed outcome of a user report."""

    user_pk: UUID
    report_id: str = Field(..., min_length=1, max_length=255)
    was_accurate: bool
    notes: str | None = Field(None, max_length=1000)
    metadata: dict[str, Any] | None = None


class RecordedOutcome(BaseModel):
    """Outcome already counted for one report."""

    user_pk: UUID
    report_id: str
    was_accurate: bool
    adjustment: float


class CredibilityUpdate(BaseModel):
    """Result of recording a report outcome."""

    updated_score: float
    adjustment: float
    previous_score: float
    profile: ReporterCredibility


class ReportTrustScore(BaseModel):
    """Trust weight of a single report."""

    report_id: str
    user_pk: UUID
    trust_score: float


class TopReporter(BaseModel):
    """Leaderboard entry for reporters."""

    user_pk: UUID
    credibility_score: float
    total_reports: int
    accurate_reports: int
    false_reports: int
    accuracy_percentage: float


class ScoreDistribution(BaseModel):
    """Count of reporters per score band."""

    high: int = 0  # >= 75
    medium: int = 0  # 40 - 75
    low: int = 0  # < 40


class CredibilityStats(BaseModel):
    """System-wide credibility statistics."""

    total_reporters: int = 0
    average_score: float = 0.0
    total_reports: int = 0
    accurate_reports: int = 0
    false_reports: int = 0
    accuracy_percentage: float = 0.0
    distribution: ScoreDistribution = Field(default_factory=ScoreDistribution)
