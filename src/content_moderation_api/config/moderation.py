"""Classifier and moderation pipeline configuration."""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class AppealCredibilityPolicy(str, Enum):
    """How an appeal decision feeds the reporter's credibility."""

    # Only adjust when the original decision came from a human-reviewed report
    REPORTED_ONLY = "reported_only"
    # Adjust whenever the appealed item carries a reporter
    ALWAYS = "always"
    NEVER = "never"


class ClassifierSettings(BaseSettings):
    """External content classifier configuration settings."""

    api_url: str = Field(
        default="https://api.openai.com/v1/moderations",
        description="OpenAI-compatible moderation endpoint",
    )
    api_key: str = Field(default="", description="API key for the classifier")
    model: str = Field(
        default="omni-moderation-latest", description="Classifier model name"
    )
    timeout: float = Field(
        default=5.0, description="Classifier request timeout in seconds"
    )
    fallback_enabled: bool = Field(
        default=True,
        description="Use the keyword heuristic when the classifier is unavailable",
    )
    default_sensitivity: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Score at or above which a category counts as flagged",
    )

    model_config = SettingsConfigDict(env_prefix="CLASSIFIER_", case_sensitive=False)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_url)


class ModerationSettings(BaseSettings):
    """Feature flags and limits for the moderation pipeline."""

    # Feature flags
    enable_ai_moderation: bool = Field(
        default=True, description="Run the external classifier on submissions"
    )
    enable_edge_caching: bool = Field(
        default=True, description="Cache credibility reads in Redis"
    )
    classifier_auto_reject_confidence: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Auto-reject flagged content at or above this confidence",
    )

    # Moderation tokens
    token_ttl_hours: int = Field(default=24, ge=1, description="Token lifetime")
    token_max_uses: int = Field(default=5, ge=1, description="Token usage limit")
    token_retention_hours: int = Field(
        default=24, ge=0, description="Keep expired tokens this long before purging"
    )

    # Queue
    queue_ordering: str = Field(
        default="priority", description="Queue ordering strategy (priority, recency)"
    )
    stale_pending_hours: int = Field(
        default=72, ge=1, description="Auto-approve pending content after this long"
    )

    # Appeals
    appeal_credibility_policy: AppealCredibilityPolicy = Field(
        default=AppealCredibilityPolicy.REPORTED_ONLY,
        description="How appeal decisions adjust reporter credibility",
    )

    # Cache TTLs in seconds
    profile_cache_ttl: int = Field(default=300, description="Credibility profile TTL")
    trust_score_cache_ttl: int = Field(default=60, description="Trust score TTL")
    top_reporters_cache_ttl: int = Field(default=300, description="Top reporters TTL")
    stats_cache_ttl: int = Field(default=600, description="Credibility stats TTL")

    model_config = SettingsConfigDict(env_prefix="MODERATION_", case_sensitive=False)
