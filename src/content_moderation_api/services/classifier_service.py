"""Content classifier adapter for the Content Moderation API."""

import logging

from typing import Any

import httpx

from pydantic import BaseModel
from pydantic import Field

from content_moderation_api.config.moderation import ClassifierSettings
from content_moderation_api.database.models.base import ContentType
from content_moderation_api.errors import ClassifierUnavailableError

logger = logging.getLogger(__name__)

BASE_CATEGORIES = ("hate", "harassment", "self-harm", "sexual", "violence", "graphic")

# Keyword heuristic used when the upstream classifier cannot be reached
FALLBACK_TERMS: dict[str, str] = {
    "offensive": "harassment",
    "racist": "hate",
    "sexist": "harassment",
    "hate": "hate",
    "kill": "violence",
    "explicit": "sexual",
}
FALLBACK_CATEGORY_SCORE = 0.8
FALLBACK_CONFIDENCE = 0.7


class ClassificationResult(BaseModel):
    """Normalized classifier verdict."""

    flagged: bool = False
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)
    categories: dict[str, bool] = Field(default_factory=dict)
    category_scores: dict[str, float] = Field(default_factory=dict)
    flagged_categories: list[str] = Field(default_factory=list)
    source: str = "upstream"


class UpstreamPayloadError(ValueError):
    """The classifier answered with a payload we cannot interpret."""


class ClassifierService:
    """Adapter around an OpenAI-compatible moderation endpoint."""

    def __init__(
        self,
        settings: ClassifierSettings,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self._http_client = http_client

    async def classify(
        self,
        content: str,
        content_type: ContentType,
        sensitivity_level: float | None = None,
    ) -> ClassificationResult:
        """
        Classify content.

        A category is flagged when its score is at or above the sensitivity
        level (the configured default when not supplied); the upstream flags
        are not used for that decision.

        Raises:
            ValueError: sensitivity_level is outside [0, 1].
            ClassifierUnavailableError: the classifier failed and fallback is off.
        """
        if sensitivity_level is not None and not 0.0 <= sensitivity_level <= 1.0:
            raise ValueError("sensitivity_level must be between 0 and 1")

        if not content or not content.strip():
            return ClassificationResult(source="none")

        threshold = (
            sensitivity_level
            if sensitivity_level is not None
            else self.settings.default_sensitivity
        )

        if not self.settings.is_configured:
            return self._fallback(content, content_type, "classifier not configured")

        try:
            category_scores = await self._request_scores(content)
        except (httpx.HTTPError, UpstreamPayloadError) as e:
            return self._fallback(content, content_type, str(e) or type(e).__name__)

        return self._build_result(category_scores, threshold, source="upstream")

    def status(self) -> dict[str, Any]:
        """Report the active provider."""
        provider = "upstream" if self.settings.is_configured else "fallback"
        return {
            "provider": provider,
            "model": self.settings.model if provider == "upstream" else None,
            "fallback_enabled": self.settings.fallback_enabled,
            "default_sensitivity": self.settings.default_sensitivity,
        }

    async def _request_scores(self, content: str) -> dict[str, float]:
        payload = {"model": self.settings.model, "input": content}
        headers = {"Authorization": f"Bearer {self.settings.api_key}"}

        if self._http_client is not None:
            response = await self._http_client.post(
                self.settings.api_url,
                json=payload,
                headers=headers,
                timeout=self.settings.timeout,
            )
        else:
            async with httpx.AsyncClient(timeout=self.settings.timeout) as client:
                response = await client.post(
                    self.settings.api_url, json=payload, headers=headers
                )

        response.raise_for_status()
        return self._parse_scores(response)

    @staticmethod
    def _parse_scores(response: httpx.Response) -> dict[str, float]:
        try:
            body = response.json()
            result = body["results"][0]
            raw_scores = result["category_scores"]
            return {str(name): float(score) for name, score in raw_scores.items()}
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise UpstreamPayloadError(f"Malformed classifier payload: {e}") from e

    @staticmethod
    def _build_result(
        category_scores: dict[str, float], threshold: float, source: str
    ) -> ClassificationResult:
        scores = dict.fromkeys(BASE_CATEGORIES, 0.0)
        for name, score in category_scores.items():
            scores[name] = min(max(score, 0.0), 1.0)

        categories = {name: score >= threshold for name, score in scores.items()}
        flagged_categories = [name for name, hit in categories.items() if hit]

        return ClassificationResult(
            flagged=bool(flagged_categories),
            confidence_score=max(scores.values(), default=0.0),
            categories=categories,
            category_scores=scores,
            flagged_categories=flagged_categories,
            source=source,
        )

    def _fallback(
        self, content: str, content_type: ContentType, reason: str
    ) -> ClassificationResult:
        if not self.settings.fallback_enabled:
            logger.error(f"Classifier unavailable for {content_type.value}: {reason}")
            raise ClassifierUnavailableError(reason)

        logger.warning(
            f"Classifier unavailable for {content_type.value}, using keyword fallback: {reason}"
        )

        lowered = content.lower()
        scores = dict.fromkeys(BASE_CATEGORIES, 0.0)
        for term, category in FALLBACK_TERMS.items():
            if term in lowered:
                scores[category] = FALLBACK_CATEGORY_SCORE

        categories = {name: score > 0 for name, score in scores.items()}
        flagged_categories = [name for name, hit in categories.items() if hit]

        return ClassificationResult(
            flagged=bool(flagged_categories),
            confidence_score=FALLBACK_CONFIDENCE if flagged_categories else 0.0,
            categories=categories,
            category_scores=scores,
            flagged_categories=flagged_categories,
            source="fallback",
        )
