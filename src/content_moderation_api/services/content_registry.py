"""Registry of content fetchers keyed by content type."""

from collections.abc import Awaitable
from collections.abc import Callable
from typing import Any
from typing import TypeAlias

from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.repositories.moderated_content import (
    ModeratedContentRepository,
)

ContentFetcher: TypeAlias = Callable[[ContentType, str], Awaitable[dict[str, Any] | None]]


class ContentRegistry:
    """Maps each content type to the fetcher that loads its details."""

    def __init__(self):
        self._fetchers: dict[ContentType, ContentFetcher] = {}

    def register(self, content_type: ContentType, fetcher: ContentFetcher) -> None:
        self._fetchers[content_type] = fetcher

    def has_fetcher(self, content_type: ContentType) -> bool:
        return content_type in self._fetchers

    async def fetch(
        self, content_type: ContentType, content_id: str
    ) -> dict[str, Any] | None:
        """Load content details, or None when unknown or unregistered."""
        fetcher = self._fetchers.get(content_type)
        if fetcher is None:
            return None
        return await fetcher(content_type, content_id)


def moderated_content_fetcher(
    content_repository: ModeratedContentRepository,
) -> ContentFetcher:
    """Fetcher that serves the stored moderation snapshot of a content item."""

    async def fetch(
        content_type: ContentType, content_id: str
    ) -> dict[str, Any] | None:
        record = await content_repository.get_for_content(content_type, content_id)
        if record is None:
            return None
        return {
            "content_type": record.content_type.value,
            "content_id": record.content_id,
            "owner_pk": str(record.owner_pk) if record.owner_pk else None,
            "content": record.modified_content or record.original_content,
            "original_content": record.original_content,
            "moderation_status": record.moderation_status.value,
            "classifier_score": record.classifier_score,
        }

    return fetch


def build_content_registry(
    content_repository: ModeratedContentRepository,
) -> ContentRegistry:
    """Registry serving stored snapshots for every content type."""
    registry = ContentRegistry()
    fetcher = moderated_content_fetcher(content_repository)
    for content_type in ContentType:
        registry.register(content_type, fetcher)
    return registry
