"""Tests for periodic cleanup."""

from datetime import UTC
from datetime import datetime
from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from content_moderation_api.config.moderation import ModerationSettings
from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.moderated_content import (
    ModeratedContentRecord,
)
from content_moderation_api.services.cleanup_service import CleanupService

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def _stale(content_id: str) -> ModeratedContentRecord:
    return ModeratedContentRecord(
        pk=uuid4(),
        content_type=ContentType.REVIEW,
        content_id=content_id,
        created_at=NOW - timedelta(days=5),
    )


@pytest.fixture
def token_service():
    service = AsyncMock()
    service.purge_expired.return_value = 7
    return service


@pytest.fixture
def content_repository():
    return AsyncMock()


@pytest.fixture
def queue_repository():
    return AsyncMock()


@pytest.fixture
def content_actions():
    return AsyncMock()


@pytest.fixture
def service(token_service, content_repository, queue_repository, content_actions):
    return CleanupService(
        token_service,
        content_repository,
        queue_repository,
        content_actions,
        ModerationSettings(token_retention_hours=24, stale_pending_hours=72),
    )


@pytest.mark.asyncio
async def test_cleanup_purges_tokens_and_approves_stale_content(
    service, token_service, content_repository, queue_repository, content_actions
):
    content_repository.list_stale_pending.return_value = [_stale("review-9")]
    queue_repository.auto_approve_stale.return_value = True

    report = await service.run(NOW)

    assert report.tokens_purged == 7
    assert report.content_auto_approved == 1
    token_service.purge_expired.assert_awaited_once_with(NOW - timedelta(hours=24))
    content_repository.list_stale_pending.assert_awaited_once_with(
        NOW - timedelta(hours=72)
    )
    queue_repository.auto_approve_stale.assert_awaited_once_with(
        ContentType.REVIEW, "review-9", "Auto-approved after 72h pending"
    )
    content_actions.restore.assert_awaited_once_with(
        ContentType.REVIEW, "review-9", None
    )


@pytest.mark.asyncio
async def test_cleanup_skips_content_moderated_meanwhile(
    service, content_repository, queue_repository, content_actions
):
    content_repository.list_stale_pending.return_value = [
        _stale("review-1"),
        _stale("review-2"),
    ]
    queue_repository.auto_approve_stale.side_effect = [False, True]

    report = await service.run(NOW)

    assert report.content_auto_approved == 1
    content_actions.restore.assert_awaited_once_with(
        ContentType.REVIEW, "review-2", None
    )
