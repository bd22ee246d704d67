"""Tests for content fetchers and content actions."""

import logging

from datetime import UTC
from datetime import datetime
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.base import ModerationAction
from content_moderation_api.database.models.base import ModerationStatus
from content_moderation_api.database.models.moderated_content import (
    ModeratedContentRecord,
)
from content_moderation_api.services.content_actions import ContentActionService
from content_moderation_api.services.content_registry import ContentRegistry
from content_moderation_api.services.content_registry import build_content_registry


@pytest.mark.asyncio
async def test_unregistered_type_returns_none():
    registry = ContentRegistry()

    assert registry.has_fetcher(ContentType.EVENT) is False
    assert await registry.fetch(ContentType.EVENT, "event-1") is None


@pytest.mark.asyncio
async def test_stored_snapshot_prefers_edited_content():
    content_repository = AsyncMock()
    content_repository.get_for_content.return_value = ModeratedContentRecord(
        pk=uuid4(),
        content_type=ContentType.PRODUCT,
        content_id="sku-1",
        original_content="original text",
        modified_content="edited text",
        moderation_status=ModerationStatus.APPROVED,
        created_at=datetime.now(UTC),
    )
    registry = build_content_registry(content_repository)

    content = await registry.fetch(ContentType.PRODUCT, "sku-1")

    assert all(registry.has_fetcher(content_type) for content_type in ContentType)
    assert content["content"] == "edited text"
    assert content["original_content"] == "original text"
    assert content["moderation_status"] == "approved"


class TestContentActionService:
    """Test dispatch of moderation actions."""

    @pytest.fixture
    def actions(self):
        service = ContentActionService()
        for name in ("hide", "restore", "edit", "ban_author"):
            setattr(service, name, AsyncMock())
        return service

    @pytest.mark.asyncio
    async def test_reject_hides(self, actions):
        await actions.perform(ContentType.POST, "post-1", ModerationAction.REJECT)

        actions.hide.assert_awaited_once_with(ContentType.POST, "post-1", None)

    @pytest.mark.asyncio
    async def test_edit_passes_edits(self, actions):
        moderator_pk = uuid4()

        await actions.perform(
            ContentType.COMMENT,
            "c-1",
            ModerationAction.EDIT_CONTENT,
            moderator_pk=moderator_pk,
            content_edits="cleaned up",
        )

        actions.edit.assert_awaited_once_with(
            ContentType.COMMENT, "c-1", "cleaned up", moderator_pk
        )

    @pytest.mark.asyncio
    async def test_no_action_is_noop(self, actions):
        await actions.perform(ContentType.POST, "post-1", ModerationAction.NO_ACTION)

        actions.hide.assert_not_awaited()
        actions.restore.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_default_handlers_only_log(self, caplog):
        with caplog.at_level(logging.INFO):
            await ContentActionService().perform(
                ContentType.GROUP, "g-1", ModerationAction.BAN_USER, uuid4()
            )

        assert "g-1" in caplog.text
