"""Tests for the moderation queue repositories."""

from datetime import UTC
from datetime import datetime
from uuid import uuid4

import pytest

from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.base import ModerationAction
from content_moderation_api.database.models.base import ModerationPriority
from content_moderation_api.database.models.base import ModerationStatus
from content_moderation_api.database.models.queue import HistoryEntryCreate
from content_moderation_api.database.models.queue import QueueFilters
from content_moderation_api.database.models.queue import QueueItemCreate
from content_moderation_api.database.repositories.queue import (
    ModerationHistoryRepository,
)
from content_moderation_api.database.repositories.queue import QueueItemRepository
from content_moderation_api.services.queue_ordering import PriorityOrdering


def _history_record(queue_item_pk, status="auto_rejected", action="reject"):
    return {
        "pk": uuid4(),
        "queue_item_pk": queue_item_pk,
        "status": status,
        "action_taken": action,
        "moderator_pk": None,
        "notes": None,
        "created_at": datetime.now(UTC),
    }


class TestQueueItemRepository:
    """Test QueueItemRepository."""

    @pytest.fixture
    def repository(self, mock_db):
        return QueueItemRepository(mock_db)

    @pytest.mark.asyncio
    async def test_find_open_item(self, repository, mock_connection, queue_item_record):
        mock_connection.fetchrow.return_value = queue_item_record

        item = await repository.find_open_item(ContentType.POST, "post-123")

        assert item is not None
        assert item.status == ModerationStatus.PENDING
        args = mock_connection.fetchrow.call_args.args
        assert args[1] == "post"
        assert args[2] == "post-123"
        assert args[3] == ["in_review", "needs_review", "pending"]

    @pytest.mark.asyncio
    async def test_find_open_item_none(self, repository, mock_connection):
        mock_connection.fetchrow.return_value = None

        assert await repository.find_open_item(ContentType.POST, "post-1") is None

    @pytest.mark.asyncio
    async def test_create_item_with_history(
        self, repository, mock_connection, queue_item_record
    ):
        queue_item_record.update(
            status="auto_rejected", action_taken="reject", auto_flagged=True
        )
        mock_connection.fetchrow.side_effect = [
            queue_item_record,
            _history_record(queue_item_record["pk"]),
        ]

        item = await repository.create_item(
            QueueItemCreate(
                content_type=ContentType.POST,
                content_id="post-123",
                status=ModerationStatus.AUTO_REJECTED,
                priority=ModerationPriority.HIGH,
                auto_flagged=True,
                action_taken=ModerationAction.REJECT,
            ),
            HistoryEntryCreate(
                status=ModerationStatus.AUTO_REJECTED,
                action_taken=ModerationAction.REJECT,
            ),
        )

        assert item.status == ModerationStatus.AUTO_REJECTED
        assert mock_connection.fetchrow.await_count == 2
        insert_args = mock_connection.fetchrow.call_args_list[0].args
        assert "INSERT INTO moderation_queue" in insert_args[0]
        # Enum values are written as plain strings
        assert "auto_rejected" in insert_args[1:]
        history_args = mock_connection.fetchrow.call_args_list[1].args
        assert "INSERT INTO moderation_history" in history_args[0]
        assert history_args[1] == queue_item_record["pk"]
        assert history_args[4] is None

    @pytest.mark.asyncio
    async def test_create_item_without_history(
        self, repository, mock_connection, queue_item_record
    ):
        mock_connection.fetchrow.return_value = queue_item_record

        await repository.create_item(
            QueueItemCreate(
                content_type=ContentType.POST,
                content_id="post-123",
                status=ModerationStatus.PENDING,
                priority=ModerationPriority.NORMAL,
            )
        )

        assert mock_connection.fetchrow.await_count == 1

    @pytest.mark.asyncio
    async def test_claim_is_conditional(
        self, repository, mock_connection, queue_item_record
    ):
        moderator_pk = uuid4()
        queue_item_record.update(status="in_review", moderator_pk=moderator_pk)
        mock_connection.fetchrow.side_effect = [
            queue_item_record,
            _history_record(queue_item_record["pk"], "in_review", None),
        ]

        item = await repository.claim(queue_item_record["pk"], moderator_pk)

        assert item.status == ModerationStatus.IN_REVIEW
        query = mock_connection.fetchrow.call_args_list[0].args[0]
        assert "moderator_pk IS NULL" in query
        assert mock_connection.fetchrow.call_args_list[0].args[4] == [
            "needs_review",
            "pending",
        ]

    @pytest.mark.asyncio
    async def test_claim_lost_writes_no_history(self, repository, mock_connection):
        mock_connection.fetchrow.return_value = None

        item = await repository.claim(uuid4(), uuid4())

        assert item is None
        assert mock_connection.fetchrow.await_count == 1

    @pytest.mark.asyncio
    async def test_resolve_only_from_open_status(
        self, repository, mock_connection, queue_item_record
    ):
        moderator_pk = uuid4()
        queue_item_record.update(status="rejected", action_taken="reject")
        mock_connection.fetchrow.side_effect = [
            queue_item_record,
            _history_record(queue_item_record["pk"], "rejected", "reject"),
        ]

        item = await repository.resolve(
            queue_item_record["pk"],
            moderator_pk,
            ModerationStatus.REJECTED,
            ModerationAction.REJECT,
            "spam",
        )

        assert item.status == ModerationStatus.REJECTED
        args = mock_connection.fetchrow.call_args_list[0].args
        assert args[2] == "rejected"
        assert args[3] == "reject"
        assert args[6] == ["in_review", "needs_review", "pending"]

    @pytest.mark.asyncio
    async def test_resolve_terminal_returns_none(self, repository, mock_connection):
        mock_connection.fetchrow.return_value = None

        item = await repository.resolve(
            uuid4(), uuid4(), ModerationStatus.APPROVED, ModerationAction.APPROVE
        )

        assert item is None
        assert mock_connection.fetchrow.await_count == 1

    @pytest.mark.asyncio
    async def test_list_items_applies_filters_and_ordering(
        self, repository, mock_connection, queue_item_record
    ):
        mock_connection.fetch.return_value = [queue_item_record]
        filters = QueueFilters(
            status=ModerationStatus.PENDING, priority=ModerationPriority.HIGH, page=2
        )

        items = await repository.list_items(filters, PriorityOrdering().order_by())

        assert len(items) == 1
        query, *params = mock_connection.fetch.call_args.args
        assert "status = $1 AND priority = $2" in query
        assert "LIMIT $3 OFFSET $4" in query
        assert "CASE priority" in query
        assert params == ["pending", "high", 20, 20]

    @pytest.mark.asyncio
    async def test_count_items_without_filters(self, repository, mock_connection):
        mock_connection.fetchval.return_value = 7

        assert await repository.count_items(QueueFilters()) == 7
        assert mock_connection.fetchval.call_args.args[0] == (
            "SELECT COUNT(*) FROM moderation_queue"
        )

    @pytest.mark.asyncio
    async def test_auto_approve_stale_closes_queue_item(
        self, repository, mock_connection
    ):
        item_pk = uuid4()
        mock_connection.fetchval.side_effect = [uuid4(), item_pk]
        mock_connection.fetchrow.return_value = _history_record(
            item_pk, "auto_approved", "approve"
        )

        approved = await repository.auto_approve_stale(
            ContentType.REVIEW, "review-9", "Auto-approved after 72h pending"
        )

        assert approved is True
        content_args = mock_connection.fetchval.call_args_list[0].args
        assert "moderation_status = $5" in content_args[0]
        assert content_args[3] == "auto_approved"
        assert content_args[5] == "pending"
        item_args = mock_connection.fetchval.call_args_list[1].args
        assert "UPDATE moderation_queue" in item_args[0]
        assert item_args[3:6] == (
            "auto_approved",
            "approve",
            "Auto-approved after 72h pending",
        )
        assert item_args[6] == ["in_review", "needs_review", "pending"]
        history_args = mock_connection.fetchrow.call_args.args
        assert history_args[1] == item_pk
        assert history_args[2] == "auto_approved"
        assert history_args[3] == "approve"

    @pytest.mark.asyncio
    async def test_auto_approve_stale_skips_moderated_content(
        self, repository, mock_connection
    ):
        mock_connection.fetchval.return_value = None

        approved = await repository.auto_approve_stale(
            ContentType.REVIEW, "review-9", "Auto-approved after 72h pending"
        )

        assert approved is False
        assert mock_connection.fetchval.await_count == 1
        mock_connection.fetchrow.assert_not_awaited()


class TestModerationHistoryRepository:
    """Test ModerationHistoryRepository."""

    @pytest.mark.asyncio
    async def test_get_for_item_newest_first(self, mock_db, mock_connection):
        queue_item_pk = uuid4()
        mock_connection.fetch.return_value = [
            _history_record(queue_item_pk, "rejected", "reject"),
            _history_record(queue_item_pk, "in_review", None),
        ]

        history = await ModerationHistoryRepository(mock_db).get_for_item(
            queue_item_pk
        )

        assert [entry.status for entry in history] == [
            ModerationStatus.REJECTED,
            ModerationStatus.IN_REVIEW,
        ]
        assert "ORDER BY created_at DESC" in mock_connection.fetch.call_args.args[0]
