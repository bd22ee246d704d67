"""Moderation queue repositories for the Content Moderation API."""

from typing import Any
from uuid import UUID

from asyncpg import Connection
from asyncpg import Record

from content_moderation_api.database.connection import Database
from content_moderation_api.database.models.base import CLAIMABLE_STATUSES
from content_moderation_api.database.models.base import OPEN_STATUSES
from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.base import ModerationAction
from content_moderation_api.database.models.base import ModerationStatus
from content_moderation_api.database.models.queue import HistoryEntry
from content_moderation_api.database.models.queue import HistoryEntryCreate
from content_moderation_api.database.models.queue import QueueFilters
from content_moderation_api.database.models.queue import QueueItem
from content_moderation_api.database.models.queue import QueueItemCreate
from content_moderation_api.database.repositories.base import BaseRepository
from content_moderation_api.database.repositories.base import to_db_value

INSERT_HISTORY_QUERY = """
    INSERT INTO moderation_history
        (queue_item_pk, status, action_taken, moderator_pk, notes)
    VALUES ($1, $2, $3, $4, $5)
    RETURNING *
"""


def _status_values(statuses) -> list[str]:
    return sorted(status.value for status in statuses)


async def insert_history_entry(
    connection: Connection, queue_item_pk: UUID, entry: HistoryEntryCreate
) -> HistoryEntry:
    """Append a history entry using an existing connection."""
    record = await connection.fetchrow(
        INSERT_HISTORY_QUERY,
        queue_item_pk,
        entry.status.value,
        to_db_value(entry.action_taken),
        entry.moderator_pk,
        entry.notes,
    )
    return HistoryEntry.model_validate(dict(record))


class QueueItemRepository(BaseRepository[QueueItem]):
    """Repository for moderation queue items.

    Every state transition is a conditional UPDATE paired with its history
    entry in one transaction; a None return means the condition no longer held.
    """

    def __init__(self, db: Database):
        super().__init__(db, "moderation_queue")

    def _record_to_model(self, record: Record) -> QueueItem:
        """Convert database record to QueueItem model."""
        return QueueItem.model_validate(dict(record))

    async def find_open_item(
        self, content_type: ContentType, content_id: str
    ) -> QueueItem | None:
        """Find the open (not yet resolved) item for a content item."""
        query = """
            SELECT * FROM moderation_queue
            WHERE content_type = $1 AND content_id = $2 AND status = ANY($3::text[])
            ORDER BY created_at DESC
            LIMIT 1
        """

        async with self.db.get_connection() as connection:
            record = await connection.fetchrow(
                query, content_type.value, content_id, _status_values(OPEN_STATUSES)
            )
            return self._record_to_model(record) if record else None

    async def find_latest_for_content(
        self, content_type: ContentType, content_id: str
    ) -> QueueItem | None:
        """Find the most recent item for a content item, in any status."""
        query = """
            SELECT * FROM moderation_queue
            WHERE content_type = $1 AND content_id = $2
            ORDER BY created_at DESC
            LIMIT 1
        """

        async with self.db.get_connection() as connection:
            record = await connection.fetchrow(query, content_type.value, content_id)
            return self._record_to_model(record) if record else None

    async def create_item(
        self, item_data: QueueItemCreate, history: HistoryEntryCreate | None = None
    ) -> QueueItem:
        """Insert a queue item and, when given, its first history entry."""
        data = item_data.model_dump()
        columns = list(data.keys())
        placeholders = [f"${i + 1}" for i in range(len(columns))]
        query = f"""
            INSERT INTO moderation_queue ({", ".join(columns)})
            VALUES ({", ".join(placeholders)})
            RETURNING *
        """

        async with self.db.get_transaction() as connection:
            record = await connection.fetchrow(
                query, *[to_db_value(value) for value in data.values()]
            )
            if record is None:
                raise ValueError("Failed to create moderation queue item")
            if history is not None:
                await insert_history_entry(connection, record["pk"], history)
            return self._record_to_model(record)

    async def claim(
        self, pk: UUID, moderator_pk: UUID, notes: str | None = None
    ) -> QueueItem | None:
        """Assign an unclaimed item to a moderator."""
        query = """
            UPDATE moderation_queue
            SET status = $3, moderator_pk = $2, assigned_at = NOW(), updated_at = NOW()
            WHERE pk = $1
              AND moderator_pk IS NULL
              AND status = ANY($4::text[])
            RETURNING *
        """

        async with self.db.get_transaction() as connection:
            record = await connection.fetchrow(
                query,
                pk,
                moderator_pk,
                ModerationStatus.IN_REVIEW.value,
                _status_values(CLAIMABLE_STATUSES),
            )
            if record is None:
                return None
            await insert_history_entry(
                connection,
                pk,
                HistoryEntryCreate(
                    status=ModerationStatus.IN_REVIEW,
                    moderator_pk=moderator_pk,
                    notes=notes or "Claimed for review",
                ),
            )
            return self._record_to_model(record)

    async def resolve(
        self,
        pk: UUID,
        moderator_pk: UUID,
        status: ModerationStatus,
        action: ModerationAction | None,
        notes: str | None = None,
    ) -> QueueItem | None:
        """Move a non-terminal item to a terminal status."""
        query = """
            UPDATE moderation_queue
            SET status = $2,
                action_taken = $3,
                notes = COALESCE($4, notes),
                moderator_pk = $5,
                resolved_at = NOW(),
                updated_at = NOW()
            WHERE pk = $1 AND status = ANY($6::text[])
            RETURNING *
        """

        async with self.db.get_transaction() as connection:
            record = await connection.fetchrow(
                query,
                pk,
                status.value,
                to_db_value(action),
                notes,
                moderator_pk,
                _status_values(OPEN_STATUSES),
            )
            if record is None:
                return None
            await insert_history_entry(
                connection,
                pk,
                HistoryEntryCreate(
                    status=status,
                    action_taken=action,
                    moderator_pk=moderator_pk,
                    notes=notes,
                ),
            )
            return self._record_to_model(record)

    async def auto_approve_stale(
        self, content_type: ContentType, content_id: str, notes: str
    ) -> bool:
        """Auto-approve a content item whose record is still pending.

        Closes the open queue item with its history entry and marks the content
        record, in one transaction. Returns False when the record was no longer
        pending, in which case nothing is written.
        """
        content_query = """
            UPDATE moderated_content
            SET moderation_status = $3,
                reason = $4,
                moderated_at = NOW(),
                updated_at = NOW()
            WHERE content_type = $1 AND content_id = $2 AND moderation_status = $5
            RETURNING pk
        """
        item_query = """
            UPDATE moderation_queue
            SET status = $3,
                action_taken = $4,
                notes = COALESCE($5, notes),
                resolved_at = NOW(),
                updated_at = NOW()
            WHERE content_type = $1 AND content_id = $2 AND status = ANY($6::text[])
            RETURNING pk
        """

        async with self.db.get_transaction() as connection:
            content_pk = await connection.fetchval(
                content_query,
                content_type.value,
                content_id,
                ModerationStatus.AUTO_APPROVED.value,
                notes,
                ModerationStatus.PENDING.value,
            )
            if content_pk is None:
                return False

            item_pk = await connection.fetchval(
                item_query,
                content_type.value,
                content_id,
                ModerationStatus.AUTO_APPROVED.value,
                ModerationAction.APPROVE.value,
                notes,
                _status_values(OPEN_STATUSES),
            )
            if item_pk is not None:
                await insert_history_entry(
                    connection,
                    item_pk,
                    HistoryEntryCreate(
                        status=ModerationStatus.AUTO_APPROVED,
                        action_taken=ModerationAction.APPROVE,
                        notes=notes,
                    ),
                )
            return True

    def _filter_clause(self, filters: QueueFilters) -> tuple[str, list[Any]]:
        conditions = []
        params: list[Any] = []
        for column, value in (
            ("status", filters.status),
            ("content_type", filters.content_type),
            ("priority", filters.priority),
        ):
            if value is not None:
                params.append(to_db_value(value))
                conditions.append(f"{column} = ${len(params)}")
        return " AND ".join(conditions), params

    async def list_items(self, filters: QueueFilters, order_by: str) -> list[QueueItem]:
        """List queue items matching the filters in the given order."""
        where_clause, params = self._filter_clause(filters)
        where = f"WHERE {where_clause}" if where_clause else ""
        query = f"""
            SELECT * FROM moderation_queue
            {where}
            ORDER BY {order_by}
            LIMIT ${len(params) + 1} OFFSET ${len(params) + 2}
        """

        async with self.db.get_connection() as connection:
            records = await connection.fetch(
                query, *params, filters.limit, filters.offset
            )
            return [self._record_to_model(record) for record in records]

    async def count_items(self, filters: QueueFilters) -> int:
        """Count queue items matching the filters."""
        where_clause, params = self._filter_clause(filters)
        return await self.count(where_clause, params)


class ModerationHistoryRepository(BaseRepository[HistoryEntry]):
    """Read access to the append-only moderation history."""

    def __init__(self, db: Database):
        super().__init__(db, "moderation_history")

    def _record_to_model(self, record: Record) -> HistoryEntry:
        """Convert database record to HistoryEntry model."""
        return HistoryEntry.model_validate(dict(record))

    async def get_for_item(self, queue_item_pk: UUID) -> list[HistoryEntry]:
        """Get the history of a queue item, newest first."""
        query = """
            SELECT * FROM moderation_history
            WHERE queue_item_pk = $1
            ORDER BY created_at DESC
        """

        async with self.db.get_connection() as connection:
            records = await connection.fetch(query, queue_item_pk)
            return [self._record_to_model(record) for record in records]
