"""Moderated content repository for the Content Moderation API."""

from datetime import datetime

from asyncpg import Record

from content_moderation_api.database.connection import Database
from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.base import ModerationStatus
from content_moderation_api.database.models.moderated_content import (
    ModeratedContentRecord,
)
from content_moderation_api.database.models.moderated_content import (
    ModeratedContentUpsert,
)
from content_moderation_api.database.repositories.base import BaseRepository
from content_moderation_api.database.repositories.base import to_db_value


class ModeratedContentRepository(BaseRepository[ModeratedContentRecord]):
    """Repository for per-content moderation snapshots."""

    def __init__(self, db: Database):
        super().__init__(db, "moderated_content")

    def _record_to_model(self, record: Record) -> ModeratedContentRecord:
        """Convert database record to ModeratedContentRecord model."""
        return ModeratedContentRecord.model_validate(dict(record))

    async def get_for_content(
        self, content_type: ContentType, content_id: str
    ) -> ModeratedContentRecord | None:
        """Get the record for a content item."""
        query = """
            SELECT * FROM moderated_content
            WHERE content_type = $1 AND content_id = $2
        """

        async with self.db.get_connection() as connection:
            record = await connection.fetchrow(query, content_type.value, content_id)
            return self._record_to_model(record) if record else None

    async def upsert(
        self,
        content_type: ContentType,
        content_id: str,
        data: ModeratedContentUpsert,
    ) -> ModeratedContentRecord:
        """Create or update the record for a content item.

        Fields left as None keep their stored value. ``moderated_at`` is
        stamped whenever a status is written.
        """
        fields = data.model_dump(exclude_none=True)
        columns = list(fields.keys())
        values = [to_db_value(value) for value in fields.values()]

        insert_columns = ["content_type", "content_id", *columns]
        placeholders = [f"${i + 1}" for i in range(len(insert_columns))]
        update_clauses = [f"{column} = EXCLUDED.{column}" for column in columns]
        update_clauses.append("updated_at = NOW()")
        if "moderation_status" in fields:
            insert_columns.append("moderated_at")
            placeholders.append("NOW()")
            update_clauses.append("moderated_at = NOW()")

        query = f"""
            INSERT INTO moderated_content ({", ".join(insert_columns)})
            VALUES ({", ".join(placeholders)})
            ON CONFLICT (content_type, content_id)
            DO UPDATE SET {", ".join(update_clauses)}
            RETURNING *
        """

        async with self.db.get_connection() as connection:
            record = await connection.fetchrow(
                query, content_type.value, content_id, *values
            )
            if record is None:
                raise ValueError("Failed to upsert moderated content")
            return self._record_to_model(record)

    async def list_by_status(
        self,
        status: ModerationStatus,
        content_type: ContentType | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[ModeratedContentRecord]:
        """List records in a status, oldest first."""
        params: list = [status.value]
        type_clause = ""
        if content_type is not None:
            params.append(content_type.value)
            type_clause = "AND content_type = $2"
        params.extend([limit, offset])

        query = f"""
            SELECT * FROM moderated_content
            WHERE moderation_status = $1 {type_clause}
            ORDER BY created_at ASC
            LIMIT ${len(params) - 1} OFFSET ${len(params)}
        """

        async with self.db.get_connection() as connection:
            records = await connection.fetch(query, *params)
            return [self._record_to_model(record) for record in records]

    async def list_stale_pending(
        self, cutoff: datetime, limit: int = 500
    ) -> list[ModeratedContentRecord]:
        """List records still pending that were created before the cutoff."""
        query = """
            SELECT * FROM moderated_content
            WHERE moderation_status = $1 AND created_at < $2
            ORDER BY created_at ASC
            LIMIT $3
        """

        async with self.db.get_connection() as connection:
            records = await connection.fetch(
                query, ModerationStatus.PENDING.value, cutoff, limit
            )
            return [self._record_to_model(record) for record in records]
