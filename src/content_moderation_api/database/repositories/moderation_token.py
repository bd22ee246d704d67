"""Moderation token repository for the Content Moderation API."""

from datetime import datetime

from asyncpg import Record

from content_moderation_api.database.connection import Database
from content_moderation_api.database.models.moderation_token import ModerationToken
from content_moderation_api.database.models.moderation_token import (
    ModerationTokenCreate,
)
from content_moderation_api.database.repositories.base import BaseRepository


class ModerationTokenRepository(BaseRepository[ModerationToken]):
    """Repository for moderation tokens."""

    def __init__(self, db: Database):
        super().__init__(db, "moderation_tokens")

    def _record_to_model(self, record: Record) -> ModerationToken:
        """Convert database record to ModerationToken model."""
        return ModerationToken.model_validate(dict(record))

    async def create_token(self, token_data: ModerationTokenCreate) -> ModerationToken:
        """Persist a newly issued token."""
        return await self.create_from_dict(token_data.model_dump())

    async def get_by_token(self, token: str) -> ModerationToken | None:
        """Get a token by its opaque value."""
        query = "SELECT * FROM moderation_tokens WHERE token = $1"

        async with self.db.get_connection() as connection:
            record = await connection.fetchrow(query, token)
            return self._record_to_model(record) if record else None

    async def consume(self, token: str, now: datetime) -> ModerationToken | None:
        """Record one use of a token if it is still usable.

        Returns None when the token was revoked, expired or used up
        concurrently.
        """
        query = """
            UPDATE moderation_tokens
            SET current_usage_count = current_usage_count + 1, updated_at = NOW()
            WHERE token = $1
              AND revoked = FALSE
              AND expires_at >= $2
              AND (max_usage_count IS NULL OR current_usage_count < max_usage_count)
            RETURNING *
        """

        async with self.db.get_connection() as connection:
            record = await connection.fetchrow(query, token, now)
            return self._record_to_model(record) if record else None

    async def revoke(self, token: str) -> bool:
        """Mark a token revoked."""
        query = """
            UPDATE moderation_tokens
            SET revoked = TRUE, updated_at = NOW()
            WHERE token = $1
        """

        async with self.db.get_connection() as connection:
            result = await connection.execute(query, token)
            return result == "UPDATE 1"

    async def purge_expired(self, cutoff: datetime) -> int:
        """Delete tokens that expired before the cutoff."""
        query = "DELETE FROM moderation_tokens WHERE expires_at < $1"

        async with self.db.get_connection() as connection:
            result = await connection.execute(query, cutoff)
            return int(result.split()[-1]) if result else 0
