"""Rule configuration repository for the Content Moderation API."""

from asyncpg import Record

from content_moderation_api.database.connection import Database
from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.moderation_rule import RuleConfiguration
from content_moderation_api.database.models.moderation_rule import (
    RuleConfigurationUpdate,
)
from content_moderation_api.database.repositories.base import BaseRepository


class RuleConfigurationRepository(BaseRepository[RuleConfiguration]):
    """Repository for per-content-type rule configurations."""

    def __init__(self, db: Database):
        super().__init__(db, "moderation_rules")

    def _record_to_model(self, record: Record) -> RuleConfiguration:
        """Convert database record to RuleConfiguration model."""
        return RuleConfiguration.model_validate(dict(record))

    async def get_for_content_type(
        self, content_type: ContentType
    ) -> RuleConfiguration | None:
        """Get the rule configuration of a content type."""
        query = "SELECT * FROM moderation_rules WHERE content_type = $1"

        async with self.db.get_connection() as connection:
            record = await connection.fetchrow(query, content_type.value)
            return self._record_to_model(record) if record else None

    async def save(
        self, content_type: ContentType, update: RuleConfigurationUpdate
    ) -> RuleConfiguration:
        """Replace the rule configuration of a content type."""
        query = """
            INSERT INTO moderation_rules
                (content_type, enabled, blocked_keywords, auto_reject_threshold,
                 max_links, match_priority)
            VALUES ($1, $2, $3, $4, $5, $6)
            ON CONFLICT (content_type) DO UPDATE SET
                enabled = EXCLUDED.enabled,
                blocked_keywords = EXCLUDED.blocked_keywords,
                auto_reject_threshold = EXCLUDED.auto_reject_threshold,
                max_links = EXCLUDED.max_links,
                match_priority = EXCLUDED.match_priority,
                updated_at = NOW()
            RETURNING *
        """

        async with self.db.get_connection() as connection:
            record = await connection.fetchrow(
                query,
                content_type.value,
                update.enabled,
                update.blocked_keywords,
                update.auto_reject_threshold,
                update.max_links,
                update.match_priority.value,
            )
            if record is None:
                raise ValueError(f"Failed to save rules for {content_type.value}")
            return self._record_to_model(record)
