"""Appeal repositories for the Content Moderation API."""

from uuid import UUID

from asyncpg import Record

from content_moderation_api.database.connection import Database
from content_moderation_api.database.models.appeal import Appeal
from content_moderation_api.database.models.appeal import AppealCreate
from content_moderation_api.database.models.appeal import AppealNotification
from content_moderation_api.database.models.appeal import DecidedAppeal
from content_moderation_api.database.models.base import AppealStatus
from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.base import ModerationStatus
from content_moderation_api.database.repositories.base import BaseRepository


class AppealRepository(BaseRepository[Appeal]):
    """Repository for appeal operations."""

    def __init__(self, db: Database):
        super().__init__(db, "moderation_appeals")

    def _record_to_model(self, record: Record) -> Appeal:
        """Convert database record to Appeal model."""
        return Appeal.model_validate(dict(record))

    async def create_appeal(
        self, appeal_data: AppealCreate, user_pk: UUID, queue_item_pk: UUID | None
    ) -> Appeal:
        """Create a new pending appeal.

        A partial unique index allows one pending appeal per content item;
        a concurrent duplicate raises asyncpg.UniqueViolationError.
        """
        data = {
            "content_type": appeal_data.content_type,
            "content_id": appeal_data.content_id,
            "user_pk": user_pk,
            "reason": appeal_data.reason,
            "additional_info": appeal_data.additional_info,
            "status": AppealStatus.PENDING,
            "queue_item_pk": queue_item_pk,
        }
        return await self.create_from_dict(data)

    async def get_pending_for_content(
        self, content_type: ContentType, content_id: str
    ) -> Appeal | None:
        """Get the pending appeal on a content item, if any."""
        query = """
            SELECT * FROM moderation_appeals
            WHERE content_type = $1 AND content_id = $2 AND status = $3
            LIMIT 1
        """

        async with self.db.get_connection() as connection:
            record = await connection.fetchrow(
                query, content_type.value, content_id, AppealStatus.PENDING.value
            )
            return self._record_to_model(record) if record else None

    async def decide(
        self,
        pk: UUID,
        status: AppealStatus,
        reviewer_pk: UUID,
        moderator_notes: str | None,
    ) -> DecidedAppeal | None:
        """Record a decision on a pending appeal.

        The decision, the appellant's notification and, for an approval, the
        content record's status are written in one transaction. Returns None
        when the appeal is no longer pending.
        """
        decide_query = """
            UPDATE moderation_appeals
            SET status = $2,
                reviewed_by_pk = $3,
                moderator_notes = $4,
                reviewed_at = NOW(),
                updated_at = NOW()
            WHERE pk = $1 AND status = $5
            RETURNING *
        """
        notification_query = """
            INSERT INTO moderation_appeal_notifications (appeal_pk, user_pk, status)
            VALUES ($1, $2, $3)
            RETURNING *
        """
        restore_query = """
            UPDATE moderated_content
            SET moderation_status = $3,
                moderated_by_pk = $4,
                reason = $5,
                moderated_at = NOW(),
                updated_at = NOW()
            WHERE content_type = $1 AND content_id = $2
        """

        async with self.db.get_transaction() as connection:
            record = await connection.fetchrow(
                decide_query,
                pk,
                status.value,
                reviewer_pk,
                moderator_notes,
                AppealStatus.PENDING.value,
            )
            if record is None:
                return None
            appeal = self._record_to_model(record)

            notification_record = await connection.fetchrow(
                notification_query, appeal.pk, appeal.user_pk, status.value
            )
            if notification_record is None:
                raise ValueError(f"Failed to create notification for appeal {pk}")

            if status == AppealStatus.APPROVED:
                await connection.execute(
                    restore_query,
                    appeal.content_type.value,
                    appeal.content_id,
                    ModerationStatus.APPROVED.value,
                    reviewer_pk,
                    f"Appeal {appeal.pk} approved",
                )

            return DecidedAppeal(
                appeal=appeal,
                notification=AppealNotification.model_validate(
                    dict(notification_record)
                ),
            )

    async def list_by_status(
        self, status: AppealStatus | None, limit: int, offset: int
    ) -> list[Appeal]:
        """List appeals, oldest first, optionally filtered by status."""
        if status is None:
            query = """
                SELECT * FROM moderation_appeals
                ORDER BY created_at ASC
                LIMIT $1 OFFSET $2
            """
            params: list = [limit, offset]
        else:
            query = """
                SELECT * FROM moderation_appeals
                WHERE status = $1
                ORDER BY created_at ASC
                LIMIT $2 OFFSET $3
            """
            params = [status.value, limit, offset]

        async with self.db.get_connection() as connection:
            records = await connection.fetch(query, *params)
            return [self._record_to_model(record) for record in records]

    async def count_by_status(self, status: AppealStatus | None) -> int:
        """Count appeals, optionally filtered by status."""
        if status is None:
            return await self.count()
        return await self.count("status = $1", [status.value])

    async def list_for_user(
        self, user_pk: UUID, limit: int, offset: int
    ) -> list[Appeal]:
        """List a user's appeals, newest first."""
        query = """
            SELECT * FROM moderation_appeals
            WHERE user_pk = $1
            ORDER BY created_at DESC
            LIMIT $2 OFFSET $3
        """

        async with self.db.get_connection() as connection:
            records = await connection.fetch(query, user_pk, limit, offset)
            return [self._record_to_model(record) for record in records]

    async def count_for_user(self, user_pk: UUID) -> int:
        """Count a user's appeals."""
        return await self.count("user_pk = $1", [user_pk])


class AppealNotificationRepository(BaseRepository[AppealNotification]):
    """Repository for appeal notifications."""

    def __init__(self, db: Database):
        super().__init__(db, "moderation_appeal_notifications")

    def _record_to_model(self, record: Record) -> AppealNotification:
        """Convert database record to AppealNotification model."""
        return AppealNotification.model_validate(dict(record))

    async def mark_read(self, appeal_pk: UUID, user_pk: UUID) -> int:
        """Mark a user's notifications for an appeal as read."""
        query = """
            UPDATE moderation_appeal_notifications
            SET read = TRUE, updated_at = NOW()
            WHERE appeal_pk = $1 AND user_pk = $2 AND read = FALSE
        """

        async with self.db.get_connection() as connection:
            result = await connection.execute(query, appeal_pk, user_pk)
            return int(result.split()[-1]) if result else 0

    async def list_for_user(
        self, user_pk: UUID, unread_only: bool = False, limit: int = 50
    ) -> list[AppealNotification]:
        """List a user's notifications, newest first."""
        read_clause = "AND read = FALSE" if unread_only else ""
        query = f"""
            SELECT * FROM moderation_appeal_notifications
            WHERE user_pk = $1 {read_clause}
            ORDER BY created_at DESC
            LIMIT $2
        """

        async with self.db.get_connection() as connection:
            records = await connection.fetch(query, user_pk, limit)
            return [self._record_to_model(record) for record in records]
