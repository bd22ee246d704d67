"""Hand-off of appeal notifications to the delivery transport."""

import logging

from content_moderation_api.database.models.appeal import Appeal
from content_moderation_api.database.models.appeal import AppealNotification
from content_moderation_api.database.redis_connection import ModerationCache

logger = logging.getLogger(__name__)


def user_channel(user_pk) -> str:
    return f"notifications:user:{user_pk}"


class AppealNotificationDispatcher:
    """Publishes appeal notifications on the user's Redis channel."""

    def __init__(self, cache: ModerationCache):
        self.cache = cache

    async def dispatch(self, notification: AppealNotification, appeal: Appeal) -> None:
        """Publish a notification. Delivery failures are logged, not raised."""
        message = {
            "type": "appeal_decision",
            "notification_id": str(notification.pk),
            "appeal_id": str(appeal.pk),
            "content_type": appeal.content_type.value,
            "content_id": appeal.content_id,
            "status": notification.status.value,
            "moderator_notes": appeal.moderator_notes,
        }
        try:
            await self.cache.publish(user_channel(notification.user_pk), message)
        except Exception as e:
            logger.warning(
                f"Failed to publish appeal notification {notification.pk}: {e}"
            )
