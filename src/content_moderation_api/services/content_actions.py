"""Side effects of moderation decisions on the platform's content."""

import logging

from uuid import UUID

from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.base import ModerationAction

logger = logging.getLogger(__name__)


class ContentActionService:
    """
    Boundary to the services that own the moderated content.

    This implementation records each effect in the log. Deployments that own
    the content store subclass it and override the handlers.
    """

    async def perform(
        self,
        content_type: ContentType,
        content_id: str,
        action: ModerationAction,
        moderator_pk: UUID | None = None,
        content_edits: str | None = None,
    ) -> None:
        """Apply the side effect of a moderation action."""
        handlers = {
            ModerationAction.APPROVE: self.restore,
            ModerationAction.REJECT: self.hide,
            ModerationAction.RESTRICT_VISIBILITY: self.restrict_visibility,
            ModerationAction.WARN: self.warn_author,
            ModerationAction.SUSPEND_USER: self.suspend_author,
            ModerationAction.BAN_USER: self.ban_author,
        }

        if action == ModerationAction.EDIT_CONTENT:
            await self.edit(content_type, content_id, content_edits, moderator_pk)
            return

        handler = handlers.get(action)
        if handler is None:
            return
        await handler(content_type, content_id, moderator_pk)

    async def hide(
        self, content_type: ContentType, content_id: str, moderator_pk: UUID | None
    ) -> None:
        logger.info(f"Hiding {content_type.value} {content_id}")

    async def restore(
        self, content_type: ContentType, content_id: str, moderator_pk: UUID | None
    ) -> None:
        logger.info(f"Restoring {content_type.value} {content_id}")

    async def restrict_visibility(
        self, content_type: ContentType, content_id: str, moderator_pk: UUID | None
    ) -> None:
        logger.info(f"Restricting visibility of {content_type.value} {content_id}")

    async def edit(
        self,
        content_type: ContentType,
        content_id: str,
        content_edits: str | None,
        moderator_pk: UUID | None,
    ) -> None:
        if content_edits is None:
            logger.warning(
                f"Edit requested for {content_type.value} {content_id} without edits"
            )
            return
        logger.info(f"Replacing content of {content_type.value} {content_id}")

    async def warn_author(
        self, content_type: ContentType, content_id: str, moderator_pk: UUID | None
    ) -> None:
        logger.info(f"Warning author of {content_type.value} {content_id}")

    async def suspend_author(
        self, content_type: ContentType, content_id: str, moderator_pk: UUID | None
    ) -> None:
        logger.info(f"Suspending author of {content_type.value} {content_id}")

    async def ban_author(
        self, content_type: ContentType, content_id: str, moderator_pk: UUID | None
    ) -> None:
        logger.info(f"Banning author of {content_type.value} {content_id}")
