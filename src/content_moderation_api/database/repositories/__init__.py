"""Database repositories for the Content Moderation API."""

from content_moderation_api.database.repositories.appeal import AppealRepository
from content_moderation_api.database.repositories.appeal import (
    AppealNotificationRepository,
)
from content_moderation_api.database.repositories.base import BaseRepository
from content_moderation_api.database.repositories.moderated_content import (
    ModeratedContentRepository,
)
from content_moderation_api.database.repositories.moderation_rule import (
    RuleConfigurationRepository,
)
from content_moderation_api.database.repositories.moderation_token import (
    ModerationTokenRepository,
)
from content_moderation_api.database.repositories.queue import (
    ModerationHistoryRepository,
)
from content_moderation_api.database.repositories.queue import QueueItemRepository
from content_moderation_api.database.repositories.reporter_credibility import (
    ReporterCredibilityRepository,
)

__all__ = [
    "AppealNotificationRepository",
    "AppealRepository",
    "BaseRepository",
    "ModeratedContentRepository",
    "ModerationHistoryRepository",
    "ModerationTokenRepository",
    "QueueItemRepository",
    "ReporterCredibilityRepository",
    "RuleConfigurationRepository",
]
