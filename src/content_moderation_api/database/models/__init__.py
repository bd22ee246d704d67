"""Database models for the Content Moderation API."""

from content_moderation_api.database.models.appeal import Appeal
from content_moderation_api.database.models.appeal import AppealCreate
from content_moderation_api.database.models.appeal import AppealDecision
from content_moderation_api.database.models.appeal import AppealNotification
from content_moderation_api.database.models.appeal import AppealPage
from content_moderation_api.database.models.base import AppealStatus
from content_moderation_api.database.models.base import BaseDBModel
from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.base import ModerationAction
from content_moderation_api.database.models.base import ModerationPriority
from content_moderation_api.database.models.base import ModerationStatus
from content_moderation_api.database.models.base import PaginationInfo
from content_moderation_api.database.models.moderated_content import (
    ModeratedContentRecord,
)
from content_moderation_api.database.models.moderated_content import (
    ModeratedContentUpsert,
)
from content_moderation_api.database.models.moderation_rule import RuleConfiguration
from content_moderation_api.database.models.moderation_token import ModerationToken
from content_moderation_api.database.models.moderation_token import TokenError
from content_moderation_api.database.models.moderation_token import TokenValidation
from content_moderation_api.database.models.queue import HistoryEntry
from content_moderation_api.database.models.queue import QueueItem
from content_moderation_api.database.models.queue import QueueSubmission
from content_moderation_api.database.models.reporter_credibility import (
    ReporterCredibility,
)
from content_moderation_api.database.models.reporter_credibility import (
    ReportOutcome,
)

__all__ = [
    "Appeal",
    "AppealCreate",
    "AppealDecision",
    "AppealNotification",
    "AppealPage",
    "AppealStatus",
    "BaseDBModel",
    "ContentType",
    "HistoryEntry",
    "ModeratedContentRecord",
    "ModeratedContentUpsert",
    "ModerationAction",
    "ModerationPriority",
    "ModerationStatus",
    "ModerationToken",
    "PaginationInfo",
    "QueueItem",
    "QueueSubmission",
    "ReportOutcome",
    "ReporterCredibility",
    "RuleConfiguration",
    "TokenError",
    "TokenValidation",
]
