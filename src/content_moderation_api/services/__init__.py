"""Service layer for the Content Moderation API."""

from content_moderation_api.services.appeal_service import AppealService
from content_moderation_api.services.classifier_service import ClassifierService
from content_moderation_api.services.cleanup_service import CleanupService
from content_moderation_api.services.credibility_service import CredibilityService
from content_moderation_api.services.queue_service import QueueService
from content_moderation_api.services.rules_engine import RulesEngine
from content_moderation_api.services.token_service import TokenService

__all__ = [
    "AppealService",
    "ClassifierService",
    "CleanupService",
    "CredibilityService",
    "QueueService",
    "RulesEngine",
    "TokenService",
]
