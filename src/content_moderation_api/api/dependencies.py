"""Service wiring for API endpoints.

Long-lived resources live on ``app.state`` (created in the application
lifespan); services and repositories are built per request around them.
"""

from typing import Annotated

from fastapi import Depends
from fastapi import Request

from content_moderation_api.config.settings import AppSettings
from content_moderation_api.database.connection import Database
from content_moderation_api.database.redis_connection import ModerationCache
from content_moderation_api.database.repositories.appeal import AppealRepository
from content_moderation_api.database.repositories.appeal import (
    AppealNotificationRepository,
)
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
from content_moderation_api.services.appeal_service import AppealService
from content_moderation_api.services.classifier_service import ClassifierService
from content_moderation_api.services.cleanup_service import CleanupService
from content_moderation_api.services.content_actions import ContentActionService
from content_moderation_api.services.content_registry import ContentRegistry
from content_moderation_api.services.credibility_service import CredibilityService
from content_moderation_api.services.notification_service import (
    AppealNotificationDispatcher,
)
from content_moderation_api.services.queue_ordering import get_queue_ordering
from content_moderation_api.services.queue_service import QueueService
from content_moderation_api.services.rules_engine import RulesEngine
from content_moderation_api.services.token_service import TokenService


def get_app_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_content_actions(request: Request) -> ContentActionService:
    return request.app.state.content_actions


def get_content_registry(request: Request) -> ContentRegistry:
    return request.app.state.content_registry


async def get_cache(request: Request) -> ModerationCache:
    """Get the Redis-backed cache."""
    settings: AppSettings = request.app.state.settings
    redis_client = await request.app.state.redis.get_redis_client()
    return ModerationCache(
        redis_client, enabled=settings.moderation.enable_edge_caching
    )


SettingsDep = Annotated[AppSettings, Depends(get_app_settings)]
DatabaseDep = Annotated[Database, Depends(get_database)]
CacheDep = Annotated[ModerationCache, Depends(get_cache)]
ContentActionsDep = Annotated[ContentActionService, Depends(get_content_actions)]


def get_classifier_service(
    request: Request, settings: SettingsDep
) -> ClassifierService:
    """Get classifier service instance."""
    return ClassifierService(settings.classifier, request.app.state.http_client)


def get_rules_engine(db: DatabaseDep) -> RulesEngine:
    """Get rules engine instance."""
    return RulesEngine(RuleConfigurationRepository(db))


def get_token_service(db: DatabaseDep, settings: SettingsDep) -> TokenService:
    """Get token service instance."""
    return TokenService(ModerationTokenRepository(db), settings.moderation)


def get_credibility_service(
    db: DatabaseDep, cache: CacheDep, settings: SettingsDep
) -> CredibilityService:
    """Get credibility service instance."""
    return CredibilityService(
        ReporterCredibilityRepository(db), cache, settings.moderation
    )


def get_queue_service(
    db: DatabaseDep,
    settings: SettingsDep,
    classifier: Annotated[ClassifierService, Depends(get_classifier_service)],
    rules_engine: Annotated[RulesEngine, Depends(get_rules_engine)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
    credibility_service: Annotated[
        CredibilityService, Depends(get_credibility_service)
    ],
    content_actions: ContentActionsDep,
    content_registry: Annotated[ContentRegistry, Depends(get_content_registry)],
) -> QueueService:
    """Get queue service instance."""
    return QueueService(
        queue_repository=QueueItemRepository(db),
        history_repository=ModerationHistoryRepository(db),
        content_repository=ModeratedContentRepository(db),
        classifier=classifier,
        rules_engine=rules_engine,
        token_service=token_service,
        credibility_service=credibility_service,
        content_actions=content_actions,
        content_registry=content_registry,
        settings=settings.moderation,
        ordering=get_queue_ordering(settings.moderation.queue_ordering),
    )


def get_appeal_service(
    db: DatabaseDep,
    settings: SettingsDep,
    cache: CacheDep,
    credibility_service: Annotated[
        CredibilityService, Depends(get_credibility_service)
    ],
    content_actions: ContentActionsDep,
) -> AppealService:
    """Get appeal service instance."""
    return AppealService(
        appeal_repository=AppealRepository(db),
        notification_repository=AppealNotificationRepository(db),
        content_repository=ModeratedContentRepository(db),
        queue_repository=QueueItemRepository(db),
        content_actions=content_actions,
        credibility_service=credibility_service,
        notification_dispatcher=AppealNotificationDispatcher(cache),
        credibility_policy=settings.moderation.appeal_credibility_policy,
    )


def get_cleanup_service(
    db: DatabaseDep,
    settings: SettingsDep,
    token_service: Annotated[TokenService, Depends(get_token_service)],
    content_actions: ContentActionsDep,
) -> CleanupService:
    """Get cleanup service instance."""
    return CleanupService(
        token_service=token_service,
        content_repository=ModeratedContentRepository(db),
        queue_repository=QueueItemRepository(db),
        content_actions=content_actions,
        settings=settings.moderation,
    )
