"""Main application entry point for the Content Moderation API."""

import logging

from contextlib import asynccontextmanager

import httpx

from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from content_moderation_api.api.appeals import router as appeals_router
from content_moderation_api.api.classifier import router as classifier_router
from content_moderation_api.api.credibility import router as credibility_router
from content_moderation_api.api.errors import request_validation_handler
from content_moderation_api.api.maintenance import router as maintenance_router
from content_moderation_api.api.queue import router as queue_router
from content_moderation_api.api.rules import router as rules_router
from content_moderation_api.api.tokens import router as tokens_router
from content_moderation_api.config.settings import AppSettings
from content_moderation_api.config.settings import get_settings
from content_moderation_api.database.connection import Database
from content_moderation_api.database.redis_connection import RedisConnection
from content_moderation_api.database.repositories.moderated_content import (
    ModeratedContentRepository,
)
from content_moderation_api.services.content_actions import ContentActionService
from content_moderation_api.services.content_registry import build_content_registry
from content_moderation_api.services.queue_ordering import get_queue_ordering

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings: AppSettings = app.state.settings
    # Fail fast on a misconfigured ordering
    get_queue_ordering(settings.moderation.queue_ordering)

    # Startup
    database = Database(settings.database)
    await database.connect()
    redis_connection = RedisConnection(settings.redis)
    http_client = httpx.AsyncClient(timeout=settings.classifier.timeout)

    app.state.database = database
    app.state.redis = redis_connection
    app.state.http_client = http_client
    app.state.content_actions = ContentActionService()
    app.state.content_registry = build_content_registry(
        ModeratedContentRepository(database)
    )
    logger.info(f"{settings.app_name} started")

    yield

    # Shutdown
    await http_client.aclose()
    await redis_connection.close()
    await database.disconnect()


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Content moderation decision pipeline",
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Include routers
    app.include_router(queue_router, prefix="/api/v1")
    app.include_router(rules_router, prefix="/api/v1")
    app.include_router(classifier_router, prefix="/api/v1")
    app.include_router(tokens_router, prefix="/api/v1")
    app.include_router(credibility_router, prefix="/api/v1")
    app.include_router(appeals_router, prefix="/api/v1")
    app.include_router(maintenance_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        database: Database = request.app.state.database

        db_healthy = await database.health_check()
        pool_stats = await database.get_pool_stats()

        return {
            "status": "ok" if db_healthy else "error",
            "database": {
                "healthy": db_healthy,
                "pool": pool_stats,
            },
        }

    return app


def main():
    """Main entry point - creates and returns the app instance."""
    return create_app()


if __name__ == "__main__":
    # Only run uvicorn when called directly, not when imported
    import uvicorn

    app_settings = get_settings()
    uvicorn.run(
        "content_moderation_api.main:main",
        factory=True,
        host=app_settings.host,
        port=app_settings.port,
        reload=app_settings.reload,
        log_level="info",
    )
