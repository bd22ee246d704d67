"""Test configuration for API endpoint tests."""

from unittest.mock import AsyncMock
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from fastapi.testclient import TestClient

from content_moderation_api.api.dependencies import get_appeal_service
from content_moderation_api.api.dependencies import get_classifier_service
from content_moderation_api.api.dependencies import get_cleanup_service
from content_moderation_api.api.dependencies import get_credibility_service
from content_moderation_api.api.dependencies import get_queue_service
from content_moderation_api.api.dependencies import get_rules_engine
from content_moderation_api.api.dependencies import get_token_service
from content_moderation_api.config.settings import AppSettings
from content_moderation_api.main import create_app


@pytest.fixture
def services():
    """Mocked services, one per dependency the routers use."""
    classifier = AsyncMock()
    classifier.status = MagicMock()
    return {
        get_queue_service: AsyncMock(),
        get_appeal_service: AsyncMock(),
        get_token_service: AsyncMock(),
        get_credibility_service: AsyncMock(),
        get_rules_engine: AsyncMock(),
        get_classifier_service: classifier,
        get_cleanup_service: AsyncMock(),
    }


def _provide(service):
    def dependency():
        return service

    return dependency


@pytest.fixture
def app(services):
    """Application without lifespan resources; services are overridden."""
    app = create_app(AppSettings())
    for dependency, service in services.items():
        app.dependency_overrides[dependency] = _provide(service)
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def moderator_headers():
    return {"X-Caller-Id": str(uuid4()), "X-Caller-Capabilities": "moderate"}


@pytest.fixture
def member_headers():
    return {"X-Caller-Id": str(uuid4())}
