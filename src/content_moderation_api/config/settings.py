"""Application settings for the Content Moderation API."""

from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

from content_moderation_api.config.database import DatabaseSettings
from content_moderation_api.config.moderation import ClassifierSettings
from content_moderation_api.config.moderation import ModerationSettings
from content_moderation_api.config.redis import RedisSettings


class AppSettings(BaseSettings):
    """Main application settings."""

    # App info
    app_name: str = Field(
        default="Content Moderation API", description="Application name"
    )
    version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")
    reload: bool = Field(default=False, description="Auto-reload on changes")

    # CORS settings
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed CORS origins",
    )

    # Component settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    classifier: ClassifierSettings = Field(default_factory=ClassifierSettings)
    moderation: ModerationSettings = Field(default_factory=ModerationSettings)

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )


# Loaded once at process start
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get application settings (singleton pattern)."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = AppSettings()
    return _settings
