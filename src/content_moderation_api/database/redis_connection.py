"""Redis connection and JSON cache helpers."""

import json
import logging

from typing import Any

import redis.asyncio as redis

from content_moderation_api.config.redis import RedisSettings

logger = logging.getLogger(__name__)


class RedisConnection:
    """Redis connection manager."""

    def __init__(self, settings: RedisSettings):
        self.settings = settings
        self._redis_client: redis.Redis | None = None

    async def get_redis_client(self) -> redis.Redis:
        """Get Redis client for caching operations."""
        if self._redis_client is None:
            self._redis_client = redis.from_url(
                self.settings.redis_url,
                max_connections=self.settings.max_connections,
                retry_on_timeout=self.settings.retry_on_timeout,
                socket_timeout=self.settings.socket_timeout,
                socket_connect_timeout=self.settings.socket_connect_timeout,
                decode_responses=True,
            )
        return self._redis_client

    async def close(self) -> None:
        """Close Redis connections."""
        if self._redis_client:
            await self._redis_client.aclose()
            self._redis_client = None


class ModerationCache:
    """
    JSON cache on top of Redis.

    Reads and writes never raise: a Redis outage degrades to cache misses.
    Cached values are only used for read endpoints.
    """

    def __init__(self, redis_client: redis.Redis | None, enabled: bool = True):
        self.redis_client = redis_client
        self.enabled = enabled and redis_client is not None

    async def get_json(self, key: str) -> Any | None:
        if not self.enabled:
            return None
        try:
            cached = await self.redis_client.get(key)  # type: ignore[union-attr]
        except Exception as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None
        return json.loads(cached) if cached else None

    async def set_json(self, key: str, value: Any, ttl: int) -> None:
        if not self.enabled:
            return
        try:
            await self.redis_client.setex(  # type: ignore[union-attr]
                key, ttl, json.dumps(value, default=str)
            )
        except Exception as e:
            logger.warning(f"Cache write failed for {key}: {e}")

    async def delete(self, *keys: str) -> None:
        if not self.enabled or not keys:
            return
        try:
            await self.redis_client.delete(*keys)  # type: ignore[union-attr]
        except Exception as e:
            logger.warning(f"Cache invalidation failed for {keys}: {e}")

    async def publish(self, channel: str, message: dict[str, Any]) -> None:
        if self.redis_client is None:
            return
        await self.redis_client.publish(channel, json.dumps(message, default=str))
