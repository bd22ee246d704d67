"""Database connection management for the Content Moderation API."""

import json
import logging

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import asyncpg

from asyncpg import Connection
from asyncpg import Pool

from content_moderation_api.config.database import DatabaseSettings

logger = logging.getLogger(__name__)


async def _init_connection(connection: Connection) -> None:
    """Decode JSON columns into Python objects."""
    for type_name in ("json", "jsonb"):
        await connection.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


class Database:
    """Database connection manager with connection pooling."""

    def __init__(self, settings: DatabaseSettings):
        self._pool: Pool | None = None
        self._settings = settings

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """Initialize the database connection pool."""
        if self._pool is not None:
            logger.warning("Database pool already initialized")
            return

        try:
            self._pool = await asyncpg.create_pool(
                self._settings.get_url(),
                min_size=self._settings.min_pool_size,
                max_size=self._settings.max_pool_size,
                timeout=self._settings.pool_timeout,
                command_timeout=self._settings.command_timeout,
                init=_init_connection,
                server_settings={
                    "application_name": "content-moderation-api",
                    "timezone": "UTC",
                },
            )
            logger.info("Database connection pool initialized")

        except Exception as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise

    async def disconnect(self) -> None:
        """Close the database connection pool."""
        if self._pool is None:
            logger.warning("Database pool not initialized")
            return

        try:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection pool closed")

        except Exception as e:
            logger.error(f"Error closing database pool: {e}")
            raise

    @asynccontextmanager
    async def get_connection(self) -> AsyncGenerator[Connection]:
        """Get a database connection from the pool."""
        if self._pool is None:
            raise RuntimeError("Database pool not initialized. Call connect() first.")

        async with self._pool.acquire() as connection:
            try:
                yield connection
            except Exception as e:
                logger.error(f"Database connection error: {e}")
                raise

    @asynccontextmanager
    async def get_transaction(self) -> AsyncGenerator[Connection]:
        """Get a database connection with an active transaction."""
        async with self.get_connection() as connection:
            async with connection.transaction():
                yield connection

    async def health_check(self) -> bool:
        """Check if the database connection is healthy."""
        try:
            async with self.get_connection() as connection:
                await connection.fetchval("SELECT 1")
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    async def get_pool_stats(self) -> dict:
        """Get connection pool statistics."""
        if self._pool is None:
            return {"status": "not_initialized"}

        return {
            "status": "initialized",
            "size": self._pool.get_size(),
            "min_size": self._pool.get_min_size(),
            "max_size": self._pool.get_max_size(),
            "idle_size": self._pool.get_idle_size(),
        }
