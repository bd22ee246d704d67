"""Tests for database connection module."""

import logging

from unittest.mock import AsyncMock
from unittest.mock import patch

import pytest

from content_moderation_api.database.connection import Database


class TestDatabase:
    """Test Database connection manager class."""

    @pytest.fixture
    def database_instance(self, mock_database_settings):
        """Create a Database instance for testing."""
        return Database(mock_database_settings)

    def test_init(self, database_instance):
        """Test Database initialization."""
        assert database_instance._pool is None
        assert database_instance.is_connected is False

    @pytest.mark.asyncio
    async def test_connect_success(self, database_instance, mock_pool):
        """Test successful database connection."""
        with patch(
            "asyncpg.create_pool", new=AsyncMock(return_value=mock_pool)
        ) as mock_create_pool:
            await database_instance.connect()

        mock_create_pool.assert_awaited_once()
        kwargs = mock_create_pool.call_args.kwargs
        assert kwargs["min_size"] == 1
        assert kwargs["max_size"] == 5
        assert kwargs["server_settings"]["timezone"] == "UTC"
        assert database_instance.is_connected is True

    @pytest.mark.asyncio
    async def test_connect_already_initialized(
        self, database_instance, mock_pool, caplog
    ):
        """Test connecting when pool is already initialized."""
        database_instance._pool = mock_pool

        with caplog.at_level(logging.WARNING):
            await database_instance.connect()

        assert "Database pool already initialized" in caplog.text

    @pytest.mark.asyncio
    async def test_connect_failure(self, database_instance):
        """Test database connection failure."""
        with patch("asyncpg.create_pool", side_effect=Exception("Connection failed")):
            with pytest.raises(Exception, match="Connection failed"):
                await database_instance.connect()

    @pytest.mark.asyncio
    async def test_disconnect_success(self, database_instance, mock_pool):
        """Test successful database disconnection."""
        database_instance._pool = mock_pool

        await database_instance.disconnect()

        mock_pool.close.assert_called_once()
        assert database_instance._pool is None

    @pytest.mark.asyncio
    async def test_disconnect_not_initialized(self, database_instance, caplog):
        """Test disconnecting when pool is not initialized."""
        with caplog.at_level(logging.WARNING):
            await database_instance.disconnect()

        assert "Database pool not initialized" in caplog.text

    @pytest.mark.asyncio
    async def test_get_connection_not_initialized(self, database_instance):
        """Test getting a connection before connect()."""
        with pytest.raises(RuntimeError, match="Database pool not initialized"):
            async with database_instance.get_connection():
                pass

    @pytest.mark.asyncio
    async def test_health_check_failure(self, database_instance):
        """Health check reports False when no pool is available."""
        assert await database_instance.health_check() is False

    @pytest.mark.asyncio
    async def test_get_pool_stats(self, database_instance, mock_pool):
        """Test pool statistics."""
        assert await database_instance.get_pool_stats() == {
            "status": "not_initialized"
        }

        database_instance._pool = mock_pool
        stats = await database_instance.get_pool_stats()

        assert stats == {
            "status": "initialized",
            "size": 5,
            "min_size": 1,
            "max_size": 10,
            "idle_size": 3,
        }
