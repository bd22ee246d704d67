"""Base repository class for the Content Moderation API."""

from abc import ABC
from abc import abstractmethod
from enum import Enum
from typing import Any
from typing import Generic
from typing import TypeVar
from uuid import UUID

from asyncpg import Record

from content_moderation_api.database.connection import Database

T = TypeVar("T")


def to_db_value(value: Any) -> Any:
    """Convert Python values to what asyncpg expects for a column."""
    if isinstance(value, Enum):
        return value.value
    return value


class BaseRepository(ABC, Generic[T]):
    """Base repository class with common database operations."""

    def __init__(self, db: Database, table_name: str):
        self.db = db
        self.table_name = table_name

    @abstractmethod
    def _record_to_model(self, record: Record) -> T:
        """Convert database record to model instance."""

    async def get_by_pk(self, pk: UUID) -> T | None:
        """Get a record by primary key."""
        query = f"SELECT * FROM {self.table_name} WHERE pk = $1"

        async with self.db.get_connection() as connection:
            record = await connection.fetchrow(query, pk)
            return self._record_to_model(record) if record else None

    async def count(
        self, where_clause: str = "", params: list[Any] | None = None
    ) -> int:
        """Count records with optional where clause."""
        if params is None:
            params = []

        query = f"SELECT COUNT(*) FROM {self.table_name}"
        if where_clause:
            query += f" WHERE {where_clause}"

        async with self.db.get_connection() as connection:
            result = await connection.fetchval(query, *params)
            return result or 0

    async def create_from_dict(self, data: dict[str, Any]) -> T:
        """Create a new record."""
        columns = list(data.keys())
        placeholders = [f"${i + 1}" for i in range(len(columns))]
        values = [to_db_value(value) for value in data.values()]

        query = f"""
            INSERT INTO {self.table_name} ({", ".join(columns)})
            VALUES ({", ".join(placeholders)})
            RETURNING *
        """

        async with self.db.get_connection() as connection:
            record = await connection.fetchrow(query, *values)
            if record is None:
                raise ValueError(f"Failed to create record in {self.table_name}")
            return self._record_to_model(record)
