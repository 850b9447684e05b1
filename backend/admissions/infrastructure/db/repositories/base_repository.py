"""
Base Repository for the Admissions Backend

Generic repository implementing CRUD operations over one Supabase table.
Every PostgREST call goes through ``_execute`` so failures surface as
``DatabaseError`` with the operation and table attached, logged once and
never retried.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlmodel import SQLModel
from supabase import Client

from admissions.infrastructure.db.models.base import RecordModel, utc_now
from admissions.infrastructure.exceptions import DatabaseError


logger = logging.getLogger(__name__)

# Type variables for generic repository
ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=RecordModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=RecordModel)


class IReadRepository(ABC, Generic[ModelType]):
    """Interface for read operations."""

    @abstractmethod
    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """Get a single record by its key."""
        pass

    @abstractmethod
    async def exists(self, id: str) -> bool:
        """Check if a record exists."""
        pass


class IWriteRepository(ABC, Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Interface for write operations."""

    @abstractmethod
    async def create(self, data: CreateSchemaType) -> ModelType:
        """Create a new record."""
        pass

    @abstractmethod
    async def update(
        self,
        id: str,
        data: UpdateSchemaType
    ) -> Optional[ModelType]:
        """Update an existing record."""
        pass

    @abstractmethod
    async def delete(self, id: str) -> bool:
        """Delete a record by key."""
        pass


class BaseRepository(
    IReadRepository[ModelType],
    IWriteRepository[ModelType, CreateSchemaType, UpdateSchemaType],
    Generic[ModelType, CreateSchemaType, UpdateSchemaType]
):
    """
    Generic repository with CRUD operations over a Supabase table.

    Args:
        model: Row schema returned to callers
        client: Supabase client (service role)
        table: Table name
        primary_key: Column used by get/update/delete
        timestamped: Whether to stamp created_at/updated_at on writes
    """

    def __init__(
        self,
        model: Type[ModelType],
        client: Client,
        table: str,
        primary_key: str = "id",
        timestamped: bool = False,
    ):
        self._model = model
        self._client = client
        self._table = table
        self._primary_key = primary_key
        self._timestamped = timestamped

    @property
    def client(self) -> Client:
        """Get the underlying client."""
        return self._client

    def _query(self):
        return self._client.table(self._table)

    async def _execute(self, query: Any, operation: str) -> Any:
        """
        Run a prepared PostgREST query off the event loop.

        Raises:
            DatabaseError: On any client or transport failure
        """
        try:
            return await asyncio.to_thread(query.execute)
        except DatabaseError:
            raise
        except Exception as e:
            logger.error(f"{operation} on {self._table} failed: {e}")
            raise DatabaseError(
                f"Error during {operation} on {self._table}: {str(e)}",
                operation=operation,
                table=self._table,
                original_error=e,
            )

    def _to_model(self, row: Dict[str, Any]) -> ModelType:
        return self._model.model_validate(row)

    def _to_models(self, rows: Optional[List[Dict[str, Any]]]) -> List[ModelType]:
        return [self._to_model(row) for row in rows or []]

    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """
        Get a single record by its primary key.

        Returns:
            Model instance or None if not found
        """
        result = await self._execute(
            self._query().select("*").eq(self._primary_key, id).limit(1),
            "select",
        )
        rows = result.data or []
        return self._to_model(rows[0]) if rows else None

    async def exists(self, id: str) -> bool:
        result = await self.get_by_id(id)
        return result is not None

    async def create(self, data: CreateSchemaType) -> ModelType:
        """
        Create a new record.

        Raises:
            DatabaseError: If the insert returns no row
        """
        row = data.to_row()
        if self._timestamped:
            now = utc_now().isoformat()
            row["created_at"] = now
            row["updated_at"] = now

        result = await self._execute(self._query().insert(row), "insert")
        if not result.data:
            raise DatabaseError(
                f"Failed to create record in {self._table}",
                operation="insert",
                table=self._table,
            )
        return self._to_model(result.data[0])

    async def update(
        self,
        id: str,
        data: UpdateSchemaType
    ) -> Optional[ModelType]:
        """
        Update an existing record (only fields explicitly set on ``data``).

        Returns:
            Updated model instance or None if not found
        """
        update_data = data.to_row(exclude_unset=True)
        if not update_data:
            return await self.get_by_id(id)
        if self._timestamped:
            update_data["updated_at"] = utc_now().isoformat()

        result = await self._execute(
            self._query().update(update_data).eq(self._primary_key, id),
            "update",
        )
        rows = result.data or []
        return self._to_model(rows[0]) if rows else None

    async def delete(self, id: str) -> bool:
        """
        Delete a record by key.

        Returns:
            True if deleted, False if not found
        """
        result = await self._execute(
            self._query().delete().eq(self._primary_key, id),
            "delete",
        )
        return bool(result.data)

