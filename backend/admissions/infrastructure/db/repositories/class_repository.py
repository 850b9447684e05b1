"""
Class Repository for the Admissions Backend

Classes are addressed by their unique ``code`` rather than a surrogate id.
"""

from typing import List, Optional

from supabase import Client

from admissions.infrastructure.db.models.admission_class import (
    AdmissionClassCreate,
    AdmissionClassRecord,
    AdmissionClassUpdate,
)
from admissions.infrastructure.db.repositories.base_repository import BaseRepository
from admissions.infrastructure.exceptions import DuplicateError


class ClassRepository(
    BaseRepository[AdmissionClassRecord, AdmissionClassCreate, AdmissionClassUpdate]
):
    """Repository for the ``classes`` table, keyed by class code."""

    def __init__(self, client: Client):
        super().__init__(
            AdmissionClassRecord, client, "classes",
            primary_key="code", timestamped=True,
        )

    async def get_by_code(self, code: str) -> Optional[AdmissionClassRecord]:
        return await self.get_by_id(code)

    async def list_classes(self) -> List[AdmissionClassRecord]:
        """All classes ordered by name (public class selector)."""
        result = await self._execute(
            self._query().select("*").order("name"),
            "select",
        )
        return self._to_models(result.data)

    async def create(self, data: AdmissionClassCreate) -> AdmissionClassRecord:
        """
        Create a class.

        Raises:
            DuplicateError: If the code is already taken
        """
        if await self.exists(data.code):
            raise DuplicateError(
                f"Class {data.code} already exists",
                operation="insert",
                table=self._table,
            )
        return await super().create(data)
