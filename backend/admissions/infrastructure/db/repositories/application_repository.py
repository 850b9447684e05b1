"""
Application Repository for the Admissions Backend

Specialized repository for the ``applications`` table.
Extends base repository with listing filters, per-class id lookups and
the narrow projections the duplicate checks read.
"""

from typing import Any, Dict, Iterable, List, Optional

from supabase import Client

from admissions.domain.models import ApplicationStatus
from admissions.infrastructure.db.models.application import (
    Application,
    ApplicationCreate,
    ApplicationUpdate,
)
from admissions.infrastructure.db.repositories.base_repository import BaseRepository

# Columns read by the duplicate checks.
CONTACT_COLUMNS = "id, class_code, status, created_at, student_details, other_details"


class ApplicationRepository(
    BaseRepository[Application, ApplicationCreate, ApplicationUpdate]
):
    """
    Repository for Application CRUD and specialized queries.

    Extends base repository with application-specific operations:
    - list_applications: Filtered, newest-first listing
    - list_ids_for_class: Ids already issued for a class code
    - list_contact_rows: Name/mobile/email projection for duplicate checks
    """

    def __init__(self, client: Client):
        super().__init__(Application, client, "applications", timestamped=True)

    async def list_applications(
        self,
        status: Optional[ApplicationStatus] = None,
        class_code: Optional[str] = None,
        class_codes: Optional[Iterable[str]] = None,
        search: Optional[str] = None,
    ) -> List[Application]:
        """
        List applications newest first.

        Args:
            status: Only this status
            class_code: Only this class
            class_codes: Restrict to these classes (moderator scoping);
                an empty collection yields no rows
            search: Case-insensitive match on id, name, mobile or email
        """
        if class_codes is not None:
            class_codes = list(class_codes)
            if not class_codes:
                return []

        query = self._query().select("*")
        if status is not None:
            query = query.eq("status", ApplicationStatus(status).value)
        if class_code:
            query = query.eq("class_code", class_code)
        if class_codes is not None:
            query = query.in_("class_code", class_codes)
        query = query.order("created_at", desc=True)

        result = await self._execute(query, "select")
        applications = self._to_models(result.data)
        if search:
            applications = [a for a in applications if matches_search(a, search)]
        return applications

    async def update_status(
        self,
        application_id: str,
        status: ApplicationStatus,
    ) -> Optional[Application]:
        return await self.update(application_id, ApplicationUpdate(status=status))

    async def list_ids_for_class(self, class_code: str) -> List[str]:
        """Ids issued so far for ``class_code`` (any status)."""
        result = await self._execute(
            self._query().select("id").eq("class_code", class_code),
            "select",
        )
        return [row["id"] for row in result.data or [] if row.get("id")]

    async def list_active_for_class(self, class_code: str) -> List[Dict[str, Any]]:
        """Contact rows of a class, rejected applications excluded."""
        result = await self._execute(
            self._query()
            .select(CONTACT_COLUMNS)
            .eq("class_code", class_code)
            .neq("status", ApplicationStatus.REJECTED.value),
            "select",
        )
        return list(result.data or [])

    async def list_contact_rows(self) -> List[Dict[str, Any]]:
        """Contact rows of every application, all classes and statuses."""
        result = await self._execute(self._query().select(CONTACT_COLUMNS), "select")
        return list(result.data or [])


def matches_search(application: Application, term: str) -> bool:
    needle = term.strip().lower()
    if not needle:
        return True
    haystack = (
        application.id,
        application.student_details.get("fullName"),
        application.student_details.get("mobile"),
        application.other_details.get("email"),
    )
    return any(needle in str(value).lower() for value in haystack if value)
