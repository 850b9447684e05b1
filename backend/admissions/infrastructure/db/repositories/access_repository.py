"""
Access Control Repositories for the Admissions Backend

Role rows (``user_roles``) and moderator class assignments
(``moderator_classes``). Both tables hold several rows per user, so the
writes here replace a user's rows wholesale.
"""

import logging
from typing import Dict, Iterable, List

from supabase import Client

from admissions.domain.models import UserRole
from admissions.infrastructure.db.models.access import (
    ModeratorClassRecord,
    UserRoleRecord,
)
from admissions.infrastructure.db.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRoleRepository(
    BaseRepository[UserRoleRecord, UserRoleRecord, UserRoleRecord]
):
    """Repository for ``user_roles`` rows."""

    def __init__(self, client: Client):
        super().__init__(UserRoleRecord, client, "user_roles", primary_key="user_id")

    async def get_roles(self, user_id: str) -> List[UserRole]:
        result = await self._execute(
            self._query().select("user_id, role").eq("user_id", user_id),
            "select",
        )
        roles = []
        for row in result.data or []:
            try:
                roles.append(UserRole(row.get("role")))
            except ValueError:
                logger.warning(f"Ignoring unknown role {row.get('role')!r} for user {user_id}")
        return roles

    async def list_roles(self) -> Dict[str, List[UserRole]]:
        """Every user's roles, keyed by user id."""
        result = await self._execute(self._query().select("user_id, role"), "select")
        roles: Dict[str, List[UserRole]] = {}
        for row in result.data or []:
            try:
                role = UserRole(row.get("role"))
            except ValueError:
                continue
            roles.setdefault(row["user_id"], []).append(role)
        return roles

    async def set_role(self, user_id: str, role: UserRole) -> UserRoleRecord:
        """Replace the user's roles with a single role."""
        await self.delete_for_user(user_id)
        return await self.create(UserRoleRecord(user_id=user_id, role=role))

    async def delete_for_user(self, user_id: str) -> int:
        result = await self._execute(
            self._query().delete().eq("user_id", user_id),
            "delete",
        )
        return len(result.data or [])


class ModeratorClassRepository(
    BaseRepository[ModeratorClassRecord, ModeratorClassRecord, ModeratorClassRecord]
):
    """Repository for ``moderator_classes`` rows."""

    def __init__(self, client: Client):
        super().__init__(ModeratorClassRecord, client, "moderator_classes")

    async def get_class_codes(self, user_id: str) -> List[str]:
        result = await self._execute(
            self._query().select("class_code").eq("user_id", user_id),
            "select",
        )
        return [row["class_code"] for row in result.data or [] if row.get("class_code")]

    async def list_assignments(self) -> Dict[str, List[str]]:
        """Every moderator's class codes, keyed by user id."""
        result = await self._execute(self._query().select("user_id, class_code"), "select")
        assignments: Dict[str, List[str]] = {}
        for row in result.data or []:
            assignments.setdefault(row["user_id"], []).append(row["class_code"])
        return assignments

    async def replace_for_user(self, user_id: str, class_codes: Iterable[str]) -> List[str]:
        """Drop the user's assignments and insert ``class_codes``."""
        await self.delete_for_user(user_id)
        codes = list(dict.fromkeys(code for code in class_codes if code))
        if not codes:
            return []
        await self._execute(
            self._query().insert([
                {"user_id": user_id, "class_code": code} for code in codes
            ]),
            "insert",
        )
        return codes

    async def delete_for_user(self, user_id: str) -> int:
        result = await self._execute(
            self._query().delete().eq("user_id", user_id),
            "delete",
        )
        return len(result.data or [])
