"""
Admin User Management Service

Staff accounts live in the Supabase identity service; their roles and class
assignments live in ``user_roles`` and ``moderator_classes``. This service
combines both. Every call site is admin-only and the caller's role is
checked by the API layer before any method here runs.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field
from supabase import Client

from admissions.config.settings import get_settings
from admissions.domain.models import UserRole
from admissions.infrastructure.db.repositories import (
    ModeratorClassRepository,
    UserRoleRepository,
)
from admissions.infrastructure.exceptions import (
    AuthServiceError,
    DatabaseError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class ManagedUser(BaseModel):
    """An identity-service user with their staff roles and classes."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    created_at: Optional[datetime] = None
    roles: List[UserRole] = Field(default_factory=list)
    class_codes: List[str] = Field(default_factory=list)

    @property
    def is_staff(self) -> bool:
        return UserRole.ADMIN in self.roles or UserRole.MODERATOR in self.roles


class UserAdminService:
    """Admin operations on staff accounts."""

    def __init__(
        self,
        client: Client,
        role_repo: UserRoleRepository,
        moderator_class_repo: ModeratorClassRepository,
    ):
        self.client = client
        self.role_repo = role_repo
        self.moderator_class_repo = moderator_class_repo

    async def search_users(self, search_term: str = "") -> List[Dict[str, Any]]:
        """Raw user rows from the ``search_users`` RPC."""
        try:
            result = await asyncio.to_thread(
                lambda: self.client.rpc("search_users", {"search_term": search_term}).execute()
            )
        except Exception as e:
            logger.error(f"search_users RPC failed: {e}")
            raise DatabaseError(
                f"Error searching users: {str(e)}",
                operation="rpc",
                table="search_users",
                original_error=e,
            )
        return list(result.data or [])

    async def list_users(
        self,
        search_term: str = "",
        staff_only: bool = False,
    ) -> List[ManagedUser]:
        """Users joined with their roles and moderator class assignments."""
        rows = await self.search_users(search_term)
        roles = await self.role_repo.list_roles()
        assignments = await self.moderator_class_repo.list_assignments()

        users = []
        for row in rows:
            user_id = str(row.get("id"))
            metadata = row.get("raw_user_meta_data") or {}
            user = ManagedUser(
                id=user_id,
                email=row.get("email"),
                name=metadata.get("name") if isinstance(metadata, dict) else None,
                created_at=row.get("created_at"),
                roles=roles.get(user_id, []),
                class_codes=assignments.get(user_id, []),
            )
            if staff_only and not user.is_staff:
                continue
            users.append(user)
        return users

    async def add_staff_user(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        is_admin: bool = False,
        class_codes: Iterable[str] = (),
    ) -> ManagedUser:
        """
        Create an identity user and grant the admin or moderator role.

        Raises:
            ValidationError: If the password is too short
            AuthServiceError: If the identity service rejects the user
        """
        self._check_password(password)
        try:
            response = await asyncio.to_thread(self.client.auth.admin.create_user, {
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": {"name": name} if name else {},
            })
        except Exception as e:
            logger.error(f"Creating user {email} failed: {e}")
            raise AuthServiceError(
                f"Failed to create user: {str(e)}",
                operation="create_user",
                original_error=e,
            )

        user = getattr(response, "user", None)
        if user is None or not getattr(user, "id", None):
            raise AuthServiceError(
                "User creation failed - no user ID returned",
                operation="create_user",
            )

        role = UserRole.ADMIN if is_admin else UserRole.MODERATOR
        await self.role_repo.set_role(user.id, role)
        codes = await self.moderator_class_repo.replace_for_user(user.id, class_codes)
        logger.info(f"Added user {email} as {role.value}")
        return ManagedUser(id=user.id, email=email, name=name, roles=[role], class_codes=codes)

    async def update_staff_user(
        self,
        user_id: str,
        is_admin: bool,
        class_codes: Iterable[str],
    ) -> ManagedUser:
        """Set the user's role (admin or moderator) and replace their classes."""
        role = UserRole.ADMIN if is_admin else UserRole.MODERATOR
        await self.role_repo.set_role(user_id, role)
        codes = await self.moderator_class_repo.replace_for_user(user_id, class_codes)
        return ManagedUser(id=user_id, roles=[role], class_codes=codes)

    async def delete_user(self, user_id: str) -> None:
        """
        Remove a user: role rows, then class assignments, then the identity.

        Raises:
            AuthServiceError: If the identity service refuses the delete
        """
        await self.role_repo.delete_for_user(user_id)
        await self.moderator_class_repo.delete_for_user(user_id)
        try:
            await asyncio.to_thread(self.client.auth.admin.delete_user, user_id)
        except Exception as e:
            logger.error(f"Deleting auth user {user_id} failed: {e}")
            raise AuthServiceError(
                f"Failed to delete user: {str(e)}",
                operation="delete_user",
                user_id=user_id,
                original_error=e,
            )
        logger.info(f"Deleted user {user_id}")

    async def reset_password(self, user_id: str, new_password: str) -> None:
        """
        Set a new password for a user.

        Raises:
            ValidationError: If the password is too short
            AuthServiceError: If the identity service refuses the update
        """
        self._check_password(new_password)
        try:
            await asyncio.to_thread(
                self.client.auth.admin.update_user_by_id, user_id, {"password": new_password}
            )
        except Exception as e:
            logger.error(f"Password reset for {user_id} failed: {e}")
            raise AuthServiceError(
                f"Failed to reset password: {str(e)}",
                operation="update_user_by_id",
                user_id=user_id,
                original_error=e,
            )
        logger.info(f"Password reset for user {user_id}")

    @staticmethod
    def _check_password(password: str) -> None:
        minimum = get_settings().min_password_length
        if not password or len(password) < minimum:
            raise ValidationError(f"Password must be at least {minimum} characters long")
