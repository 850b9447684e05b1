"""
Admin Routes for Staff Management

Staff accounts, roles, class assignments, password resets and the
sign-up switch. Protected by the admin role, checked server-side before
any identity-service call.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import Field

from admissions.api.dependencies import (
    AppSettingsRepoDep,
    UserAdminServiceDep,
    require_admin,
)
from admissions.domain.models import CamelModel
from admissions.infrastructure.services import ManagedUser

logger = logging.getLogger(__name__)


router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)]  # Protect ALL admin routes
)


# =============================================================================
# Request Models
# =============================================================================

class StaffUserCreateRequest(CamelModel):
    email: str = Field(..., min_length=3)
    password: str
    name: str = ""
    is_admin: bool = False
    class_codes: List[str] = Field(default_factory=list)


class StaffAccessRequest(CamelModel):
    is_admin: bool = False
    class_codes: List[str] = Field(default_factory=list)


class PasswordResetRequest(CamelModel):
    password: str


class SignupSettingRequest(CamelModel):
    enabled: bool


class SignupSettingResponse(CamelModel):
    enabled: bool


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/users", response_model=List[ManagedUser])
async def list_users(
    service: UserAdminServiceDep,
    search: str = "",
    staff_only: bool = False,
):
    """Users with their roles and moderator classes."""
    return await service.list_users(search, staff_only=staff_only)


@router.post("/users", response_model=ManagedUser, status_code=status.HTTP_201_CREATED)
async def add_staff_user(
    request: StaffUserCreateRequest,
    service: UserAdminServiceDep,
):
    """Create an admin or moderator account."""
    return await service.add_staff_user(
        email=request.email,
        password=request.password,
        name=request.name or None,
        is_admin=request.is_admin,
        class_codes=request.class_codes,
    )


@router.put("/users/{user_id}/access", response_model=ManagedUser)
async def update_staff_access(
    user_id: str,
    request: StaffAccessRequest,
    service: UserAdminServiceDep,
):
    return await service.update_staff_user(user_id, request.is_admin, request.class_codes)


@router.post("/users/{user_id}/reset-password", status_code=status.HTTP_204_NO_CONTENT)
async def reset_password(
    user_id: str,
    request: PasswordResetRequest,
    service: UserAdminServiceDep,
):
    await service.reset_password(user_id, request.password)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    service: UserAdminServiceDep,
):
    """Remove roles, class assignments and the account itself."""
    await service.delete_user(user_id)


@router.put("/settings/signup", response_model=SignupSettingResponse)
async def set_signup_enabled(
    request: SignupSettingRequest,
    repo: AppSettingsRepoDep,
):
    enabled = await repo.set_signup_enabled(request.enabled)
    logger.info(f"Sign-up {'enabled' if enabled else 'disabled'}")
    return SignupSettingResponse(enabled=enabled)
