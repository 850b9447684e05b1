"""
Settings Routes

Public sign-up flag and per-user theme preference.
"""

from typing import Any, Annotated

from fastapi import APIRouter, Depends

from admissions.api.dependencies import AppSettingsRepoDep, get_current_user_id
from admissions.domain.models import CamelModel


router = APIRouter(prefix="/api/settings", tags=["settings"])


class SignupStatusResponse(CamelModel):
    enabled: bool


class ThemePreference(CamelModel):
    theme: Any = None


@router.get("/signup", response_model=SignupStatusResponse)
async def get_signup_status(repo: AppSettingsRepoDep):
    """Whether new accounts may sign up (no auth required)."""
    return SignupStatusResponse(enabled=await repo.is_signup_enabled())


@router.get("/theme", response_model=ThemePreference)
async def get_theme(
    user_id: Annotated[str, Depends(get_current_user_id)],
    repo: AppSettingsRepoDep,
):
    return ThemePreference(theme=await repo.get_theme(user_id))


@router.put("/theme", response_model=ThemePreference)
async def set_theme(
    request: ThemePreference,
    user_id: Annotated[str, Depends(get_current_user_id)],
    repo: AppSettingsRepoDep,
):
    return ThemePreference(theme=await repo.set_theme(user_id, request.theme))
