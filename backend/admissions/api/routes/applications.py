"""
Application Routes

Listing, review and maintenance of stored applications, plus the
single-application submit path. Admins see every class; moderators only
the classes assigned to them.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Query, status
from pydantic import Field

from admissions.api.dependencies import (
    AdminUserDep,
    ApplicationRepoDep,
    CurrentUser,
    CurrentUserDep,
    StaffUserDep,
    SubmissionServiceDep,
    ensure_class_access,
)
from admissions.api.routes.parsing import parse_or_raise
from admissions.domain.models import (
    ApplicationStatus,
    CamelModel,
    ParsedApplicationData,
    ValidationWarning,
)
from admissions.infrastructure.db.models.application import Application, ApplicationUpdate
from admissions.infrastructure.db.repositories import ApplicationRepository
from admissions.infrastructure.exceptions import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/applications", tags=["applications"])


# ============================================================================
# Request/Response Models
# ============================================================================

class ApplicationCreateRequest(CamelModel):
    """An already parsed (and possibly edited) application."""
    class_code: str = Field(..., min_length=1)
    data: ParsedApplicationData
    warnings: Optional[List[ValidationWarning]] = None


class ApplicationSubmitRequest(CamelModel):
    """Raw pasted text submitted in one step."""
    class_code: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


class StatusUpdateRequest(CamelModel):
    status: ApplicationStatus


# ============================================================================
# Helpers
# ============================================================================

async def load_accessible(
    application_id: str,
    user: CurrentUser,
    repo: ApplicationRepository,
) -> Application:
    """
    Raises:
        NotFoundError: If the application does not exist
        HTTPException 403: If a moderator does not own its class
    """
    application = await repo.get_by_id(application_id)
    if application is None:
        raise NotFoundError(f"Application {application_id} not found")
    ensure_class_access(user, application.class_code)
    return application


# ============================================================================
# Endpoints
# ============================================================================

@router.get("", response_model=List[Application])
async def list_applications(
    user: StaffUserDep,
    repo: ApplicationRepoDep,
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    class_code: Optional[str] = Query(None, alias="classCode"),
    search: Optional[str] = None,
):
    """List applications newest first, scoped to the caller's classes."""
    if class_code:
        ensure_class_access(user, class_code)
    return await repo.list_applications(
        status=status_filter,
        class_code=class_code,
        class_codes=user.class_scope,
        search=search,
    )


@router.post("", response_model=Application, status_code=status.HTTP_201_CREATED)
async def create_application(
    request: ApplicationCreateRequest,
    user: CurrentUserDep,
    service: SubmissionServiceDep,
):
    """Store a parsed application under the selected class."""
    if user.is_moderator:
        ensure_class_access(user, request.class_code)
    return await service.submit_parsed(
        request.data, request.class_code, user_id=user.id, warnings=request.warnings
    )


@router.post("/submit", response_model=Application, status_code=status.HTTP_201_CREATED)
async def submit_application_text(
    request: ApplicationSubmitRequest,
    user: CurrentUserDep,
    service: SubmissionServiceDep,
):
    """Parse, validate and store one pasted application."""
    if user.is_moderator:
        ensure_class_access(user, request.class_code)
    data = parse_or_raise(request.text)
    return await service.submit_parsed(data, request.class_code, user_id=user.id)


@router.get("/{application_id}", response_model=Application)
async def get_application(
    application_id: str,
    user: StaffUserDep,
    repo: ApplicationRepoDep,
):
    return await load_accessible(application_id, user, repo)


@router.get("/{application_id}/display")
async def get_application_display(
    application_id: str,
    user: StaffUserDep,
    repo: ApplicationRepoDep,
) -> Dict[str, Any]:
    """Flat projection used by tables."""
    application = await load_accessible(application_id, user, repo)
    return application.to_display()


@router.patch("/{application_id}", response_model=Application)
async def update_application(
    application_id: str,
    request: ApplicationUpdate,
    user: StaffUserDep,
    repo: ApplicationRepoDep,
):
    """Partial update; only the fields sent are changed."""
    await load_accessible(application_id, user, repo)
    if request.class_code:
        ensure_class_access(user, request.class_code)

    updated = await repo.update(application_id, request)
    if updated is None:
        raise NotFoundError(f"Application {application_id} not found")
    return updated


@router.patch("/{application_id}/status", response_model=Application)
async def update_application_status(
    application_id: str,
    request: StatusUpdateRequest,
    user: StaffUserDep,
    repo: ApplicationRepoDep,
):
    """Approve, reject or reopen an application."""
    await load_accessible(application_id, user, repo)
    updated = await repo.update_status(application_id, request.status)
    if updated is None:
        raise NotFoundError(f"Application {application_id} not found")
    logger.info(f"User {user.id} set application {application_id} to {request.status.value}")
    return updated


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_application(
    application_id: str,
    user: AdminUserDep,
    repo: ApplicationRepoDep,
):
    if not await repo.delete(application_id):
        raise NotFoundError(f"Application {application_id} not found")
    logger.info(f"User {user.id} deleted application {application_id}")
