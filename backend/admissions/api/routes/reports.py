"""
Report Routes

Dashboard counts and CSV export for staff (scoped like application
listing), plus the public application status lookup.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import Response

from admissions.api.dependencies import (
    ReportServiceDep,
    StaffUserDep,
    ensure_class_access,
)
from admissions.domain.models import ApplicationStatus
from admissions.infrastructure.services import PublicStatus, ReportSummary


router = APIRouter(tags=["reports"])


@router.get("/api/reports/summary", response_model=ReportSummary)
async def get_report_summary(
    user: StaffUserDep,
    service: ReportServiceDep,
    class_code: Optional[str] = Query(None, alias="classCode"),
):
    if class_code:
        ensure_class_access(user, class_code)
    return await service.build_summary(class_code=class_code, class_codes=user.class_scope)


@router.get("/api/reports/applications.csv")
async def export_applications_csv(
    user: StaffUserDep,
    service: ReportServiceDep,
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    class_code: Optional[str] = Query(None, alias="classCode"),
    search: Optional[str] = None,
):
    """Same filters and scoping as the application list."""
    if class_code:
        ensure_class_access(user, class_code)
    content = await service.build_csv(
        status=status_filter,
        class_code=class_code,
        class_codes=user.class_scope,
        search=search,
    )
    filename = f"applications-{date.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/api/status/{application_id}", response_model=PublicStatus)
async def get_application_status(application_id: str, service: ReportServiceDep):
    """Public lookup: id, class and status only."""
    return await service.get_public_status(application_id)
