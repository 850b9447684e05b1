"""
Report Service

Aggregates stored applications into dashboard counts and the CSV export.
Everything is computed in memory from the rows the caller is allowed to
see, so moderator scoping is applied by passing the scoped list in.
"""

import csv
import io
import logging
from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from admissions.domain.models import ApplicationStatus
from admissions.infrastructure.db.models.application import Application
from admissions.infrastructure.db.repositories import ApplicationRepository
from admissions.infrastructure.exceptions import NotFoundError

logger = logging.getLogger(__name__)

CSV_HEADERS = ["ID", "Name", "Email", "Mobile", "Class", "Status", "Date"]
UNKNOWN_BATCH = "Unknown"


class ClassBreakdown(BaseModel):
    total: int = 0
    approved: int = 0
    pending: int = 0
    rejected: int = 0


class ReportSummary(BaseModel):
    total: int = 0
    by_status: Dict[str, int] = Field(default_factory=dict)
    approval_rate: int = 0
    by_class: Dict[str, ClassBreakdown] = Field(default_factory=dict)
    by_batch: Dict[str, int] = Field(default_factory=dict)
    by_month: Dict[str, int] = Field(default_factory=dict)


class PublicStatus(BaseModel):
    """What an applicant may see about their application."""
    id: str
    class_code: str
    status: ApplicationStatus


def format_export_date(value: Optional[datetime]) -> str:
    """Short US style date ("Mar 5, 2024")."""
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


def summarize(applications: Iterable[Application]) -> ReportSummary:
    applications = list(applications)
    status_counts = Counter(app.status.value for app in applications)
    by_status = {status.value: status_counts.get(status.value, 0) for status in ApplicationStatus}

    by_class: Dict[str, ClassBreakdown] = {}
    for app in applications:
        breakdown = by_class.setdefault(app.class_code, ClassBreakdown())
        breakdown.total += 1
        setattr(breakdown, app.status.value, getattr(breakdown, app.status.value) + 1)

    by_batch = Counter(
        (app.referred_by.get("batch") or UNKNOWN_BATCH) for app in applications
    )
    by_month = Counter(
        f"{app.created_at:%Y-%m}" for app in applications if app.created_at is not None
    )

    total = len(applications)
    approved = by_status[ApplicationStatus.APPROVED.value]
    return ReportSummary(
        total=total,
        by_status=by_status,
        approval_rate=round(approved / total * 100) if total else 0,
        by_class=by_class,
        by_batch=dict(by_batch),
        by_month=dict(sorted(by_month.items())),
    )


def export_csv(applications: Iterable[Application]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for app in applications:
        writer.writerow([
            app.id,
            app.student_details.get("fullName") or "",
            app.other_details.get("email") or "",
            app.student_details.get("mobile") or "",
            app.class_code,
            app.status.value,
            format_export_date(app.created_at),
        ])
    return buffer.getvalue()


class ReportService:
    """Report queries over the applications table."""

    def __init__(self, application_repo: ApplicationRepository):
        self.application_repo = application_repo

    async def build_summary(
        self,
        class_code: Optional[str] = None,
        class_codes: Optional[List[str]] = None,
    ) -> ReportSummary:
        applications = await self.application_repo.list_applications(
            class_code=class_code, class_codes=class_codes
        )
        return summarize(applications)

    async def build_csv(
        self,
        status: Optional[ApplicationStatus] = None,
        class_code: Optional[str] = None,
        class_codes: Optional[List[str]] = None,
        search: Optional[str] = None,
    ) -> str:
        applications = await self.application_repo.list_applications(
            status=status, class_code=class_code, class_codes=class_codes, search=search
        )
        logger.info(f"Exporting {len(applications)} applications to CSV")
        return export_csv(applications)

    async def get_public_status(self, application_id: str) -> PublicStatus:
        """
        Raises:
            NotFoundError: If no application has this id
        """
        application = await self.application_repo.get_by_id(application_id.strip())
        if application is None:
            raise NotFoundError(f"Application {application_id} not found")
        return PublicStatus(
            id=application.id,
            class_code=application.class_code,
            status=application.status,
        )
