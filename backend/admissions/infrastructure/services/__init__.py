"""
Application Services for the Admissions Backend

Orchestration on top of the repositories: validation with the same-class
duplicate query, the global duplicate checker, submission, admin user
management and reports.
"""

from admissions.infrastructure.services.validation_service import ApplicationValidator
from admissions.infrastructure.services.duplicate_service import DuplicateChecker
from admissions.infrastructure.services.submission_service import SubmissionService
from admissions.infrastructure.services.user_admin_service import (
    ManagedUser,
    UserAdminService,
)
from admissions.infrastructure.services.report_service import (
    PublicStatus,
    ReportService,
    ReportSummary,
)


__all__ = [
    "ApplicationValidator",
    "DuplicateChecker",
    "SubmissionService",
    "ManagedUser",
    "UserAdminService",
    "PublicStatus",
    "ReportService",
    "ReportSummary",
]
