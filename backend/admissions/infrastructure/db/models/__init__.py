"""
SQLModel Record Schemas for the Admissions Backend

Exports the row schemas of every hosted table the service reads or writes.
"""

from admissions.infrastructure.db.models.base import (
    RecordModel,
    TimestampMixin,
    utc_now,
)
from admissions.infrastructure.db.models.application import (
    Application,
    ApplicationBase,
    ApplicationCreate,
    ApplicationUpdate,
)
from admissions.infrastructure.db.models.admission_class import (
    AdmissionClassBase,
    AdmissionClassCreate,
    AdmissionClassRecord,
    AdmissionClassUpdate,
)
from admissions.infrastructure.db.models.access import (
    AppSettingRecord,
    ModeratorClassRecord,
    UserRoleRecord,
)


__all__ = [
    # Base
    "RecordModel",
    "TimestampMixin",
    "utc_now",
    # Application
    "Application",
    "ApplicationBase",
    "ApplicationCreate",
    "ApplicationUpdate",
    # Class
    "AdmissionClassBase",
    "AdmissionClassCreate",
    "AdmissionClassRecord",
    "AdmissionClassUpdate",
    # Access / settings
    "AppSettingRecord",
    "ModeratorClassRecord",
    "UserRoleRecord",
]
