"""
Access Control and Settings Record Schemas

Rows of ``user_roles``, ``moderator_classes`` and ``app_settings``.
"""

from datetime import datetime
from typing import Any, Optional

from sqlmodel import Field

from admissions.domain.models import UserRole
from admissions.infrastructure.db.models.base import RecordModel


class UserRoleRecord(RecordModel):
    user_id: str
    role: UserRole


class ModeratorClassRecord(RecordModel):
    id: Optional[str] = None
    user_id: str
    class_code: str
    created_at: Optional[datetime] = None


class AppSettingRecord(RecordModel):
    key: str = Field(..., min_length=1, max_length=200)
    value: Any = None
