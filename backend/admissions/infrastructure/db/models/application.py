"""
Application Record Schemas

Row shapes of the ``applications`` table. Section columns are JSON objects
in camelCase (as the UI stores them); everything else is snake_case.
"""

from typing import Any, Dict, List, Optional

from sqlmodel import Field

from admissions.domain.models import (
    ApplicationStatus,
    ParsedApplicationData,
    ValidationWarning,
)
from admissions.infrastructure.db.models.base import RecordModel, TimestampMixin


class ApplicationBase(RecordModel):
    """Fields shared by create/read schemas."""

    class_code: str = Field(..., min_length=2, max_length=50)
    status: ApplicationStatus = Field(default=ApplicationStatus.PENDING)

    student_details: Dict[str, Any] = Field(default_factory=dict)
    other_details: Dict[str, Any] = Field(default_factory=dict)
    hometown_details: Dict[str, Any] = Field(default_factory=dict)
    current_residence: Dict[str, Any] = Field(default_factory=dict)
    referred_by: Dict[str, Any] = Field(default_factory=dict)

    remarks: Optional[str] = None
    call_response: Optional[str] = None
    student_nature: Optional[str] = None
    student_category: Optional[str] = None
    followup_by: Optional[str] = None
    naqeeb: Optional[str] = None
    naqeeb_response: Optional[str] = None

    validation_warnings: List[Dict[str, Any]] = Field(default_factory=list)


class Application(ApplicationBase, TimestampMixin):
    """A stored application row."""

    id: str = Field(..., description="Human-readable id, e.g. QTR-B04-0001")
    user_id: Optional[str] = Field(default=None, description="Submitting user")

    def to_display(self) -> Dict[str, Any]:
        """Flat projection used by tables and exports."""
        residence = self.current_residence
        address = ", ".join(
            str(residence[part]) for part in ("area", "city", "state") if residence.get(part)
        )
        return {
            "id": self.id,
            "name": self.student_details.get("fullName") or "N/A",
            "phone": self.student_details.get("mobile") or "N/A",
            "email": self.other_details.get("email") or "N/A",
            "class": self.class_code,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "address": address,
        }


class ApplicationCreate(ApplicationBase):
    """Schema for inserting an application."""

    id: str
    user_id: Optional[str] = None

    @classmethod
    def from_parsed(
        cls,
        application_id: str,
        class_code: str,
        data: ParsedApplicationData,
        warnings: List[ValidationWarning],
        user_id: Optional[str] = None,
    ) -> "ApplicationCreate":
        return cls(
            id=application_id,
            class_code=class_code,
            status=ApplicationStatus.PENDING,
            student_details=data.student_details.to_json(),
            other_details=data.other_details.to_json(),
            hometown_details=data.hometown_details.to_json(),
            current_residence=data.current_residence.to_json(),
            referred_by=data.referred_by.to_json(),
            remarks=f"Auto-created application with {len(warnings)} validation warnings",
            validation_warnings=[w.model_dump() for w in warnings],
            user_id=user_id,
        )


class ApplicationUpdate(RecordModel):
    """Schema for partial updates (all fields optional)."""

    class_code: Optional[str] = Field(default=None, min_length=2, max_length=50)
    status: Optional[ApplicationStatus] = None
    student_details: Optional[Dict[str, Any]] = None
    other_details: Optional[Dict[str, Any]] = None
    hometown_details: Optional[Dict[str, Any]] = None
    current_residence: Optional[Dict[str, Any]] = None
    referred_by: Optional[Dict[str, Any]] = None
    remarks: Optional[str] = None
    call_response: Optional[str] = None
    student_nature: Optional[str] = None
    student_category: Optional[str] = None
    followup_by: Optional[str] = None
    naqeeb: Optional[str] = None
    naqeeb_response: Optional[str] = None
    validation_warnings: Optional[List[Dict[str, Any]]] = None
