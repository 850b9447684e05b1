"""
Class Record Schemas

Row shapes of the ``classes`` table. ``validation_rules`` is stored as the
camelCase JSON the admin form produces.
"""

from typing import Any, Dict, Optional

from sqlmodel import Field

from admissions.domain.models import AdmissionClass, ValidationRules
from admissions.infrastructure.db.models.base import RecordModel, TimestampMixin


class AdmissionClassBase(RecordModel):
    code: str = Field(..., min_length=4, max_length=50, description="Unique class code")
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    template: Optional[str] = None
    validation_rules: Optional[Dict[str, Any]] = None


class AdmissionClassRecord(AdmissionClassBase, TimestampMixin):
    """A stored class row."""

    id: Optional[str] = None

    def to_domain(self) -> AdmissionClass:
        return AdmissionClass(
            code=self.code,
            name=self.name,
            description=self.description or "",
            template=self.template or "",
            validation_rules=ValidationRules.from_json(self.validation_rules)
            if self.validation_rules is not None else None,
        )


class AdmissionClassCreate(AdmissionClassBase):
    pass


class AdmissionClassUpdate(RecordModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    description: Optional[str] = None
    template: Optional[str] = None
    validation_rules: Optional[Dict[str, Any]] = None
