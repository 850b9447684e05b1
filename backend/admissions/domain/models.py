"""
Domain Models for the Admissions Backend

Pure Python/Pydantic models with no framework dependencies.
These models define the parsed application shape, class admission rules,
validation warnings and the transient review/duplicate projections.

Section objects keep their well-known fields typed and accept any extra
keys the parser falls back to, so nothing extracted from pasted text is lost.
JSON uses camelCase to match the shapes stored in the applications table.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union
import uuid

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApplicationStatus(str, Enum):
    """Persisted review status of an application."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewStatus(str, Enum):
    """Status of one parsed application inside a batch review session."""
    PENDING = "pending"
    CANCELLED = "cancelled"
    SUBMITTED = "submitted"


class UserRole(str, Enum):
    """Roles stored in the user_roles table."""
    ADMIN = "admin"
    MODERATOR = "moderator"
    USER = "user"


class CamelModel(BaseModel):
    """Base for models serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SectionModel(CamelModel):
    """Known fields plus an open map of unrecognized keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    @property
    def extra_fields(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class StudentDetails(SectionModel):
    full_name: Optional[str] = None
    mobile: Optional[str] = None
    whatsapp: Optional[str] = None


class HometownDetails(SectionModel):
    area: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None


class CurrentResidence(SectionModel):
    area: Optional[str] = None
    mandal: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


class OtherDetails(SectionModel):
    email: Optional[str] = None
    # Integer when derived from a birth year; raw text when typed freely.
    age: Optional[Union[int, str]] = None
    qualification: Optional[str] = None
    profession: Optional[str] = None


class ReferredBy(SectionModel):
    full_name: Optional[str] = None
    mobile: Optional[str] = None
    student_id: Optional[str] = None
    batch: Optional[str] = None


class ParsedApplicationData(CamelModel):
    """Structured record extracted from one pasted application text."""
    class_code: Optional[str] = None
    student_details: StudentDetails = Field(default_factory=StudentDetails)
    other_details: OtherDetails = Field(default_factory=OtherDetails)
    hometown_details: HometownDetails = Field(default_factory=HometownDetails)
    current_residence: CurrentResidence = Field(default_factory=CurrentResidence)
    referred_by: ReferredBy = Field(default_factory=ReferredBy)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AgeRange(CamelModel):
    min: Optional[int] = None
    max: Optional[int] = None


class ValidationRules(CamelModel):
    """Admission rules attached to a class."""
    age_range: Optional[AgeRange] = None
    allowed_states: List[str] = Field(default_factory=list)
    minimum_qualification: Optional[str] = None

    @classmethod
    def from_json(cls, raw: Any) -> "ValidationRules":
        """
        Build rules from the stored JSON, tolerating partial or malformed data.

        Non-numeric bounds, non-list states and non-string qualifications are
        dropped instead of failing the whole class.
        """
        if not isinstance(raw, dict):
            return cls()

        age_range = None
        raw_range = raw.get("ageRange")
        if isinstance(raw_range, dict):
            low = raw_range.get("min")
            high = raw_range.get("max")
            age_range = AgeRange(
                min=low if isinstance(low, int) and not isinstance(low, bool) else None,
                max=high if isinstance(high, int) and not isinstance(high, bool) else None,
            )

        states = raw.get("allowedStates")
        qualification = raw.get("minimumQualification")
        return cls(
            age_range=age_range,
            allowed_states=[s for s in states if isinstance(s, str)] if isinstance(states, list) else [],
            minimum_qualification=qualification if isinstance(qualification, str) and qualification else None,
        )

    @property
    def is_empty(self) -> bool:
        has_age = self.age_range is not None and (
            self.age_range.min is not None or self.age_range.max is not None
        )
        return not (has_age or self.allowed_states or self.minimum_qualification)


class AdmissionClass(CamelModel):
    """A class offering with its admission rules and paste template."""
    code: str
    name: str
    description: str = ""
    template: str = ""
    validation_rules: Optional[ValidationRules] = None


class ValidationWarning(BaseModel):
    """A non-blocking flag describing a missing or out-of-policy field."""
    field: str
    message: str


class ValidationResult(BaseModel):
    """Advisory outcome; callers decide whether warnings block anything."""
    valid: bool
    warnings: List[ValidationWarning] = Field(default_factory=list)

    @classmethod
    def from_warnings(cls, warnings: List[ValidationWarning]) -> "ValidationResult":
        return cls(valid=len(warnings) == 0, warnings=list(warnings))


class DuplicateMatch(CamelModel):
    """Read-only projection of a stored application suspected as duplicate."""
    application_id: str
    student_name: str
    email: Optional[str] = None
    mobile: Optional[str] = None
    class_code: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None


class ParsedApplication(CamelModel):
    """One application extracted from a batch paste, tracked until reviewed."""
    temp_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    data: ParsedApplicationData
    status: ReviewStatus = ReviewStatus.PENDING
    application_id: Optional[str] = None
