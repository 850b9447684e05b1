"""
Application Validation Service

Runs the pure validation rules and adds the same-class duplicate check,
which needs a query against stored applications. The result is advisory:
this service never raises for content problems, and a failed duplicate
query degrades to a warning.
"""

import logging
from typing import List, Optional

from admissions.domain.duplicates import matches_name_and_mobile
from admissions.domain.models import (
    AdmissionClass,
    ParsedApplicationData,
    ValidationResult,
    ValidationWarning,
)
from admissions.domain.validation import build_validation_result, validate_application
from admissions.infrastructure.db.repositories import ApplicationRepository, ClassRepository

logger = logging.getLogger(__name__)

DUPLICATE_FIELD = "Duplicate Application"
DUPLICATE_MESSAGE = "An application with this name and mobile number already exists"
CHECK_FAILED_FIELD = "Validation Warning"
CHECK_FAILED_MESSAGE = "Could not check for duplicate applications"


class ApplicationValidator:
    """
    Validates a parsed application against a class.

    Usage:
        validator = ApplicationValidator(application_repo, class_repo)
        result = await validator.validate(data, "QTR-B04")
    """

    def __init__(
        self,
        application_repo: ApplicationRepository,
        class_repo: ClassRepository,
    ):
        self.application_repo = application_repo
        self.class_repo = class_repo

    async def load_class(self, class_code: Optional[str]) -> Optional[AdmissionClass]:
        """Fetch the selected class; an unknown code means no class rules."""
        if not class_code:
            return None
        record = await self.class_repo.get_by_code(class_code)
        if record is None:
            logger.info(f"Class {class_code} not found; validating without class rules")
            return None
        return record.to_domain()

    async def validate(
        self,
        data: ParsedApplicationData,
        class_code: Optional[str] = None,
    ) -> ValidationResult:
        admission_class = await self.load_class(class_code)
        warnings = validate_application(data, admission_class)
        if class_code:
            warnings.extend(await self.check_same_class_duplicate(data, class_code))
        return build_validation_result(warnings)

    async def check_same_class_duplicate(
        self,
        data: ParsedApplicationData,
        class_code: str,
    ) -> List[ValidationWarning]:
        full_name = data.student_details.full_name
        mobile = data.student_details.mobile
        if not full_name or not mobile:
            return []

        try:
            rows = await self.application_repo.list_active_for_class(class_code)
        except Exception as e:
            logger.warning(f"Duplicate check for class {class_code} failed: {e}")
            return [ValidationWarning(field=CHECK_FAILED_FIELD, message=CHECK_FAILED_MESSAGE)]

        if any(matches_name_and_mobile(row, full_name, mobile) for row in rows):
            return [ValidationWarning(field=DUPLICATE_FIELD, message=DUPLICATE_MESSAGE)]
        return []
