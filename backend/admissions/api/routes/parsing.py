"""
Parsing Routes

Turn pasted application text into a preview: the parsed record, its
validation warnings and any stored applications that look like the same
applicant. Nothing is written here.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from admissions.api.dependencies import (
    DuplicateCheckerDep,
    ValidatorDep,
    get_current_user_id,
)
from admissions.config.settings import get_settings
from admissions.domain.models import (
    CamelModel,
    DuplicateMatch,
    ParsedApplicationData,
    ValidationResult,
    ValidationWarning,
)
from admissions.domain.parsing import parse_application_text
from admissions.domain.validation import referrer_warnings
from admissions.infrastructure.exceptions import ParseError
from admissions.infrastructure.services import ApplicationValidator

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["parsing"],
    dependencies=[Depends(get_current_user_id)],
)


# ============================================================================
# Request/Response Models
# ============================================================================

class ParseRequest(CamelModel):
    """Pasted text plus the class picked in the form, if any."""
    text: str = Field(..., min_length=1)
    class_code: Optional[str] = None


class ValidateRequest(CamelModel):
    data: ParsedApplicationData
    class_code: Optional[str] = None


class DuplicateCheckRequest(CamelModel):
    full_name: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None


class ApplicationPreview(CamelModel):
    """Everything an operator needs to decide whether to submit."""
    data: ParsedApplicationData
    class_code: Optional[str] = None
    validation: ValidationResult
    referrer_warnings: List[ValidationWarning] = Field(default_factory=list)
    duplicates: List[DuplicateMatch] = Field(default_factory=list)


# ============================================================================
# Helpers
# ============================================================================

def parse_or_raise(text: str) -> ParsedApplicationData:
    """
    Raises:
        ParseError: If the text yields no record
    """
    settings = get_settings()
    data = parse_application_text(text, country_code_marker=settings.parser_country_code_marker)
    if data is None:
        raise ParseError("Could not parse application text")
    return data


async def build_preview(
    data: ParsedApplicationData,
    class_code: Optional[str],
    validator: ApplicationValidator,
    duplicates: List[DuplicateMatch],
) -> ApplicationPreview:
    """Validate against the selected class and attach the duplicate matches."""
    selected = class_code or data.class_code
    validation = await validator.validate(data, selected)
    return ApplicationPreview(
        data=data,
        class_code=selected,
        validation=validation,
        referrer_warnings=referrer_warnings(data),
        duplicates=duplicates,
    )


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/parse", response_model=ApplicationPreview)
async def parse_application(
    request: ParseRequest,
    validator: ValidatorDep,
    checker: DuplicateCheckerDep,
):
    """Parse one pasted application and preview it."""
    data = parse_or_raise(request.text)
    duplicates = await checker.check_parsed(data)
    return await build_preview(data, request.class_code, validator, duplicates)


@router.post("/parse/validate", response_model=ValidationResult)
async def validate_parsed_application(
    request: ValidateRequest,
    validator: ValidatorDep,
):
    """Re-validate an edited record against a class."""
    return await validator.validate(request.data, request.class_code or request.data.class_code)


@router.post("/duplicates/check", response_model=List[DuplicateMatch])
async def check_duplicates(
    request: DuplicateCheckRequest,
    checker: DuplicateCheckerDep,
):
    """Stored applications sharing the mobile number or email."""
    return await checker.find_duplicates(
        full_name=request.full_name,
        mobile=request.mobile,
        email=request.email,
    )
