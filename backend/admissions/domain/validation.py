"""
Application Validation Rules

Pure checks that turn a parsed application into advisory warnings.
Nothing here blocks a submission; callers decide what to do with warnings.

Qualification and state rules match by case-insensitive substring
containment, so "Post Graduate" satisfies "Graduate" and so does
"Undergraduate". Keep it that way until product owners decide otherwise.
"""

import re
from typing import Any, List, Optional, Tuple

from admissions.domain.models import (
    AdmissionClass,
    ParsedApplicationData,
    ValidationResult,
    ValidationRules,
    ValidationWarning,
)

# (path into the parsed record, label shown to the operator)
REQUIRED_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("student_details.full_name", "Student Name"),
    ("student_details.mobile", "Mobile Number"),
    ("other_details.email", "Email Address"),
)

REFERRER_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("full_name", "Referrer full name is missing"),
    ("mobile", "Referrer mobile number is missing"),
    ("batch", "Referrer batch is missing"),
    ("student_id", "Referrer student ID is missing"),
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def get_nested_value(data: Any, path: str) -> Any:
    """Walk a dotted attribute path, returning None at the first gap."""
    current = data
    for part in path.split("."):
        if current is None:
            return None
        current = getattr(current, part, None)
    return current


def parse_age(value: Any) -> Optional[int]:
    """Read an age the way a lenient form would: leading digits or nothing."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def check_required_fields(data: ParsedApplicationData) -> List[ValidationWarning]:
    warnings = []
    for path, label in REQUIRED_FIELDS:
        if _is_blank(get_nested_value(data, path)):
            warnings.append(ValidationWarning(field=label, message=f"{label} is required"))
    return warnings


def check_age_range(data: ParsedApplicationData, rules: ValidationRules) -> List[ValidationWarning]:
    if rules.age_range is None:
        return []
    age = parse_age(data.other_details.age)
    if age is None:
        return []

    warnings = []
    low, high = rules.age_range.min, rules.age_range.max
    if low is not None and age < low:
        warnings.append(ValidationWarning(field="Age", message=f"Age must be at least {low} years"))
    if high is not None and age > high:
        warnings.append(ValidationWarning(field="Age", message=f"Age must not exceed {high} years"))
    return warnings


def check_allowed_states(data: ParsedApplicationData, rules: ValidationRules) -> List[ValidationWarning]:
    state = data.current_residence.state
    if not rules.allowed_states or _is_blank(state):
        return []

    lowered = state.lower()
    if any(allowed.lower() in lowered for allowed in rules.allowed_states):
        return []
    return [ValidationWarning(
        field="Current State",
        message=f"State must be one of: {', '.join(rules.allowed_states)}",
    )]


def check_minimum_qualification(data: ParsedApplicationData, rules: ValidationRules) -> List[ValidationWarning]:
    qualification = data.other_details.qualification
    if not rules.minimum_qualification or _is_blank(qualification):
        return []

    if rules.minimum_qualification.lower() in qualification.lower():
        return []
    return [ValidationWarning(
        field="Qualification",
        message=f"Qualification must be at least {rules.minimum_qualification}",
    )]


def check_class_rules(data: ParsedApplicationData, rules: ValidationRules) -> List[ValidationWarning]:
    return [
        *check_age_range(data, rules),
        *check_allowed_states(data, rules),
        *check_minimum_qualification(data, rules),
    ]


def validate_application(
    data: ParsedApplicationData,
    admission_class: Optional[AdmissionClass] = None,
) -> List[ValidationWarning]:
    """
    Score a parsed application against required fields and class rules.

    Args:
        data: Parsed application
        admission_class: Selected class; its rules apply only when present

    Returns:
        Warnings in a stable order: required fields, then age, state and
        qualification rules.
    """
    warnings = check_required_fields(data)
    if admission_class is not None and admission_class.validation_rules is not None:
        warnings.extend(check_class_rules(data, admission_class.validation_rules))
    return warnings


def build_validation_result(warnings: List[ValidationWarning]) -> ValidationResult:
    return ValidationResult.from_warnings(warnings)


def referrer_warnings(data: ParsedApplicationData) -> List[ValidationWarning]:
    """Flag missing referrer details; shown in batch previews only."""
    referred_by = data.referred_by
    return [
        ValidationWarning(field=f"referredBy.{_camel(attr)}", message=message)
        for attr, message in REFERRER_FIELDS
        if _is_blank(getattr(referred_by, attr, None))
    ]


def _camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.title() for part in tail)
