"""
Duplicate Matching Rules

Two independent notions of "duplicate" live here, on purpose kept apart:

- ``is_likely_duplicate`` backs the pre-submission checker. It runs across
  every stored application and matches on mobile number OR email.
- ``matches_name_and_mobile`` backs the in-form check scoped to one class.
  It needs a case-insensitive name match AND an exact mobile match.
"""

import re
from typing import Any, Dict, Optional

from admissions.domain.models import DuplicateMatch

MOBILE_SUFFIX_LENGTH = 10
# A stored number shorter than the suffix must still be a full local number.
MIN_LOCAL_MOBILE_DIGITS = 8

_NON_DIGITS = re.compile(r"\D")


def normalize_mobile(value: Optional[str]) -> str:
    """Strip everything but digits ("+974 5512-3456" -> "97455123456")."""
    if not value:
        return ""
    return _NON_DIGITS.sub("", str(value))


def mobile_suffix(value: Optional[str]) -> str:
    return normalize_mobile(value)[-MOBILE_SUFFIX_LENGTH:]


def mobiles_match(candidate: Optional[str], stored: Optional[str]) -> bool:
    """
    Compare two mobile numbers by their last 10 digits.

    When either number has fewer than 10 digits, the shorter one must have
    at least 8 digits and be a suffix of the longer one. That tolerates a
    missing country code ("+974 5512 3456" vs "55123456") without letting
    short fragments match on a coincidental tail.
    """
    a, b = mobile_suffix(candidate), mobile_suffix(stored)
    if not a or not b:
        return False
    if len(a) == MOBILE_SUFFIX_LENGTH and len(b) == MOBILE_SUFFIX_LENGTH:
        return a == b

    shorter, longer = sorted((a, b), key=len)
    if len(shorter) < MIN_LOCAL_MOBILE_DIGITS:
        return False
    return longer.endswith(shorter)


def emails_match(candidate: Optional[str], stored: Optional[str]) -> bool:
    if not candidate or not stored:
        return False
    return candidate.strip().lower() == stored.strip().lower()


def _section(row: Dict[str, Any], column: str) -> Dict[str, Any]:
    value = row.get(column)
    return value if isinstance(value, dict) else {}


def is_likely_duplicate(
    row: Dict[str, Any],
    mobile: Optional[str] = None,
    email: Optional[str] = None,
) -> bool:
    """OR semantics: a mobile match or an email match is enough."""
    student = _section(row, "student_details")
    other = _section(row, "other_details")
    if mobile and mobiles_match(mobile, student.get("mobile")):
        return True
    if email and emails_match(email, other.get("email")):
        return True
    return False


def matches_name_and_mobile(row: Dict[str, Any], full_name: str, mobile: str) -> bool:
    """Same class check: case-insensitive name AND exact mobile."""
    student = _section(row, "student_details")
    stored_name = student.get("fullName")
    if not isinstance(stored_name, str):
        return False
    return stored_name.lower() == full_name.lower() and student.get("mobile") == mobile


def to_duplicate_match(row: Dict[str, Any]) -> DuplicateMatch:
    student = _section(row, "student_details")
    other = _section(row, "other_details")
    return DuplicateMatch(
        application_id=str(row.get("id")),
        student_name=student.get("fullName") or "Unknown",
        email=other.get("email"),
        mobile=student.get("mobile"),
        class_code=row.get("class_code"),
        status=row.get("status"),
        created_at=row.get("created_at"),
    )
