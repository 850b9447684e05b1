"""
Application Text Parser

Converts one pasted, semi-structured application into a
ParsedApplicationData record.

The parse is a single fold over the lines of the text. The only state carried
between lines is an explicit ``Section`` cursor plus the buckets collected so
far; nothing lives at module level, so parsing the same text twice always
yields the same record.

Key/value lines are routed through ``KEY_RULES``, an ordered table of
(predicate, assignment) pairs evaluated top to bottom with first-match-wins
semantics. The order is significant: several labels (e.g. "city", "state")
mean different things depending on the section they appear in, and the
earlier rules shadow the later ones.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from functools import reduce
from typing import Callable, Dict, List, Optional, Tuple

from admissions.domain.models import ParsedApplicationData

logger = logging.getLogger(__name__)


class Section(str, Enum):
    """Sections of the application template, keyed by their header text."""
    STUDENT_DETAILS = "STUDENT DETAILS"
    BACK_HOME_DETAILS = "BACK HOME DETAILS"
    CURRENT_RESIDENCE = "CURRENT RESIDENCE"
    OTHER_DETAILS = "OTHER DETAILS"
    REFERRED_BY = "REFERRED BY"


# Header text -> section. Checked in order against the upper-cased line.
SECTION_HEADERS: Tuple[Tuple[str, Section], ...] = (
    ("STUDENT DETAILS", Section.STUDENT_DETAILS),
    ("BACK HOME DETAILS", Section.BACK_HOME_DETAILS),
    ("HOMETOWN DETAILS", Section.BACK_HOME_DETAILS),
    ("CURRENT RESIDENCE", Section.CURRENT_RESIDENCE),
    ("OTHER DETAILS", Section.OTHER_DETAILS),
    ("REFERRED BY", Section.REFERRED_BY),
)

# Section -> key of the bucket it fills in the parsed record.
SECTION_BUCKETS: Dict[Section, str] = {
    Section.STUDENT_DETAILS: "studentDetails",
    Section.BACK_HOME_DETAILS: "hometownDetails",
    Section.CURRENT_RESIDENCE: "currentResidence",
    Section.OTHER_DETAILS: "otherDetails",
    Section.REFERRED_BY: "referredBy",
}

DEFAULT_SECTION = Section.STUDENT_DETAILS
DEFAULT_COUNTRY_CODE_MARKER = "+974"

DIVIDER_PATTERN = re.compile(r"^[\s\-=]+$")
DECORATIVE_MARKERS = ("***", "###", "~~~", "═", "___")
CLASS_CODE_PATTERN = re.compile(r"\(\s*([A-Z]{2,}-[A-Z0-9]{2,})\s*\)")
BIRTH_YEAR_PATTERN = re.compile(r"\b(\d{4})\b")
KEY_PREFIX_PATTERN = re.compile(r"^(?:[\-\*•>]+|\d+[.)])\s*")
BIRTH_KEY_PATTERN = re.compile(r"\b(?:year of birth|birth year|date of birth|dob)\b")
TOWN_KEY_PATTERN = re.compile(r"\b(?:home\s*town|town|city)\b")


@dataclass(frozen=True)
class ParseState:
    """Accumulator threaded through the fold: cursor plus collected fields."""
    section: Section = DEFAULT_SECTION
    class_code: Optional[str] = None
    buckets: Dict[str, Dict[str, object]] = field(
        default_factory=lambda: {name: {} for name in SECTION_BUCKETS.values()}
    )
    current_year: int = field(default_factory=lambda: datetime.now().year)
    country_code_marker: str = DEFAULT_COUNTRY_CODE_MARKER

    def put(self, bucket: str, key: str, value: object) -> "ParseState":
        return replace(self, buckets={**self.buckets, bucket: {**self.buckets[bucket], key: value}})

    @property
    def section_bucket(self) -> str:
        return SECTION_BUCKETS[self.section]


Predicate = Callable[[str, ParseState], bool]
Assignment = Callable[[ParseState, str, str], ParseState]


@dataclass(frozen=True)
class KeyRule:
    """One heuristic: if ``matches`` the lower-cased key, ``assign`` the value."""
    name: str
    matches: Predicate
    assign: Assignment


# ============================================================================
# Value helpers
# ============================================================================

def title_case(value: str) -> str:
    """Capitalize each whitespace-separated word ("ali KHAN" -> "Ali Khan")."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in value.split())


def to_camel_key(label: str) -> str:
    """Normalize a free-form label into a camelCase key ("Call Response" -> "callResponse")."""
    words = re.findall(r"[A-Za-z0-9]+", label)
    if not words:
        return ""
    head, *tail = words
    return head.lower() + "".join(w[:1].upper() + w[1:].lower() for w in tail)


def _contains(*needles: str) -> Predicate:
    return lambda key, state: any(needle in key for needle in needles)


def _matches(pattern: "re.Pattern[str]") -> Predicate:
    return lambda key, state: pattern.search(key) is not None


def _in_section(section: Section, when_in: str, otherwise: str) -> Callable[[ParseState], str]:
    return lambda state: when_in if state.section == section else otherwise


# ============================================================================
# Assignments
# ============================================================================

def _assign_full_name(state: ParseState, key: str, value: str) -> ParseState:
    bucket = "referredBy" if state.section == Section.REFERRED_BY else "studentDetails"
    return state.put(bucket, "fullName", title_case(value))


def _assign_mobile(state: ParseState, key: str, value: str) -> ParseState:
    bucket = "referredBy" if state.section == Section.REFERRED_BY else "studentDetails"
    return state.put(bucket, "mobile", value)


def _assign_birth_year(state: ParseState, key: str, value: str) -> ParseState:
    match = BIRTH_YEAR_PATTERN.search(value)
    if not match:
        return state.put("otherDetails", "yearOfBirth", value)
    return state.put("otherDetails", "age", state.current_year - int(match.group(1)))


def _assign_to(bucket: str, target: str, transform: Callable[[str], str] = str.strip) -> Assignment:
    return lambda state, key, value: state.put(bucket, target, transform(value))


def _assign_routed(target: str, route: Callable[[ParseState], str]) -> Assignment:
    return lambda state, key, value: state.put(route(state), target, value)


def _assign_area(state: ParseState, key: str, value: str) -> ParseState:
    return state.put(state.section_bucket, "area", value)


def _mobile_with_country_code(key: str, state: ParseState) -> bool:
    return "mobile" in key and state.country_code_marker in key


def _is_full_name(key: str, state: ParseState) -> bool:
    return "full name" in key or key in ("name", "student name")


_hometown_or_residence = _in_section(
    Section.BACK_HOME_DETAILS, "hometownDetails", "currentResidence"
)


KEY_RULES: Tuple[KeyRule, ...] = (
    KeyRule("full_name", _is_full_name, _assign_full_name),
    KeyRule("mobile", _mobile_with_country_code, _assign_mobile),
    KeyRule("whatsapp", _contains("whatsapp"), _assign_to("studentDetails", "whatsapp")),
    KeyRule("email", _contains("email", "e-mail"), _assign_to("otherDetails", "email")),
    KeyRule("birth_year", _matches(BIRTH_KEY_PATTERN), _assign_birth_year),
    KeyRule("qualification", _contains("qualification", "education"), _assign_to("otherDetails", "qualification")),
    KeyRule("profession", _contains("profession", "occupation"), _assign_to("otherDetails", "profession")),
    KeyRule("batch", _contains("batch"), _assign_to("referredBy", "batch")),
    KeyRule("student_id", _contains("student id", "studentid"), _assign_to("referredBy", "studentId")),
    KeyRule("city", _matches(TOWN_KEY_PATTERN), _assign_routed("city", _hometown_or_residence)),
    KeyRule("district", _contains("district"), _assign_to("hometownDetails", "district")),
    KeyRule("state", _contains("state"), _assign_routed("state", _hometown_or_residence)),
    KeyRule("country", _contains("country"), _assign_routed("country", _hometown_or_residence)),
    KeyRule("zone", _contains("zone"), _assign_to("currentResidence", "zone")),
    KeyRule("area", _contains("area"), _assign_area),
)


def match_key_rule(key: str, state: Optional[ParseState] = None) -> Optional[KeyRule]:
    """Return the first rule claiming ``key``, or None when the fallback applies."""
    state = state or ParseState()
    lowered = key.lower()
    for rule in KEY_RULES:
        if rule.matches(lowered, state):
            return rule
    return None


# ============================================================================
# Line handling
# ============================================================================

def is_skippable(line: str) -> bool:
    """Blank lines, divider runs and decorative banner lines carry no data."""
    stripped = line.strip()
    if not stripped:
        return True
    if DIVIDER_PATTERN.match(stripped):
        return True
    return any(marker in stripped for marker in DECORATIVE_MARKERS)


def detect_section(line: str) -> Optional[Section]:
    upper = line.upper()
    for header, section in SECTION_HEADERS:
        if header in upper:
            return section
    return None


def _store_fallback(state: ParseState, key: str, value: str) -> ParseState:
    camel = to_camel_key(key)
    if not camel:
        return state
    if camel == "age" and value.isdigit():
        return state.put(state.section_bucket, camel, int(value))
    return state.put(state.section_bucket, camel, value)


def consume_line(state: ParseState, line: str) -> ParseState:
    """Fold step: apply one line of pasted text to the parse state."""
    if is_skippable(line):
        return state

    code_match = CLASS_CODE_PATTERN.search(line)
    if code_match:
        return replace(state, class_code=code_match.group(1).upper())

    section = detect_section(line)
    if section is not None:
        return replace(state, section=section)

    if ":" not in line:
        return state

    raw_key, value = line.split(":", 1)
    key = KEY_PREFIX_PATTERN.sub("", raw_key.strip()).strip()
    value = value.strip()
    if not key or not value:
        return state

    rule = match_key_rule(key, state)
    if rule is not None:
        return rule.assign(state, key.lower(), value)
    return _store_fallback(state, key, value)


def _build_record(state: ParseState) -> ParsedApplicationData:
    payload: Dict[str, object] = dict(state.buckets)
    payload["classCode"] = state.class_code
    return ParsedApplicationData.model_validate(payload)


def parse_application_text(
    text: str,
    current_year: Optional[int] = None,
    country_code_marker: str = DEFAULT_COUNTRY_CODE_MARKER,
) -> Optional[ParsedApplicationData]:
    """
    Parse one pasted application.

    Args:
        text: Multi-line pasted application text
        current_year: Year used to turn a birth year into an age
        country_code_marker: Marker a "Mobile" label must carry to be
            treated as the primary mobile number

    Returns:
        The parsed record, or None when parsing fails for any reason.
    """
    try:
        initial = ParseState(
            current_year=current_year or datetime.now().year,
            country_code_marker=country_code_marker,
        )
        lines: List[str] = text.splitlines()
        return _build_record(reduce(consume_line, lines, initial))
    except Exception as e:
        logger.warning(f"Could not parse application text: {e}")
        return None
