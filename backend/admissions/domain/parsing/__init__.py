# Parsing module for pasted application text
from admissions.domain.parsing.parser import (
    KEY_RULES,
    KeyRule,
    ParseState,
    Section,
    match_key_rule,
    parse_application_text,
)
from admissions.domain.parsing.splitter import (
    parse_multiple_applications,
    split_application_text,
)

__all__ = [
    "KEY_RULES",
    "KeyRule",
    "ParseState",
    "Section",
    "match_key_rule",
    "parse_application_text",
    "parse_multiple_applications",
    "split_application_text",
]
