"""
Multi-Application Splitter

Detects several applications concatenated into one paste and parses each.

Separators compose: every separator is applied to every fragment produced
by the previous one, so a paste mixing ``=====`` dividers and numbered
entries still comes apart cleanly.
"""

import logging
import re
from typing import List, Optional, Pattern, Tuple

from admissions.domain.models import ParsedApplication
from admissions.domain.parsing.parser import (
    DEFAULT_COUNTRY_CODE_MARKER,
    parse_application_text,
)

logger = logging.getLogger(__name__)

MIN_FRAGMENT_LENGTH = 50

# Applied in this order; each pattern consumes the separator itself.
SEPARATORS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("equals_divider", re.compile(r"^[ \t]*={5,}[ \t]*$", re.MULTILINE)),
    ("dash_divider", re.compile(r"^[ \t]*-{5,}[ \t]*$", re.MULTILINE)),
    ("application_header", re.compile(r"^[ \t]*application[ \t]+\d+[ \t]*:?[ \t]*$", re.MULTILINE | re.IGNORECASE)),
    ("numbered_marker", re.compile(r"^[ \t]*\d+\.[ \t]+", re.MULTILINE)),
)


def split_application_text(text: str, min_length: int = MIN_FRAGMENT_LENGTH) -> List[str]:
    """
    Split a paste into candidate application texts.

    Fragments shorter than ``min_length`` characters (after stripping) are
    treated as noise and dropped.
    """
    fragments = [text]
    for _, pattern in SEPARATORS:
        fragments = [piece for fragment in fragments for piece in pattern.split(fragment)]
    return [f.strip() for f in fragments if len(f.strip()) >= min_length]


def parse_multiple_applications(
    text: str,
    min_length: int = MIN_FRAGMENT_LENGTH,
    current_year: Optional[int] = None,
    country_code_marker: str = DEFAULT_COUNTRY_CODE_MARKER,
) -> List[ParsedApplication]:
    """
    Parse every application found in ``text``.

    When splitting leaves a single fragment the whole original text is parsed
    as one application. Fragments that fail to parse are dropped. Each result
    gets a fresh temporary id and starts ``pending``.
    """
    fragments = split_application_text(text, min_length)

    if len(fragments) == 1:
        parsed = parse_application_text(text, current_year, country_code_marker)
        return [ParsedApplication(data=parsed)] if parsed is not None else []

    results: List[ParsedApplication] = []
    for index, fragment in enumerate(fragments):
        parsed = parse_application_text(fragment, current_year, country_code_marker)
        if parsed is None:
            logger.debug(f"Dropping unparseable fragment {index} of {len(fragments)}")
            continue
        results.append(ParsedApplication(data=parsed))

    logger.info(f"Split paste into {len(fragments)} fragments, parsed {len(results)} applications")
    return results
