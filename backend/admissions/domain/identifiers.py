"""
Application Identifiers

Human-readable ids of the form ``<CLASSCODE>-<NNNN>``.
"""

from typing import Iterable

DEFAULT_PADDING = 4


def generate_simple_application_id(class_code: str, suffix: int, padding: int = DEFAULT_PADDING) -> str:
    """Format an id from a class code and a sequence number ("QTR-B04", 7 -> "QTR-B04-0007")."""
    return f"{class_code}-{str(suffix).zfill(padding)}"


def next_sequence_number(class_code: str, existing_ids: Iterable[str]) -> int:
    """One past the highest numeric suffix already used by ``class_code``."""
    prefix = f"{class_code}-"
    highest = 0
    for existing in existing_ids:
        if not existing.startswith(prefix):
            continue
        tail = existing.rsplit("-", 1)[-1]
        if tail.isdigit():
            highest = max(highest, int(tail))
    return highest + 1


def generate_unique_application_id(
    class_code: str,
    existing_ids: Iterable[str] = (),
    padding: int = DEFAULT_PADDING,
) -> str:
    return generate_simple_application_id(
        class_code, next_sequence_number(class_code, existing_ids), padding
    )
