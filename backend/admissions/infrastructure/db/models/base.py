"""
Base Model for SQLModel Record Schemas

Provides common fields and behavior for rows read from the hosted tables.
The tables themselves are owned by the Supabase project; these schemas
only describe and validate the rows exchanged with it.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin(SQLModel):
    """
    Mixin providing timestamp fields for records.

    ``created_at`` is written once on insert; ``updated_at`` is bumped by
    the repositories on every mutation.
    """

    created_at: Optional[datetime] = Field(
        default=None,
        description="Record creation timestamp (UTC)"
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        description="Last update timestamp (UTC)"
    )


class RecordModel(SQLModel):
    """Base for row schemas; ``to_row`` produces the JSON sent to PostgREST."""

    def to_row(self, exclude_unset: bool = False) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=exclude_unset)
