"""
Duplicate Application Checker

Looks for stored applications sharing a mobile number or an email with a
candidate, across every class and status. Matches are reported to the
operator; they never block a submission.
"""

import logging
from typing import List, Optional, Sequence

from admissions.domain.duplicates import (
    is_likely_duplicate,
    normalize_mobile,
    to_duplicate_match,
)
from admissions.domain.models import DuplicateMatch, ParsedApplication, ParsedApplicationData
from admissions.infrastructure.db.repositories import ApplicationRepository
from admissions.infrastructure.exceptions import ValidationError

logger = logging.getLogger(__name__)


class DuplicateChecker:
    """Global mobile-or-email duplicate lookup."""

    def __init__(self, application_repo: ApplicationRepository):
        self.application_repo = application_repo

    async def find_duplicates(
        self,
        full_name: Optional[str] = None,
        mobile: Optional[str] = None,
        email: Optional[str] = None,
    ) -> List[DuplicateMatch]:
        """
        Find stored applications matching the mobile number or the email.

        Args:
            full_name: Carried for context only; never matched on
            mobile: Candidate mobile, any formatting
            email: Candidate email

        Raises:
            ValidationError: If neither a mobile number nor an email is usable
        """
        usable_mobile = mobile if normalize_mobile(mobile) else None
        usable_email = email.strip() if email and email.strip() else None
        if usable_mobile is None and usable_email is None:
            if full_name and full_name.strip():
                raise ValidationError("fullName alone cannot identify duplicates")
            raise ValidationError("A mobile number or an email is required")

        rows = await self.application_repo.list_contact_rows()
        matches = [
            to_duplicate_match(row)
            for row in rows
            if is_likely_duplicate(row, usable_mobile, usable_email)
        ]
        if matches:
            logger.info(f"Found {len(matches)} possible duplicate(s) for {full_name or 'applicant'}")
        return matches

    async def check_parsed(self, data: ParsedApplicationData) -> List[DuplicateMatch]:
        """Duplicates for a parsed record; empty when it has neither mobile nor email."""
        try:
            return await self.find_duplicates(
                full_name=data.student_details.full_name,
                mobile=data.student_details.mobile,
                email=data.other_details.email,
            )
        except ValidationError:
            return []

    async def check_batch(
        self,
        items: Sequence[ParsedApplication],
    ) -> dict[str, List[DuplicateMatch]]:
        """Check each parsed application in turn, keyed by temp id."""
        return {item.temp_id: await self.check_parsed(item.data) for item in items}
