"""
Application Submission Service

Turns a parsed application into a stored record: issues the next
``<CLASSCODE>-<NNNN>`` id for the class, attaches the validation warnings
and inserts the row. Review-session items go through the same path and are
marked submitted only after the insert succeeds.
"""

import logging
from typing import List, Optional

from admissions.config.settings import get_settings
from admissions.domain.identifiers import generate_unique_application_id
from admissions.domain.models import ParsedApplicationData, ValidationWarning
from admissions.domain.review import ReviewSession
from admissions.infrastructure.db.models.application import Application, ApplicationCreate
from admissions.infrastructure.db.repositories import ApplicationRepository
from admissions.infrastructure.exceptions import ValidationError
from admissions.infrastructure.services.validation_service import ApplicationValidator

logger = logging.getLogger(__name__)


class SubmissionService:
    """Persists parsed applications."""

    def __init__(
        self,
        application_repo: ApplicationRepository,
        validator: ApplicationValidator,
    ):
        self.application_repo = application_repo
        self.validator = validator

    async def next_application_id(self, class_code: str) -> str:
        existing = await self.application_repo.list_ids_for_class(class_code)
        return generate_unique_application_id(
            class_code, existing, padding=get_settings().application_id_padding
        )

    async def submit_parsed(
        self,
        data: ParsedApplicationData,
        class_code: str,
        user_id: Optional[str] = None,
        warnings: Optional[List[ValidationWarning]] = None,
    ) -> Application:
        """
        Store one parsed application under ``class_code``.

        Args:
            data: Parsed application
            class_code: Selected class; overrides any code found in the text
            user_id: Submitting user
            warnings: Precomputed warnings; validated here when omitted

        Raises:
            ValidationError: If no class code is given
            DatabaseError: If the insert fails
        """
        class_code = (class_code or "").strip()
        if not class_code:
            raise ValidationError("A class must be selected before submitting")

        if warnings is None:
            warnings = (await self.validator.validate(data, class_code)).warnings

        application_id = await self.next_application_id(class_code)
        record = ApplicationCreate.from_parsed(
            application_id=application_id,
            class_code=class_code,
            data=data,
            warnings=warnings,
            user_id=user_id,
        )
        application = await self.application_repo.create(record)
        logger.info(
            f"Created application {application.id} with {len(warnings)} validation warnings"
        )
        return application

    async def submit_from_session(
        self,
        session: ReviewSession,
        temp_id: str,
        class_code: str,
        user_id: Optional[str] = None,
        warnings: Optional[List[ValidationWarning]] = None,
    ) -> Application:
        """
        Submit one pending item of a review session.

        The item stays pending when the insert fails.

        Raises:
            NotFoundError: If ``temp_id`` is not in the session
            InvalidTransitionError: If the item is no longer pending
        """
        item = session.ensure_pending(temp_id)
        application = await self.submit_parsed(
            item.data, class_code, user_id=user_id, warnings=warnings
        )
        session.mark_submitted(temp_id, application.id)
        return application
