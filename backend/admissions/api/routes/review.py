"""
Batch Review Routes

A multi-application paste opens a review session. The operator then walks
the parsed items one by one, submitting or cancelling each. Sessions are
kept in process memory and belong to the user who opened them.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, status
from pydantic import Field

from admissions.api.dependencies import (
    CurrentUserDep,
    DuplicateCheckerDep,
    ReviewStoreDep,
    SubmissionServiceDep,
    ValidatorDep,
    ensure_class_access,
)
from admissions.api.routes.parsing import ApplicationPreview, build_preview
from admissions.config.settings import get_settings
from admissions.domain.models import (
    CamelModel,
    ParsedApplication,
    ReviewStatus,
    ValidationWarning,
)
from admissions.domain.parsing import parse_multiple_applications
from admissions.domain.review import ReviewSession
from admissions.infrastructure.db.models.application import Application
from admissions.infrastructure.exceptions import ParseError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/review-sessions", tags=["review"])


# ============================================================================
# Request/Response Models
# ============================================================================

class ReviewSessionCreateRequest(CamelModel):
    text: str = Field(..., min_length=1)
    class_code: Optional[str] = None


class ReviewItemSubmitRequest(CamelModel):
    class_code: str = Field(..., min_length=1)
    warnings: Optional[List[ValidationWarning]] = None


class ReviewItemResponse(CamelModel):
    temp_id: str
    status: ReviewStatus
    application_id: Optional[str] = None
    preview: Optional[ApplicationPreview] = None


class ReviewSessionResponse(CamelModel):
    session_id: str
    created_at: datetime
    current_temp_id: Optional[str] = None
    is_complete: bool
    counts: Dict[str, int]
    items: List[ReviewItemResponse]


def to_response(
    session: ReviewSession,
    previews: Optional[Dict[str, ApplicationPreview]] = None,
) -> ReviewSessionResponse:
    previews = previews or {}
    current = session.current
    return ReviewSessionResponse(
        session_id=session.session_id,
        created_at=session.created_at,
        current_temp_id=current.temp_id if current else None,
        is_complete=session.is_complete,
        counts=session.counts(),
        items=[
            ReviewItemResponse(
                temp_id=item.temp_id,
                status=item.status,
                application_id=item.application_id,
                preview=previews.get(item.temp_id),
            )
            for item in session.items
        ],
    )


# ============================================================================
# Endpoints
# ============================================================================

@router.post("", response_model=ReviewSessionResponse, status_code=status.HTTP_201_CREATED)
async def open_review_session(
    request: ReviewSessionCreateRequest,
    user: CurrentUserDep,
    store: ReviewStoreDep,
    validator: ValidatorDep,
    checker: DuplicateCheckerDep,
):
    """Split and parse a paste, then preview every application found."""
    settings = get_settings()
    items: List[ParsedApplication] = parse_multiple_applications(
        request.text,
        min_length=settings.min_application_fragment_length,
        country_code_marker=settings.parser_country_code_marker,
    )
    if not items:
        raise ParseError("No applications found in the pasted text")

    duplicates = await checker.check_batch(items)
    previews = {}
    for item in items:
        previews[item.temp_id] = await build_preview(
            item.data, request.class_code, validator, duplicates[item.temp_id]
        )

    session = store.open(user.id, items)
    logger.info(f"Opened review session {session.session_id} with {len(items)} applications")
    return to_response(session, previews)


@router.get("/{session_id}", response_model=ReviewSessionResponse)
async def get_review_session(
    session_id: str,
    user: CurrentUserDep,
    store: ReviewStoreDep,
):
    return to_response(store.get(session_id, user.id))


@router.post("/{session_id}/items/{temp_id}/submit", response_model=Application, status_code=status.HTTP_201_CREATED)
async def submit_review_item(
    session_id: str,
    temp_id: str,
    request: ReviewItemSubmitRequest,
    user: CurrentUserDep,
    store: ReviewStoreDep,
    service: SubmissionServiceDep,
):
    """Store one pending item; it stays pending if the insert fails."""
    if user.is_moderator:
        ensure_class_access(user, request.class_code)
    session = store.get(session_id, user.id)
    return await service.submit_from_session(
        session, temp_id, request.class_code, user_id=user.id, warnings=request.warnings
    )


@router.post("/{session_id}/items/{temp_id}/cancel", response_model=ReviewItemResponse)
async def cancel_review_item(
    session_id: str,
    temp_id: str,
    user: CurrentUserDep,
    store: ReviewStoreDep,
):
    item = store.get(session_id, user.id).cancel(temp_id)
    return ReviewItemResponse(temp_id=item.temp_id, status=item.status)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_review_session(
    session_id: str,
    user: CurrentUserDep,
    store: ReviewStoreDep,
):
    """Discard the session, whatever state its items are in."""
    store.discard(session_id, user.id)
