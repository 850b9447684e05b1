"""
Batch Review Session

Tracks the parsed applications of one multi-application paste while an
operator walks through them. Items move ``pending -> submitted`` or
``pending -> cancelled`` by explicit action only; both are terminal.
The cursor always points at the first item still pending.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional
import uuid

from admissions.domain.models import ParsedApplication, ReviewStatus
from admissions.infrastructure.exceptions import InvalidTransitionError, NotFoundError


@dataclass
class ReviewSession:
    owner_id: str
    items: List[ParsedApplication]
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def get(self, temp_id: str) -> ParsedApplication:
        for item in self.items:
            if item.temp_id == temp_id:
                return item
        raise NotFoundError(f"No parsed application {temp_id} in session {self.session_id}")

    @property
    def current(self) -> Optional[ParsedApplication]:
        """Next item awaiting review, or None when the batch is done."""
        return next((i for i in self.items if i.status == ReviewStatus.PENDING), None)

    @property
    def is_complete(self) -> bool:
        return self.current is None

    def ensure_pending(self, temp_id: str) -> ParsedApplication:
        item = self.get(temp_id)
        if item.status != ReviewStatus.PENDING:
            raise InvalidTransitionError(
                f"Parsed application {temp_id} is already {item.status.value}",
                current_status=item.status.value,
            )
        return item

    def mark_submitted(self, temp_id: str, application_id: str) -> ParsedApplication:
        item = self.ensure_pending(temp_id)
        item.status = ReviewStatus.SUBMITTED
        item.application_id = application_id
        return item

    def cancel(self, temp_id: str) -> ParsedApplication:
        item = self.ensure_pending(temp_id)
        item.status = ReviewStatus.CANCELLED
        return item

    def counts(self) -> dict:
        return {
            status.value: sum(1 for i in self.items if i.status == status)
            for status in ReviewStatus
        }


class ReviewSessionStore:
    """
    In-process registry of open review sessions.

    Sessions are transient by nature and are never persisted; a restart
    drops them. Assumes a single worker process.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, ReviewSession] = {}

    def open(self, owner_id: str, items: List[ParsedApplication]) -> ReviewSession:
        session = ReviewSession(owner_id=owner_id, items=items)
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str, owner_id: str) -> ReviewSession:
        session = self._sessions.get(session_id)
        # Another user's session is reported as missing.
        if session is None or session.owner_id != owner_id:
            raise NotFoundError(f"Review session {session_id} not found")
        return session

    def discard(self, session_id: str, owner_id: str) -> None:
        self.get(session_id, owner_id)
        del self._sessions[session_id]

    def __len__(self) -> int:
        return len(self._sessions)
