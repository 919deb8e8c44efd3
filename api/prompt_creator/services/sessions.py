from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..models.exceptions import SessionNotFound
from ..models.schemas import GenerationResult
from .selection import SelectionState

logger = logging.getLogger(__name__)


@dataclass
class BriefSession:
    """One user's brief plus the last successful generation result."""
    session_id: str
    state: SelectionState = field(default_factory=SelectionState)
    last_result: Optional[GenerationResult] = None
    created_at: float = field(default_factory=time.time)


class SessionStore:
    """Process-local session registry. Nothing outlives the process."""

    def __init__(self):
        self._sessions: Dict[str, BriefSession] = {}

    def create(self) -> BriefSession:
        session = BriefSession(session_id=uuid.uuid4().hex)
        self._sessions[session.session_id] = session
        logger.info("Brief session created", extra={"session_id": session.session_id})
        return session

    def get(self, session_id: str) -> BriefSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id)

    def delete(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFound(session_id)
        logger.info("Brief session deleted", extra={"session_id": session_id})

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


session_store = SessionStore()
