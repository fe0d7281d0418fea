"""In-memory chat sessions awaiting user approval."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from ..types import Session

logger = logging.getLogger(__name__)


class SessionStore:
    """Sessions keyed by client-supplied id; an id reused overwrites the old session."""

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}

    def put(self, session_id: str, session: Session) -> None:
        if session_id in self._sessions:
            logger.debug("Overwriting session %s", session_id)
        self._sessions[session_id] = session

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def approve(self, session_id: str) -> Optional[Session]:
        """Mark the session approved and return it; None if unknown."""
        session = self._sessions.get(session_id)
        if session is None:
            return None
        session = session.model_copy(update={"approved": True})
        self._sessions[session_id] = session
        return session

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
