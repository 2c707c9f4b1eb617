import logging
import uuid
from datetime import datetime, timedelta
from typing import Dict, Optional

from .checkin import CheckInTracker
from .session import ReviewEngine

logger = logging.getLogger(__name__)


class ClientState:
    """Everything one browser holds between requests."""

    def __init__(self, service):
        self.review = ReviewEngine(service)
        self.checkin = CheckInTracker(service)
        self.created_at = datetime.now()
        self.notice: Optional[str] = None

    def pop_notice(self) -> Optional[str]:
        notice, self.notice = self.notice, None
        return notice


class ClientStore:
    """In-memory client states keyed by session cookie, expiring after a timeout."""

    def __init__(self, timeout_minutes: int):
        self.timeout = timedelta(minutes=timeout_minutes)
        self.states: Dict[str, ClientState] = {}

    def get(self, session_id: Optional[str]) -> Optional[ClientState]:
        if not session_id or session_id not in self.states:
            return None
        state = self.states[session_id]
        if datetime.now() - state.created_at > self.timeout:
            del self.states[session_id]
            logger.info(f"Session expired: {session_id}")
            return None
        return state

    def sweep(self) -> int:
        """Drops every expired state; returns how many went."""
        now = datetime.now()
        expired = [
            sid for sid, state in self.states.items()
            if now - state.created_at > self.timeout
        ]
        for sid in expired:
            del self.states[sid]
        if expired:
            logger.info(f"Swept {len(expired)} expired sessions")
        return len(expired)

    def create(self, service) -> tuple:
        self.sweep()
        new_id = str(uuid.uuid4())
        self.states[new_id] = ClientState(service)
        logger.info(f"New session: {new_id}")
        return new_id, self.states[new_id]

    def discard(self, session_id: Optional[str]) -> None:
        if session_id in self.states:
            del self.states[session_id]
