"""
Session Registry - In-memory storage for live and graded quiz sessions

Graded results are also kept in a bounded history for reporting; the
oldest results drop off once MAX_HISTORY_RESULTS is reached.
"""

import logging
from collections import OrderedDict, deque
from typing import Any, Deque, Dict, List, Optional

from ..config import settings
from .models import GradedResult
from .session import QuizSession

logger = logging.getLogger(__name__)


class RegistryFullError(Exception):
    """Raised when every slot is held by an active session"""


class SessionRegistry:
    """
    Holds sessions by id, bounded by capacity.

    When full, the oldest graded session is evicted; active sessions are
    never evicted.
    """

    # Fresh ids drawn before giving up on a collision
    MAX_ID_ATTEMPTS = 10

    def __init__(
        self,
        capacity: Optional[int] = None,
        session_kwargs: Optional[Dict[str, Any]] = None,
        history_limit: Optional[int] = None
    ):
        self.capacity = settings.MAX_ACTIVE_SESSIONS if capacity is None else capacity
        self.session_kwargs = dict(session_kwargs or {})
        self._sessions: "OrderedDict[str, QuizSession]" = OrderedDict()
        self._history: Deque[GradedResult] = deque(
            maxlen=settings.MAX_HISTORY_RESULTS if history_limit is None else history_limit
        )

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def create(self, **kwargs) -> QuizSession:
        """Create and register a new session in the setup state."""
        if len(self._sessions) >= self.capacity:
            self._evict_graded()
        if len(self._sessions) >= self.capacity:
            raise RegistryFullError(f"All {self.capacity} session slots are active")

        options = {**self.session_kwargs, **kwargs}
        options.setdefault("on_graded", self._on_graded)
        session = self._new_session(options)
        self._sessions[session.id] = session
        logger.info(f"Registered quiz session: {session.id}")
        return session

    def get(self, session_id: str) -> Optional[QuizSession]:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> Optional[QuizSession]:
        """Drop a session; an active one is graded first so its timer stops."""
        session = self._sessions.pop(session_id, None)
        if session is not None and session.is_active:
            session.finish()
        return session

    def history(self) -> List[GradedResult]:
        return list(self._history)

    def clear(self) -> None:
        for session_id in list(self._sessions):
            self.remove(session_id)
        self._history.clear()

    def _new_session(self, options: Dict[str, Any]) -> QuizSession:
        if options.get("session_id") is not None:
            if options["session_id"] in self._sessions:
                raise ValueError(f"Session id {options['session_id']} is already registered")
            return QuizSession(**options)

        for _ in range(self.MAX_ID_ATTEMPTS):
            session = QuizSession(**options)
            if session.id not in self._sessions:
                return session
            logger.warning(f"Session id collision on {session.id}, regenerating")
        raise RegistryFullError("Could not allocate a unique session id")

    def _on_graded(self, session: QuizSession) -> None:
        self._history.append(session.result)

    def _evict_graded(self) -> None:
        for session_id, session in list(self._sessions.items()):
            if session.is_graded:
                del self._sessions[session_id]
                logger.debug(f"Evicted graded session {session_id}")
                return
