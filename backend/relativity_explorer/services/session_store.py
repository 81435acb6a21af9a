"""
In-memory registry of playback sessions.

Sessions live only as long as the process. All mutation happens on the
event loop thread through the pure transitions in playback.py, so no locking
is needed; the only suspension point is the tutor call, whose result is
re-validated by token before it is applied.
"""
import logging
import uuid
from collections import OrderedDict
from typing import Callable

from relativity_explorer.config import get_settings
from relativity_explorer.models.lesson import STEPS
from relativity_explorer.models.session import SessionState, TutorMode
from relativity_explorer.services import playback
from relativity_explorer.services.ai_tutor import AITutor, ai_tutor

logger = logging.getLogger(__name__)
settings = get_settings()


class SessionNotFound(KeyError):
    pass


class SessionStore:
    """Owns every SessionState, keyed by session id."""

    def __init__(self, max_sessions: int | None = None, tutor: AITutor | None = None):
        self._sessions: OrderedDict[str, SessionState] = OrderedDict()
        self.max_sessions = max_sessions or settings.max_sessions
        self.tutor = tutor or ai_tutor

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> tuple[str, SessionState]:
        session_id = uuid.uuid4().hex
        state = SessionState()
        self._sessions[session_id] = state

        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info("Evicted session %s (limit %d)", evicted, self.max_sessions)

        logger.info("Created session %s", session_id)
        return session_id, state

    def get(self, session_id: str) -> SessionState:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id) from None

    def delete(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFound(session_id)
        logger.info("Deleted session %s", session_id)

    def apply(self, session_id: str, transition: Callable[..., SessionState], *args) -> SessionState:
        """Run a pure transition against the stored state and keep the result."""
        state = transition(self.get(session_id), *args)
        self._sessions[session_id] = state
        return state

    # ── Tutor ──────────────────────────────────────────────────────────

    def start_tutor(self, session_id: str, mode: TutorMode) -> int | None:
        """Mark a tutor request as pending. Returns its token, or None if one is already pending."""
        state, token = playback.begin_tutor_request(self.get(session_id), mode)
        if token is None:
            logger.info("Tutor request ignored for session %s: one is already pending", session_id)
            return None
        self._sessions[session_id] = state
        return token

    async def run_tutor_request(self, session_id: str, token: int, mode: TutorMode, step_index: int) -> None:
        """Call the tutor and store its answer if the request is still current."""
        text = await self.tutor.request(mode, STEPS[step_index])

        state = self._sessions.get(session_id)
        if state is None:
            logger.info("Session %s closed before tutor answered", session_id)
            return

        updated = playback.complete_tutor_request(state, token, text)
        if updated is state:
            logger.info("Discarded stale tutor response for session %s (token %d)", session_id, token)
            return
        self._sessions[session_id] = updated


# Singleton instance
session_store = SessionStore()
