import logging
import threading

from classes.errors import NotFound

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Live quiz sessions of this process, looked up by id and owner."""

    def __init__(self):
        self._sessions = {}
        self._lock = threading.Lock()

    def add(self, session):
        with self._lock:
            self._sessions[session.id] = session
        return session

    def get(self, session_id, challenger_id):
        with self._lock:
            session = self._sessions.get(session_id)
        # another challenger's session is reported as missing
        if session is None or session.challenger_id != challenger_id:
            raise NotFound("Quiz session not found")
        return session

    def discard(self, session_id):
        with self._lock:
            return self._sessions.pop(session_id, None)

    def sweep(self, keep=None):
        """Advance every live session's countdown and drop the ones that closed.

        Expired sessions are auto-submitted here even if their challenger never
        comes back. ``keep`` names a session left in place for the current request.
        """
        with self._lock:
            sessions = list(self._sessions.values())

        evicted = []
        for session in sessions:
            session.sync()
            if session.closed and session.id != keep:
                self.discard(session.id)
                evicted.append(session)
        if evicted:
            logger.info("Swept %s closed quiz session(s)", len(evicted))
        return evicted

    def __len__(self):
        return len(self._sessions)
