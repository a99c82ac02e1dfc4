"""Bounded registry of HTTP client sessions."""

import logging
import time
import uuid
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from ..core.constants import DEFAULT_MAX_SESSIONS, DEFAULT_SESSION_TTL

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """A client session identified by its `mcp-session-id` header."""

    session_id: str
    created_at: float
    last_seen: float
    protocol_version: str | None = None
    request_count: int = 0


class SessionStore:
    """Sessions keyed by id, expired after `ttl_seconds` of inactivity.

    At most `max_sessions` are kept; creating one more evicts the session
    that has been idle longest.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_SESSION_TTL,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        # Ordered least recently seen first.
        self._sessions: OrderedDict[str, Session] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    def get(self, session_id: str) -> Session | None:
        """Look up a live session without refreshing it."""
        self.purge_expired()
        return self._sessions.get(session_id)

    def touch(self, session_id: str) -> Session:
        """Return the session for `session_id`, creating it if needed, and mark it active."""
        self.purge_expired()
        now = self._clock()

        session = self._sessions.get(session_id)
        if session is None:
            while len(self._sessions) >= self.max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info(f"Session limit reached, evicted {evicted}")
            session = Session(session_id=session_id, created_at=now, last_seen=now)
            self._sessions[session_id] = session
            logger.debug(f"Session created: {session_id}")
        else:
            self._sessions.move_to_end(session_id)

        session.last_seen = now
        session.request_count += 1
        return session

    def remove(self, session_id: str) -> bool:
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.debug(f"Session closed: {session_id}")
        return removed

    def purge_expired(self) -> int:
        """Drop sessions idle for longer than the TTL; returns how many were dropped."""
        cutoff = self._clock() - self.ttl_seconds
        expired = [sid for sid, s in self._sessions.items() if s.last_seen < cutoff]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info(f"Expired {len(expired)} idle session(s)")
        return len(expired)
