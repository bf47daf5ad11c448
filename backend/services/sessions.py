"""
In-process session store.

Sessions map an opaque random id (carried in an HttpOnly cookie) to the
identity of the logged-in user. Entries expire after a fixed TTL.
"""
import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from domain.models import SessionUser

logger = logging.getLogger(__name__)


@dataclass
class SessionRecord:
    user: SessionUser
    expires_at: float


class SessionStore:
    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: Dict[str, SessionRecord] = {}

    def create(self, user: SessionUser) -> str:
        """Start a session; abandoned sessions that have expired are dropped here."""
        session_id = secrets.token_urlsafe(32)
        now = self._clock()
        with self._lock:
            expired = self._drop_expired(now)
            self._sessions[session_id] = SessionRecord(user=user, expires_at=now + self.ttl_seconds)
        if expired:
            logger.debug("Purged %d expired sessions", expired)
        return session_id

    def _drop_expired(self, now: float) -> int:
        # caller holds self._lock
        expired = [sid for sid, rec in self._sessions.items() if rec.expires_at <= now]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)

    def get(self, session_id: Optional[str]) -> Optional[SessionUser]:
        if not session_id:
            return None
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                return None
            if record.expires_at <= self._clock():
                del self._sessions[session_id]
                return None
            return record.user

    def update(self, session_id: str, user: SessionUser) -> None:
        """Refresh the cached identity without extending the expiry."""
        with self._lock:
            record = self._sessions.get(session_id)
            if record is not None:
                record.user = user

    def destroy(self, session_id: Optional[str]) -> None:
        if not session_id:
            return
        with self._lock:
            self._sessions.pop(session_id, None)

    def destroy_user(self, user_id: int) -> int:
        with self._lock:
            doomed = [sid for sid, rec in self._sessions.items() if rec.user.id == user_id]
            for sid in doomed:
                del self._sessions[sid]
        return len(doomed)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = self._drop_expired(now)
        if expired:
            logger.debug("Purged %d expired sessions", expired)
        return expired

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
