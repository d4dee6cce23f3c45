"""Visitor session ids with an inactivity expiry."""

from __future__ import annotations

import time
import uuid
from typing import Callable, Dict, Optional, Tuple

from backoffice.config import get_settings


class SessionTracker:
    """
    Maps a client key to a session id.

    Each lookup inside the expiry window extends the session; after
    ``expiry_minutes`` of silence the client gets a fresh id.
    """

    def __init__(
        self,
        expiry_minutes: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        minutes = expiry_minutes if expiry_minutes is not None else get_settings().analytics.session_expiry_minutes
        self.expiry_seconds = minutes * 60
        self._clock = clock
        self._sessions: Dict[str, Tuple[str, float]] = {}

    def get_session_id(self, client_key: str) -> str:
        """Return the client's live session id, dropping sessions that expired."""
        self.purge_expired()
        now = self._clock()
        current = self._sessions.get(client_key)
        if current is not None and now - current[1] < self.expiry_seconds:
            session_id = current[0]
        else:
            session_id = str(uuid.uuid4())
        self._sessions[client_key] = (session_id, now)
        return session_id

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, (_, seen) in self._sessions.items() if now - seen >= self.expiry_seconds]
        for key in expired:
            del self._sessions[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)
