import threading
from typing import Any, Dict, List

from ..records import (
    RelaySession,
    Viewer,
    session_from_record,
    session_to_record,
    viewer_to_record,
    viewers_from_record,
)
from .base import SessionStore


class MemorySessionStore(SessionStore):
    """Process-local store. Records are kept in their stored form so callers
    never share mutable state with the map."""

    name = "memory"

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[str, Dict[str, Any]] = {}
        self._viewers: List[Dict[str, Any]] = []

    def get(self, key: str) -> RelaySession:
        with self._lock:
            raw = self._sessions.get(key)
        return session_from_record(key, raw)

    def put(self, key: str, session: RelaySession) -> None:
        record = session_to_record(session)
        with self._lock:
            self._sessions[key] = record

    def stale_keys(self, cutoff: int) -> List[str]:
        with self._lock:
            return [k for k, r in self._sessions.items() if r.get("updatedAt", 0) < cutoff]

    def delete_if_stale(self, key: str, cutoff: int) -> bool:
        with self._lock:
            record = self._sessions.get(key)
            if record is None or record.get("updatedAt", 0) >= cutoff:
                return False
            del self._sessions[key]
            return True

    def load_viewers(self) -> List[Viewer]:
        with self._lock:
            return viewers_from_record(list(self._viewers))

    def save_viewers(self, viewers: List[Viewer]) -> None:
        records = [viewer_to_record(v) for v in viewers]
        with self._lock:
            self._viewers = records

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._sessions
