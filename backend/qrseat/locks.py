import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class KeyedLocks:
    """One mutex per session key, created on demand and dropped when unused."""

    def __init__(self):
        self._guard = threading.Lock()
        self._entries: Dict[str, _Entry] = {}

    def _checkout(self, key: str) -> _Entry:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1
            return entry

    def _checkin(self, key: str, entry: _Entry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0:
                self._entries.pop(key, None)

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        entry = self._checkout(key)
        try:
            with entry.lock:
                yield
        finally:
            self._checkin(key, entry)

    @contextmanager
    def try_hold(self, key: str) -> Iterator[bool]:
        """Yield True with the lock held, or False right away if it is busy."""
        entry = self._checkout(key)
        acquired = entry.lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                entry.lock.release()
            self._checkin(key, entry)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
