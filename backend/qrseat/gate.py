import logging
from dataclasses import dataclass
from typing import Callable

from .locks import KeyedLocks
from .message_queue import purge_expired
from .records import now_ms
from .store import SessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateState:
    active: bool
    last_update: int


class ActivityGate:
    """Per-session on/off switch deciding whether ``send`` is admitted.

    Two states, any transition allowed, no history past ``last_update``.
    """

    def __init__(self, store: SessionStore, locks: KeyedLocks, clock: Callable[[], int] = now_ms):
        self._store = store
        self._locks = locks
        self._clock = clock

    def read(self, key: str) -> GateState:
        session = self._store.get(key)
        return GateState(active=session.active, last_update=session.last_update)

    def write(self, key: str, active: bool) -> GateState:
        with self._locks.hold(key):
            session = self._store.get(key)
            now = self._clock()
            purge_expired(session, now)
            session.active = active
            session.last_update = now
            session.updated_at = now
            self._store.put(key, session)
        logger.info("Session status updated: session=%s active=%s", key, active)
        return GateState(active=active, last_update=now)
