"""Relay service: the operations behind the HTTP surface.

A session moves between two gate states. While inactive, ``send`` is
refused but ``next`` keeps draining whatever was queued earlier. Each
mutating call is one load, mutate, persist cycle under the session's key
lock, with the persist as the last step.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from . import config
from .exceptions import RelayValidationError, SessionInactiveError
from .gate import ActivityGate, GateState
from .locks import KeyedLocks
from .message_queue import dequeue_head, enqueue, find_live, purge_expired
from .records import RelaySession, now_ms
from .store import SessionStore
from .viewers import ViewerRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SendResult:
    version: int
    duplicate: bool = False


class RelayService:
    def __init__(
        self,
        store: SessionStore,
        clock: Callable[[], int] = now_ms,
        default_ttl_ms: int = config.MESSAGE_TTL_MS,
        min_ttl_ms: int = config.MESSAGE_TTL_MIN_MS,
        max_ttl_ms: int = config.MESSAGE_TTL_MAX_MS,
        viewer_heartbeat_ms: int = config.VIEWER_HEARTBEAT_MS,
    ):
        if min_ttl_ms > max_ttl_ms:
            raise ValueError("min_ttl_ms must not exceed max_ttl_ms")
        self.store = store
        self.clock = clock
        self.locks = KeyedLocks()
        self.gate = ActivityGate(store, self.locks, clock)
        self.viewers = ViewerRegistry(store, clock, viewer_heartbeat_ms)
        self._default_ttl_ms = default_ttl_ms
        self._min_ttl_ms = min_ttl_ms
        self._max_ttl_ms = max_ttl_ms

    def resolve_ttl(self, ttl: Optional[int]) -> int:
        if ttl is None:
            ttl = self._default_ttl_ms
        elif isinstance(ttl, bool) or not isinstance(ttl, int) or ttl <= 0:
            raise RelayValidationError("ttl must be a positive integer (milliseconds)")
        return min(max(ttl, self._min_ttl_ms), self._max_ttl_ms)

    def _persist(self, session: RelaySession, now: int) -> None:
        session.updated_at = now
        self.store.put(session.key, session)

    def send(self, key: str, message_id: str, ttl: Optional[int] = None) -> SendResult:
        ttl = self.resolve_ttl(ttl)
        with self.locks.hold(key):
            session = self.store.get(key)
            if not session.active:
                logger.info("Message rejected, session not active: session=%s id=%s", key, message_id)
                raise SessionInactiveError(key)

            now = self.clock()
            purged = purge_expired(session, now)
            existing = find_live(session, message_id, now)
            if existing is not None:
                if purged:
                    self._persist(session, now)
                logger.info("Duplicate message: session=%s id=%s version=%d", key, message_id, existing)
                return SendResult(version=existing, duplicate=True)

            message = enqueue(session, message_id, ttl, now)
            self._persist(session, now)

        logger.info("New message saved: session=%s id=%s version=%d", key, message_id, message.version)
        return SendResult(version=message.version)

    def next(self, key: str) -> Optional[str]:
        """Hand out the oldest live message and forget it. None when empty."""
        with self.locks.hold(key):
            session = self.store.get(key)
            now = self.clock()
            changed = purge_expired(session, now)
            message = dequeue_head(session)
            if message is not None:
                changed = True
            if changed:
                self._persist(session, now)

        if message is None:
            return None
        logger.info("Delivered and removed message: session=%s id=%s version=%d", key, message.id, message.version)
        return message.id

    def status(self, key: str) -> GateState:
        return self.gate.read(key)

    def set_status(self, key: str, active: bool) -> GateState:
        return self.gate.write(key, active)

    def pending(self, key: str) -> int:
        """Number of live messages waiting in ``key``'s queue."""
        session = self.store.get(key)
        purge_expired(session, self.clock())
        return len(session.messages)

    def close(self) -> None:
        self.store.close()
