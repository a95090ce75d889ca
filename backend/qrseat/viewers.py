"""Who is looking at which operator slot.

Devices re-register every few seconds; an entry not refreshed within the
heartbeat window stops showing up and is dropped on the next write.
"""
import logging
import threading
from typing import Callable, List

from . import config
from .records import Viewer, now_ms
from .store import SessionStore

logger = logging.getLogger(__name__)


class ViewerRegistry:
    def __init__(
        self,
        store: SessionStore,
        clock: Callable[[], int] = now_ms,
        heartbeat_ms: int = config.VIEWER_HEARTBEAT_MS,
    ):
        self._store = store
        self._clock = clock
        self._heartbeat_ms = heartbeat_ms
        # the viewer table is its own record, independent of session locks
        self._lock = threading.Lock()

    def _is_fresh(self, viewer: Viewer, now: int) -> bool:
        return now - viewer.last_seen < self._heartbeat_ms

    def list(self, operator_id: int) -> List[Viewer]:
        now = self._clock()
        return [
            v
            for v in self._store.load_viewers()
            if v.operator_id == operator_id and self._is_fresh(v, now)
        ]

    def register(self, device_id: str, operator_name: str, operator_id: int) -> Viewer:
        with self._lock:
            now = self._clock()
            viewers = [
                v
                for v in self._store.load_viewers()
                if self._is_fresh(v, now) and v.device_id != device_id
            ]
            viewer = Viewer(
                device_id=device_id,
                operator_name=operator_name,
                operator_id=operator_id,
                last_seen=now,
            )
            viewers.append(viewer)
            self._store.save_viewers(viewers)
        logger.debug("Viewer registered: device=%s operator=%d", device_id, operator_id)
        return viewer

    def unregister(self, device_id: str) -> bool:
        with self._lock:
            viewers = self._store.load_viewers()
            remaining = [v for v in viewers if v.device_id != device_id]
            self._store.save_viewers(remaining)
        removed = len(remaining) != len(viewers)
        if removed:
            logger.info("Viewer unregistered: device=%s", device_id)
        return removed

    def prune(self) -> int:
        """Drop stale entries. Returns how many were dropped."""
        with self._lock:
            now = self._clock()
            viewers = self._store.load_viewers()
            fresh = [v for v in viewers if self._is_fresh(v, now)]
            if len(fresh) == len(viewers):
                return 0
            self._store.save_viewers(fresh)
        return len(viewers) - len(fresh)
