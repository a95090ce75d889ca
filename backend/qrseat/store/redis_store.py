import json
import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

import redis

from ..exceptions import StorageError
from ..records import (
    RelaySession,
    Viewer,
    session_from_record,
    session_to_record,
    viewer_to_record,
    viewers_from_record,
)
from .base import SessionStore

logger = logging.getLogger(__name__)


class RedisSessionStore(SessionStore):
    """Each session is one JSON string that Redis expires after ``max_age_ms``
    without a write; the viewer table is a single JSON list."""

    name = "redis"

    def __init__(self, client: redis.Redis, prefix: str = "qrseat:", max_age_ms: Optional[int] = None):
        self._client = client
        self._prefix = prefix
        self._max_age_ms = max_age_ms

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisSessionStore":
        return cls(redis.from_url(url, decode_responses=True), **kwargs)

    def _session_key(self, key: str) -> str:
        return f"{self._prefix}session:{key}"

    @property
    def _viewers_key(self) -> str:
        return f"{self._prefix}viewers"

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except redis.RedisError as exc:
            raise StorageError(f"Redis failed to {action}") from exc

    def _decode(self, name: str, data: Optional[str]) -> Any:
        if data is None:
            return None
        try:
            return json.loads(data)
        except ValueError:
            logger.warning("Unreadable JSON under %s", name)
            return None

    def get(self, key: str) -> RelaySession:
        name = self._session_key(key)
        with self._guard("load session"):
            data = self._client.get(name)
        return session_from_record(key, self._decode(name, data))

    def put(self, key: str, session: RelaySession) -> None:
        payload = json.dumps(session_to_record(session))
        with self._guard("save session"):
            if self._max_age_ms:
                self._client.set(self._session_key(key), payload, px=self._max_age_ms)
            else:
                self._client.set(self._session_key(key), payload)

    def _updated_at(self, name: str, data: Optional[str]) -> Optional[int]:
        record = self._decode(name, data)
        if record is None:
            return None
        return session_from_record(name, record).updated_at

    def stale_keys(self, cutoff: int) -> List[str]:
        prefix = self._session_key("")
        keys = []
        with self._guard("scan sessions"):
            for name in self._client.scan_iter(match=f"{prefix}*"):
                updated_at = self._updated_at(name, self._client.get(name))
                if updated_at is not None and updated_at < cutoff:
                    keys.append(name[len(prefix):])
        return keys

    def delete_if_stale(self, key: str, cutoff: int) -> bool:
        name = self._session_key(key)
        with self._guard("delete session"):
            with self._client.pipeline() as pipe:
                try:
                    pipe.watch(name)
                    updated_at = self._updated_at(name, pipe.get(name))
                    if updated_at is None or updated_at >= cutoff:
                        pipe.unwatch()
                        return False
                    pipe.multi()
                    pipe.delete(name)
                    pipe.execute()
                    return True
                except redis.WatchError:
                    # written while we were looking; it is no longer stale
                    return False

    def load_viewers(self) -> List[Viewer]:
        with self._guard("load viewers"):
            data = self._client.get(self._viewers_key)
        return viewers_from_record(self._decode(self._viewers_key, data))

    def save_viewers(self, viewers: List[Viewer]) -> None:
        payload = json.dumps([viewer_to_record(v) for v in viewers])
        with self._guard("save viewers"):
            self._client.set(self._viewers_key, payload)

    def close(self) -> None:
        self._client.close()
