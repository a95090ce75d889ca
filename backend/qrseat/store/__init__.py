from .. import config
from .base import SessionStore
from .memory import MemorySessionStore
from .redis_store import RedisSessionStore
from .sql import SqlSessionStore

__all__ = [
    "SessionStore",
    "MemorySessionStore",
    "RedisSessionStore",
    "SqlSessionStore",
    "build_store",
]


def build_store(backend: str = None) -> SessionStore:
    backend = (backend or config.STORE_BACKEND).lower()
    if backend == "memory":
        return MemorySessionStore()
    if backend == "sql":
        return SqlSessionStore(config.DATABASE_URL)
    if backend == "redis":
        return RedisSessionStore.from_url(
            config.REDIS_URL,
            prefix=config.REDIS_KEY_PREFIX,
            max_age_ms=config.session_max_age_ms(),
        )
    raise ValueError(f"Unknown QRSEAT_STORE backend: {backend!r}")
