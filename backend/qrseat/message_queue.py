"""FIFO operations on a session's pending messages.

Callers hold the session's key lock around a whole load, mutate, persist
cycle; nothing here locks or persists on its own.
"""
from typing import Optional

from .records import Message, RelaySession


def purge_expired(session: RelaySession, now: int) -> bool:
    """Drop every message with ``expires_at <= now``. True if any were dropped."""
    live = [m for m in session.messages if m.is_live(now)]
    if len(live) == len(session.messages):
        return False
    session.messages = live
    return True


def find_live(session: RelaySession, message_id: str, now: int) -> Optional[int]:
    purge_expired(session, now)
    for message in session.messages:
        if message.id == message_id:
            return message.version
    return None


def enqueue(session: RelaySession, message_id: str, ttl: int, now: int) -> Message:
    version = session.last_version + 1
    message = Message(id=message_id, version=version, created_at=now, expires_at=now + ttl)
    session.messages.append(message)
    session.last_version = version
    return message


def dequeue_head(session: RelaySession) -> Optional[Message]:
    if not session.messages:
        return None
    return session.messages.pop(0)
