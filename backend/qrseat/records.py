"""Typed session/viewer records and their stored (JSON dict) form.

Stored records have changed shape over time. The first generation kept
messages as ``{id, ver, timestamp}`` with no expiry and derived the next
version from the queue length; the gate lived in a separate record.
``session_from_record`` upgrades anything it is given into a fully typed
``RelaySession`` once, at load time, so nothing downstream has to guess.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from . import config

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Message:
    id: str
    version: int
    created_at: int
    expires_at: int

    def is_live(self, now: int) -> bool:
        return self.expires_at > now


@dataclass
class RelaySession:
    key: str
    active: bool = False
    last_update: int = 0
    messages: List[Message] = field(default_factory=list)
    last_version: int = 0
    updated_at: int = 0


@dataclass
class Viewer:
    device_id: str
    operator_name: str
    operator_id: int
    last_seen: int

    def to_public(self) -> Dict[str, Any]:
        return {
            "deviceId": self.device_id,
            "operatorName": self.operator_name,
            "operatorId": self.operator_id,
            "lastSeen": self.last_seen,
        }


def _int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def message_to_record(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "version": message.version,
        "createdAt": message.created_at,
        "expiresAt": message.expires_at,
    }


def message_from_record(raw: Any) -> Optional[Message]:
    if not isinstance(raw, dict):
        return None
    message_id = raw.get("id")
    if not isinstance(message_id, str) or not message_id:
        return None

    version = _int(raw.get("version", raw.get("ver")))
    created_at = _int(raw.get("createdAt", raw.get("timestamp")))
    if "expiresAt" in raw:
        expires_at = _int(raw["expiresAt"])
    else:
        expires_at = created_at + config.MESSAGE_TTL_MS
    return Message(id=message_id, version=version, created_at=created_at, expires_at=expires_at)


def session_to_record(session: RelaySession) -> Dict[str, Any]:
    return {
        "schemaVersion": SCHEMA_VERSION,
        "session": session.key,
        "active": session.active,
        "lastUpdate": session.last_update,
        "lastVersion": session.last_version,
        "updatedAt": session.updated_at,
        "messages": [message_to_record(m) for m in session.messages],
    }


def session_from_record(key: str, raw: Any) -> RelaySession:
    """Build a session from whatever was stored under ``key``.

    Absent or unreadable fields fall back to the zero value: inactive,
    empty queue, version 0.
    """
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning("Discarding unreadable session record: session=%s", key)
        return RelaySession(key=key)

    messages = []
    raw_messages = raw.get("messages")
    if isinstance(raw_messages, list):
        for item in raw_messages:
            message = message_from_record(item)
            if message is None:
                logger.warning("Dropping malformed stored message: session=%s", key)
                continue
            messages.append(message)

    highest = max((m.version for m in messages), default=0)
    last_version = max(_int(raw.get("lastVersion")), highest)

    active = raw.get("active")
    return RelaySession(
        key=key,
        active=active if isinstance(active, bool) else False,
        last_update=_int(raw.get("lastUpdate")),
        messages=messages,
        last_version=last_version,
        updated_at=_int(raw.get("updatedAt")),
    )


def viewer_to_record(viewer: Viewer) -> Dict[str, Any]:
    return viewer.to_public()


def viewer_from_record(raw: Any) -> Optional[Viewer]:
    if not isinstance(raw, dict):
        return None
    device_id = raw.get("deviceId")
    operator_name = raw.get("operatorName")
    operator_id = _int(raw.get("operatorId"))
    if not isinstance(device_id, str) or not device_id or not isinstance(operator_name, str):
        return None
    if operator_id <= 0:
        return None
    return Viewer(
        device_id=device_id,
        operator_name=operator_name,
        operator_id=operator_id,
        last_seen=_int(raw.get("lastSeen", raw.get("timestamp"))),
    )


def viewers_from_record(raw: Any) -> List[Viewer]:
    if not isinstance(raw, list):
        return []
    return [v for v in (viewer_from_record(item) for item in raw) if v is not None]
