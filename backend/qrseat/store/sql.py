import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import Base, make_engine, make_session_factory
from ..exceptions import StorageError
from ..models import RelaySessionRow, ViewerRow
from ..records import (
    SCHEMA_VERSION,
    RelaySession,
    Viewer,
    message_to_record,
    session_from_record,
)
from .base import SessionStore

logger = logging.getLogger(__name__)


def _row_to_record(row: RelaySessionRow) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "schemaVersion": row.schema_version,
        "session": row.key,
        "lastUpdate": row.last_update,
        "lastVersion": row.last_version,
        "updatedAt": row.updated_at,
    }
    if row.active is not None:
        record["active"] = bool(row.active)
    if row.messages:
        try:
            record["messages"] = json.loads(row.messages)
        except ValueError:
            logger.warning("Unreadable message column, treating queue as empty: session=%s", row.key)
    return record


class SqlSessionStore(SessionStore):
    """One ``relay_sessions`` row per session, one ``viewers`` row per device."""

    name = "sql"

    def __init__(self, url: str):
        self._engine = make_engine(url)
        self._factory = make_session_factory(self._engine)
        with self._guard("create tables"):
            Base.metadata.create_all(bind=self._engine)

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            raise StorageError(f"Database failed to {action}") from exc

    @contextmanager
    def _db(self, action: str) -> Iterator[Session]:
        with self._guard(action):
            with self._factory() as db:
                with db.begin():
                    yield db

    def get(self, key: str) -> RelaySession:
        with self._db("load session") as db:
            row: Optional[RelaySessionRow] = db.get(RelaySessionRow, key)
            raw = _row_to_record(row) if row is not None else None
        return session_from_record(key, raw)

    def put(self, key: str, session: RelaySession) -> None:
        row = RelaySessionRow(
            key=key,
            schema_version=SCHEMA_VERSION,
            active=session.active,
            last_update=session.last_update,
            last_version=session.last_version,
            messages=json.dumps([message_to_record(m) for m in session.messages]),
            updated_at=session.updated_at,
        )
        with self._db("save session") as db:
            db.merge(row)

    def _stale(self, cutoff: int):
        return or_(RelaySessionRow.updated_at < cutoff, RelaySessionRow.updated_at.is_(None))

    def stale_keys(self, cutoff: int) -> List[str]:
        with self._db("list stale sessions") as db:
            return list(db.scalars(select(RelaySessionRow.key).where(self._stale(cutoff))))

    def delete_if_stale(self, key: str, cutoff: int) -> bool:
        with self._db("delete session") as db:
            result = db.execute(
                delete(RelaySessionRow).where(RelaySessionRow.key == key, self._stale(cutoff))
            )
            return result.rowcount > 0

    def load_viewers(self) -> List[Viewer]:
        with self._db("load viewers") as db:
            rows = db.scalars(select(ViewerRow)).all()
            return [
                Viewer(
                    device_id=r.device_id,
                    operator_name=r.operator_name,
                    operator_id=r.operator_id,
                    last_seen=r.last_seen,
                )
                for r in rows
            ]

    def save_viewers(self, viewers: List[Viewer]) -> None:
        with self._db("save viewers") as db:
            db.execute(delete(ViewerRow))
            db.add_all(
                ViewerRow(
                    device_id=v.device_id,
                    operator_name=v.operator_name,
                    operator_id=v.operator_id,
                    last_seen=v.last_seen,
                )
                for v in viewers
            )

    def close(self) -> None:
        self._engine.dispose()
