"""Session Store contract shared by every backend."""
from abc import ABC, abstractmethod
from typing import List

from ..records import RelaySession, Viewer


class SessionStore(ABC):
    """Keyed read/modify/write access to session records.

    ``get`` never fails for a missing key; it hands back a zero-value
    session instead. ``put`` replaces the whole record in one step so a
    concurrent ``get`` sees either the old record or the new one.
    Serialising read-modify-write cycles on one key is the caller's job.
    """

    name = "base"

    @abstractmethod
    def get(self, key: str) -> RelaySession:
        ...

    @abstractmethod
    def put(self, key: str, session: RelaySession) -> None:
        ...

    @abstractmethod
    def stale_keys(self, cutoff: int) -> List[str]:
        """Keys whose record was last persisted before ``cutoff``."""

    @abstractmethod
    def delete_if_stale(self, key: str, cutoff: int) -> bool:
        """Delete ``key`` only if it is still older than ``cutoff``."""

    @abstractmethod
    def load_viewers(self) -> List[Viewer]:
        ...

    @abstractmethod
    def save_viewers(self, viewers: List[Viewer]) -> None:
        ...

    def close(self) -> None:
        pass
