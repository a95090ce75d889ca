import pytest
from fastapi.testclient import TestClient

from qrseat.main import create_app
from qrseat.relay import RelayService
from qrseat.store import MemorySessionStore

T0 = 1_700_000_000_000


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = T0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemorySessionStore()


@pytest.fixture
def relay(store, clock):
    return RelayService(store, clock=clock)


@pytest.fixture
def client(relay):
    app = create_app(relay=relay, cleanup=False)
    with TestClient(app) as c:
        yield c
