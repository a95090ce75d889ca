from qrseat.message_queue import dequeue_head, enqueue, find_live, purge_expired
from qrseat.records import RelaySession


def _session_with(*specs):
    session = RelaySession(key="s")
    for message_id, ttl, now in specs:
        enqueue(session, message_id, ttl, now)
    return session


def test_enqueue_assigns_next_version_and_expiry():
    session = RelaySession(key="s", last_version=41)

    message = enqueue(session, "X", 1000, 5000)

    assert message.version == 42
    assert message.created_at == 5000
    assert message.expires_at == 6000
    assert session.last_version == 42
    assert session.messages == [message]


def test_purge_reports_whether_anything_changed():
    session = _session_with(("A", 100, 0), ("B", 500, 0))

    assert purge_expired(session, 50) is False
    assert purge_expired(session, 100) is True
    assert [m.id for m in session.messages] == ["B"]
    assert purge_expired(session, 100) is False


def test_purge_leaves_last_version_alone():
    session = _session_with(("A", 100, 0), ("B", 100, 0))

    purge_expired(session, 1000)

    assert session.messages == []
    assert session.last_version == 2


def test_find_live_ignores_expired_entries():
    session = _session_with(("A", 100, 0))

    assert find_live(session, "A", 99) == 1
    assert find_live(session, "A", 100) is None
    assert find_live(session, "missing", 0) is None


def test_dequeue_head_is_fifo_and_empty_safe():
    session = _session_with(("A", 100, 0), ("B", 100, 0))

    assert dequeue_head(session).id == "A"
    assert dequeue_head(session).id == "B"
    assert dequeue_head(session) is None
    assert session.last_version == 2
