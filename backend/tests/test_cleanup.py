import asyncio
from unittest.mock import patch

import pytest

from qrseat import cleanup
from qrseat.cleanup import sweep_once

HOUR = 60 * 60 * 1000


def test_sweep_deletes_only_untouched_sessions(relay, store, clock):
    relay.set_status("old", True)
    clock.advance(25 * HOUR)
    relay.set_status("fresh", True)

    report = sweep_once(relay, max_age_ms=24 * HOUR)

    assert report.sessions_deleted == 1
    assert "old" not in store
    assert "fresh" in store


def test_any_write_keeps_session_alive(relay, store, clock):
    relay.set_status("s", True)
    clock.advance(23 * HOUR)
    relay.send("s", "X", ttl=1000)
    clock.advance(2 * HOUR)

    assert sweep_once(relay, max_age_ms=24 * HOUR).sessions_deleted == 0
    assert "s" in store


def test_sweep_skips_sessions_in_use(relay, store, clock):
    relay.set_status("busy", True)
    clock.advance(25 * HOUR)

    with relay.locks.hold("busy"):
        report = sweep_once(relay, max_age_ms=24 * HOUR)

    assert report.sessions_skipped == 1
    assert report.sessions_deleted == 0
    assert "busy" in store


def test_sweep_prunes_stale_viewers(relay, store, clock):
    relay.viewers.register("d1", "Mario", 2)
    clock.advance(60_000)

    report = sweep_once(relay)

    assert report.viewers_pruned == 1
    assert store.load_viewers() == []


def test_cleanup_loop_survives_sweep_failure(relay):
    calls = []
    sleeps = []

    def flaky(r):
        calls.append(r)
        if len(calls) == 1:
            raise RuntimeError("disk on fire")
        return cleanup.SweepReport()

    async def fake_sleep(seconds):
        sleeps.append(seconds)
        if len(sleeps) > 2:
            raise asyncio.CancelledError

    async def run():
        with patch.object(cleanup, "sweep_once", flaky), patch.object(cleanup.asyncio, "sleep", fake_sleep):
            await cleanup.run_cleanup(relay, interval_seconds=5)

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(run())

    assert len(calls) == 2
    assert sleeps == [5, 5, 5]
