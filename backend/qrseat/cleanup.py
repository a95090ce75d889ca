# backend/qrseat/cleanup.py
import asyncio
import logging
from dataclasses import dataclass

from . import config
from .relay import RelayService

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    sessions_deleted: int = 0
    sessions_skipped: int = 0
    viewers_pruned: int = 0


def sweep_once(relay: RelayService, max_age_ms: int = None) -> SweepReport:
    """Delete sessions untouched for ``max_age_ms`` and prune stale viewers.

    Sessions whose lock is held by a request are skipped; the next pass
    picks them up if they are still stale.
    """
    max_age_ms = config.session_max_age_ms() if max_age_ms is None else max_age_ms
    cutoff = relay.clock() - max_age_ms
    report = SweepReport()

    for key in relay.store.stale_keys(cutoff):
        with relay.locks.try_hold(key) as held:
            if not held:
                report.sessions_skipped += 1
                continue
            if relay.store.delete_if_stale(key, cutoff):
                report.sessions_deleted += 1
                logger.info("Cleaned up old session: session=%s", key)

    report.viewers_pruned = relay.viewers.prune()
    return report


async def run_cleanup(relay: RelayService, interval_seconds: int = config.CLEANUP_INTERVAL_SECONDS):
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            report = await asyncio.to_thread(sweep_once, relay)
        except Exception:
            logger.exception("Cleanup error")
            continue
        if report.sessions_deleted or report.viewers_pruned:
            logger.info(
                "Cleanup pass: sessions_deleted=%d sessions_skipped=%d viewers_pruned=%d",
                report.sessions_deleted,
                report.sessions_skipped,
                report.viewers_pruned,
            )
