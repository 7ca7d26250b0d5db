# bshop/scheduler.py

import asyncio
import logging

from .store import BookingStore

logger = logging.getLogger(__name__)


def run_sweep(store: BookingStore) -> int:
    count = store.sweep_completions()
    if count:
        logger.info("Auto-completed %d appointment(s)", count)
    return count


async def run_completion_loop(store: BookingStore, interval_seconds: float) -> None:
    """Poll for confirmed appointments that have ended. Runs until cancelled."""
    logger.info("Starting completion sweep, every %ss", interval_seconds)
    while True:
        try:
            # the store lock and snapshot write block, keep them off the loop
            await asyncio.to_thread(run_sweep, store)
        except Exception:
            logger.exception("Completion sweep failed")
        await asyncio.sleep(interval_seconds)
