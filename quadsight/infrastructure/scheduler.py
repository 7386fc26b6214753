"""
APScheduler runner for periodic store eviction.

Design:
- Started explicitly from the FastAPI lifespan, never at import time.
- Returns the scheduler so the caller owns shutdown.
- Accepts any store implementing evict_older_than for testability.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from quadsight.ports.interfaces import AnalysisStorePort

logger = logging.getLogger(__name__)

EVICTION_JOB_ID = "store_eviction"


def run_eviction(stores: Iterable[AnalysisStorePort], max_age: timedelta) -> int:
    """Run one eviction sweep over all stores; returns the number of evicted entries."""
    total = 0
    for store in stores:
        try:
            total += store.evict_older_than(max_age)
        except Exception as e:
            logger.error(f"[Scheduler] eviction failed for {type(store).__name__}: {e}", exc_info=True)
    if total:
        logger.info(f"[Scheduler] evicted {total} entries older than {max_age}.")
    return total


def start_eviction_scheduler(
    stores: Iterable[AnalysisStorePort],
    *,
    max_age: timedelta = timedelta(days=7),
    interval_minutes: float = 60.0,
    enabled: bool = True,
) -> Optional[BackgroundScheduler]:
    """
    Start background scheduler for store eviction.

    Args:
        stores: stores to sweep on every tick.
        max_age: entries older than this are evicted.
        interval_minutes: interval minutes between sweeps.
        enabled: toggle; if False, returns None.

    Returns:
        the running scheduler; call ``scheduler.shutdown()`` to cancel it.
    """
    if not enabled:
        logger.info("[Scheduler] store eviction disabled (env).")
        return None

    stores = list(stores)
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_eviction,
        trigger=IntervalTrigger(minutes=interval_minutes),
        args=(stores, max_age),
        id=EVICTION_JOB_ID,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(f"[Scheduler] store eviction started: every {interval_minutes} min, max age {max_age}.")
    return scheduler
