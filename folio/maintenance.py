# folio/maintenance.py
# Purpose: Periodically drop quotes older than the retention window.
# Notes: Runs on an APScheduler worker thread, outside the request path.

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from apscheduler.schedulers.background import BackgroundScheduler

from folio.cache import QuoteCache
from folio.observability import CACHE_ENTRIES, CACHE_EVICTIONS
from folio.utils import utc_now

logger = logging.getLogger(__name__)

RETENTION = timedelta(hours=24)
SWEEP_JOB_ID = "quote_cache_sweep"


def sweep(cache: QuoteCache, now: datetime, retention: timedelta = RETENTION) -> int:
    """Remove every entry with now - fetched_at >= retention."""
    # fetched_at <= now - retention  <=>  fetched_at < cutoff, with cutoff nudged by 1us
    cutoff = now - retention + timedelta(microseconds=1)
    removed = cache.evict_older_than(cutoff)
    CACHE_EVICTIONS.labels(reason="sweep").inc(removed)
    CACHE_ENTRIES.set(cache.size())
    return removed


class CacheSweeper:
    def __init__(
        self,
        cache: QuoteCache,
        retention: timedelta = RETENTION,
        interval: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = utc_now,
    ):
        self.cache = cache
        self.retention = retention
        self.interval = interval
        self.clock = clock
        self._scheduler: BackgroundScheduler | None = None

    def run_once(self) -> int:
        """One sweep at clock(). Never raises: a failed sweep is logged and reported as 0."""
        try:
            removed = sweep(self.cache, self.clock(), self.retention)
        except Exception:
            logger.exception("quote cache sweep failed")
            return 0
        logger.info(
            f"quote cache sweep removed {removed} entries, {self.cache.size()} remain"
        )
        return removed

    def start(self) -> None:
        if self._scheduler is not None:
            return
        self._scheduler = BackgroundScheduler(timezone="UTC")
        self._scheduler.add_job(
            self.run_once,
            trigger="interval",
            seconds=int(self.interval.total_seconds()),
            id=SWEEP_JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self._scheduler.start()
        logger.info(f"quote cache sweeper started (every {self.interval})")

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running
