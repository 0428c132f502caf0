"""
Periodic maintenance jobs using APScheduler.
"""

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from review_assistant.ratelimit.limiter import RateLimiter

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "rate_limit_sweep"


class SweepScheduler:
    """
    Runs the rate limiter's expired-entry sweep on a fixed interval.

    Lifecycle:
        scheduler = SweepScheduler(limiter, interval_seconds=60)
        scheduler.start()      # inside a running event loop
        ...
        scheduler.shutdown()
    """

    def __init__(self, limiter: RateLimiter, interval_seconds: int = 60):
        self._limiter = limiter
        self._interval_seconds = interval_seconds
        self.scheduler: Optional[AsyncIOScheduler] = None

    @property
    def running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running

    def start(self) -> None:
        """Create the scheduler and register the sweep job."""
        if self.running:
            logger.warning("Sweep scheduler already running")
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            func=self._limiter.sweep,
            trigger=IntervalTrigger(seconds=self._interval_seconds),
            id=SWEEP_JOB_ID,
            name="Sweep expired rate-limit entries",
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(
            "Rate-limit sweep scheduled every %d seconds", self._interval_seconds
        )

    def shutdown(self) -> None:
        """Stop the scheduler. Safe to call when it was never started."""
        if self.scheduler is None:
            return
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Sweep scheduler shut down")
        self.scheduler = None
