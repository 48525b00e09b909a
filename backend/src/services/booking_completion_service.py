"""
Booking completion scheduler.

Runs hourly and moves bookings whose slot has ended from "booked" to
"completed". Nothing else transitions a booking to completed.
"""

import asyncio
import logging
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler  # type: ignore
from apscheduler.triggers.cron import CronTrigger  # type: ignore

from core.constants import BOOKING_COMPLETION_SCHEDULER_MAX_INSTANCES
from core.database import get_db_context
from services.booking_service import BookingService
from utils.datetime_utils import LOCAL_TZ

logger = logging.getLogger(__name__)

# Global singleton instance
_booking_completion_scheduler: Optional['BookingCompletionScheduler'] = None


class BookingCompletionScheduler:
    """
    Scheduler that completes past bookings.

    Note: Database sessions are created fresh for each scheduler run
    to avoid stale session issues.
    """

    def __init__(self):
        self.scheduler = AsyncIOScheduler(timezone=LOCAL_TZ)
        self._is_started = False

    @property
    def is_started(self) -> bool:
        return self._is_started

    async def start_scheduler(self) -> None:
        """
        Start the background scheduler.

        This should be called during application startup.
        """
        if self._is_started:
            logger.warning("Booking completion scheduler is already started")
            return

        self.scheduler.add_job(  # type: ignore
            self._run_completion,
            CronTrigger(minute=5),  # Every hour at :05
            id="complete_past_bookings",
            name="Complete past bookings",
            max_instances=BOOKING_COMPLETION_SCHEDULER_MAX_INSTANCES,
            replace_existing=True,
            misfire_grace_time=1800,
        )

        self.scheduler.start()
        self._is_started = True
        logger.info("Booking completion scheduler started (runs hourly)")

    async def stop_scheduler(self) -> None:
        """
        Stop the background scheduler.

        This should be called during application shutdown.
        """
        if self._is_started:
            self.scheduler.shutdown(wait=True)
            self._is_started = False
            logger.info("Booking completion scheduler stopped")

    async def _run_completion(self) -> None:
        # Blocking database work runs in a worker thread
        await asyncio.to_thread(self.complete_past_bookings)

    def complete_past_bookings(self) -> int:
        """Run one completion pass with a fresh session. Returns the number of bookings completed."""
        with get_db_context() as db:
            try:
                return BookingService.complete_past_bookings(db)
            except Exception as e:
                logger.exception(f"Error completing past bookings: {e}")
                db.rollback()
                return 0


def get_booking_completion_scheduler() -> BookingCompletionScheduler:
    """
    Get the global booking completion scheduler instance.

    Returns:
        The global scheduler instance
    """
    global _booking_completion_scheduler
    if _booking_completion_scheduler is None:
        _booking_completion_scheduler = BookingCompletionScheduler()
    return _booking_completion_scheduler


async def start_booking_completion_scheduler() -> None:
    """Start the global booking completion scheduler."""
    await get_booking_completion_scheduler().start_scheduler()


async def stop_booking_completion_scheduler() -> None:
    """Stop the global booking completion scheduler."""
    global _booking_completion_scheduler
    if _booking_completion_scheduler:
        await _booking_completion_scheduler.stop_scheduler()
