"""Scheduler manager for background jobs."""

import logging
from typing import Any, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from teebox.scheduler.jobs import JobType, settle_completed_job

logger = logging.getLogger(__name__)


class SchedulerManager:
    """Manages background job scheduling."""

    def __init__(self, timezone: str = "UTC"):
        self.timezone = timezone
        self.scheduler = AsyncIOScheduler(timezone=timezone)
        self._started = False

    @property
    def running(self) -> bool:
        return self._started

    async def start(self) -> None:
        """Start the scheduler."""
        if not self._started:
            self.scheduler.start()
            self._started = True
            logger.info("Scheduler started")

    async def stop(self) -> None:
        """Stop the scheduler."""
        if self._started:
            self.scheduler.shutdown(wait=True)
            self._started = False
            logger.info("Scheduler stopped")

    def add_job(
        self,
        job_id: str,
        func: Callable,
        trigger_type: str = "interval",
        args: Optional[list] = None,
        **trigger_kwargs
    ) -> None:
        """Add a job to the scheduler.

        Args:
            job_id: Unique identifier for the job
            func: The async function to run
            trigger_type: One of 'interval', 'cron', 'date'
            args: Positional arguments passed to ``func``
            **trigger_kwargs: Arguments for the trigger
        """
        if trigger_type == "interval":
            trigger = IntervalTrigger(**trigger_kwargs)
        elif trigger_type == "cron":
            trigger_kwargs.setdefault("timezone", self.timezone)
            trigger = CronTrigger(**trigger_kwargs)
        elif trigger_type == "date":
            trigger_kwargs.setdefault("timezone", self.timezone)
            trigger = DateTrigger(**trigger_kwargs)
        else:
            raise ValueError(f"Unknown trigger type: {trigger_type}")

        self.scheduler.add_job(
            func,
            trigger,
            id=job_id,
            args=args or [],
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=60,
        )
        logger.info(f"Added job: {job_id} with {trigger_type} trigger")

    def remove_job(self, job_id: str) -> None:
        """Remove a job from the scheduler."""
        try:
            self.scheduler.remove_job(job_id)
            logger.info(f"Removed job: {job_id}")
        except Exception as e:
            logger.warning(f"Could not remove job {job_id}: {e}")

    def get_job(self, job_id: str) -> Optional[Any]:
        """Get a job by ID."""
        return self.scheduler.get_job(job_id)

    def get_jobs(self) -> list:
        """Get all scheduled jobs."""
        return self.scheduler.get_jobs()

    def setup_settlement_job(self, service, interval_minutes: int, days_back: Optional[int] = None) -> None:
        """Run completed-tournament settlement every ``interval_minutes``.

        ``max_instances=1`` keeps runs for the same events from overlapping.
        """
        self.add_job(
            JobType.SETTLE_COMPLETED.value,
            settle_completed_job,
            trigger_type="interval",
            args=[service, days_back],
            minutes=interval_minutes,
        )
        logger.info(f"Settlement job scheduled every {interval_minutes} minutes")
