"""Background job scheduling for Teebox."""

from teebox.scheduler.manager import SchedulerManager
from teebox.scheduler.jobs import JobType, settle_completed_job

__all__ = ["SchedulerManager", "JobType", "settle_completed_job"]
