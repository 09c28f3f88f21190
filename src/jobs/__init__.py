"""Daily report orchestration — single-flight job, scheduler, wiring."""

from src.jobs.daily_report import DailyReportJob
from src.jobs.exceptions import AlreadyRunningError, JobError
from src.jobs.factory import JobStack, create_job_stack
from src.jobs.scheduler import DailyReportScheduler

__all__ = [
    "AlreadyRunningError",
    "DailyReportJob",
    "DailyReportScheduler",
    "JobError",
    "JobStack",
    "create_job_stack",
]
