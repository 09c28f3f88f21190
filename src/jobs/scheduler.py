"""Background loop that triggers the daily report at a local wall-clock time."""

from __future__ import annotations

import asyncio
import datetime

import structlog

from src.jobs.daily_report import ClockFn, DailyReportJob, local_now
from src.jobs.exceptions import AlreadyRunningError

logger = structlog.get_logger(__name__)

# A tick later than this after the scheduled time no longer fires that day.
_FIRE_GRACE = datetime.timedelta(hours=1)


class DailyReportScheduler:
    """Fires ``job.trigger()`` once per day at ``hour:minute`` local time.

    Usage::

        scheduler = DailyReportScheduler(job=job, hour=0, minute=5)
        await scheduler.start()
        # ...
        await scheduler.stop()
    """

    def __init__(
        self,
        job: DailyReportJob,
        hour: int = 0,
        minute: int = 5,
        check_interval_secs: float = 30.0,
        clock: ClockFn = local_now,
    ) -> None:
        self._job = job
        self._at = datetime.time(hour=hour, minute=minute)
        self._check_interval_secs = check_interval_secs
        self._clock = clock
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._last_fired_date: datetime.date | None = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def last_fired_date(self) -> datetime.date | None:
        return self._last_fired_date

    def next_run_at(self, now: datetime.datetime | None = None) -> datetime.datetime:
        current = now or self._clock()
        candidate = current.replace(
            hour=self._at.hour, minute=self._at.minute, second=0, microsecond=0,
        )
        if candidate <= current or self._last_fired_date == current.date():
            candidate += datetime.timedelta(days=1)
        return candidate

    def is_due(self, now: datetime.datetime) -> bool:
        """Whether a tick at *now* should fire today's run."""
        if self._last_fired_date == now.date():
            return False
        scheduled = now.replace(
            hour=self._at.hour, minute=self._at.minute, second=0, microsecond=0,
        )
        return scheduled <= now < scheduled + _FIRE_GRACE

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "scheduler_started",
            at=self._at.strftime("%H:%M"),
            next_run_at=self.next_run_at().isoformat(),
        )

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def tick(self) -> None:
        """One scheduler check; triggers the job when due."""
        now = self._clock()
        if not self.is_due(now):
            return
        self._last_fired_date = now.date()
        try:
            await self._job.trigger()
        except AlreadyRunningError:
            logger.info("scheduled_run_skipped", reason="already_running")
        except Exception:
            # Already reported by the job; the next day's tick runs normally.
            logger.warning("scheduled_run_failed")

    # ── Internal loop ───────────────────────────────────────────

    async def _loop(self) -> None:
        while self._running:
            try:
                await self.tick()
            except asyncio.CancelledError:
                return
            except Exception:
                logger.exception("scheduler_loop_error")
            await asyncio.sleep(self._check_interval_secs)
