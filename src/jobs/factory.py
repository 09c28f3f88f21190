"""Convenience factory for wiring the daily report stack."""

from __future__ import annotations

from src.core.config import Settings
from src.delivery.mailer import SmtpMailer
from src.jobs.daily_report import DailyReportJob
from src.jobs.scheduler import DailyReportScheduler
from src.mailbox.mailpit import MailpitSource
from src.summary.gemini import GeminiClient
from src.summary.summarizer import Summarizer


class JobStack:
    """The wired components plus the resources they own."""

    def __init__(
        self,
        job: DailyReportJob,
        scheduler: DailyReportScheduler | None,
        source: MailpitSource,
        gemini: GeminiClient,
        mailer: SmtpMailer,
    ) -> None:
        self.job = job
        self.scheduler = scheduler
        self.source = source
        self.gemini = gemini
        self.mailer = mailer

    async def connect(self) -> None:
        await self.source.connect()

    async def close(self) -> None:
        if self.scheduler is not None:
            await self.scheduler.stop()
        await self.source.close()
        await self.gemini.close()
        await self.mailer.close()


def create_job_stack(settings: Settings) -> JobStack:
    """Build source, summarizer, mailer, job and (if enabled) scheduler.

    The returned stack is not connected; call ``connect()`` before
    triggering a run.
    """
    source = MailpitSource(settings.mailbox)
    gemini = GeminiClient(settings.gemini)
    summarizer = Summarizer(
        generator=gemini,
        body_char_limit=settings.gemini.body_char_limit,
    )
    mailer = SmtpMailer(settings.smtp)

    job = DailyReportJob(
        source=source,
        summarizer=summarizer,
        mailer=mailer,
        window_policy=settings.schedule.window_policy,
    )

    scheduler: DailyReportScheduler | None = None
    if settings.schedule.enabled:
        scheduler = DailyReportScheduler(
            job=job,
            hour=settings.schedule.hour,
            minute=settings.schedule.minute,
            check_interval_secs=settings.schedule.check_interval_secs,
        )

    return JobStack(
        job=job,
        scheduler=scheduler,
        source=source,
        gemini=gemini,
        mailer=mailer,
    )
