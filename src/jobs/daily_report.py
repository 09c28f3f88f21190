"""Daily report job — fetch, classify, summarize, deliver, one run at a time."""

from __future__ import annotations

import datetime
import time
import uuid
from collections.abc import Callable
from typing import Any, Literal

import structlog

from src.classify.classifier import classify_all
from src.core.logging import run_context
from src.core.types import Alert, RawMessage, Report, RunResult
from src.delivery.mailer import ReportMailer
from src.jobs.exceptions import AlreadyRunningError
from src.mailbox.base import MessageSource
from src.mailbox.window import TimeWindow, day_window
from src.summary.summarizer import Summarizer

logger = structlog.get_logger(__name__)

WindowPolicy = Literal["previous", "current"]

# Returns the current local time; injectable for tests.
ClockFn = Callable[[], datetime.datetime]


def local_now() -> datetime.datetime:
    return datetime.datetime.now().astimezone()


class DailyReportJob:
    """Runs the report pipeline with a single-flight guard.

    The scheduler and manual triggers must share one instance: while a run
    is in progress every other ``trigger()`` is rejected with
    AlreadyRunningError (not queued). A failed run sends a best-effort error
    notification, re-raises, and always leaves the job idle.

    Usage::

        job = DailyReportJob(source=source, summarizer=summarizer, mailer=mailer)
        result = await job.trigger()                        # policy default day
        result = await job.trigger(datetime.date(2026, 10, 1))
    """

    def __init__(
        self,
        source: MessageSource,
        summarizer: Summarizer,
        mailer: ReportMailer,
        window_policy: WindowPolicy = "previous",
        clock: ClockFn = local_now,
    ) -> None:
        self._source = source
        self._summarizer = summarizer
        self._mailer = mailer
        self._window_policy = window_policy
        self._clock = clock
        self._running = False
        self._last_started_at: datetime.datetime | None = None
        self._last_finished_at: datetime.datetime | None = None
        self._last_result: RunResult | None = None
        self._last_error: str | None = None

    # ── Properties ──────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._running

    @property
    def last_result(self) -> RunResult | None:
        return self._last_result

    @property
    def window_policy(self) -> WindowPolicy:
        return self._window_policy

    def default_report_date(self) -> datetime.date:
        """Day covered by a trigger without an explicit date."""
        today = self._clock().date()
        if self._window_policy == "previous":
            return today - datetime.timedelta(days=1)
        return today

    def status(self) -> dict[str, Any]:
        return {
            "running": self._running,
            "window_policy": self._window_policy,
            "last_started_at": self._last_started_at.isoformat() if self._last_started_at else None,
            "last_finished_at": (
                self._last_finished_at.isoformat() if self._last_finished_at else None
            ),
            "last_error": self._last_error,
            "last_result": self._last_result.model_dump(mode="json") if self._last_result else None,
        }

    # ── Triggers ────────────────────────────────────────────────

    async def trigger(self, target_date: datetime.date | None = None) -> RunResult:
        """Run the pipeline for *target_date* (or the policy default day).

        Raises:
            AlreadyRunningError: a run is already in progress.
            Exception: whatever aborted the run, after the error notification.
        """
        # Check-and-set has no await in between, so it is atomic on the loop.
        if self._running:
            logger.warning("daily_report_rejected", reason="already_running")
            raise AlreadyRunningError("Daily report job is already running")
        self._running = True
        try:
            report_date = target_date or self.default_report_date()
            self._last_started_at = self._clock()
            with run_context(run_id=uuid.uuid4().hex[:12], report_date=report_date.isoformat()):
                try:
                    result = await self._run(report_date)
                except Exception as exc:
                    self._last_error = f"{type(exc).__name__}: {exc}"
                    logger.exception("daily_report_failed")
                    await self._notify_failure(exc)
                    raise
            self._last_result = result
            self._last_error = None
            return result
        finally:
            self._last_finished_at = self._clock()
            self._running = False

    async def run_manual(self, target_date: datetime.date | None = None) -> RunResult:
        """Manual entry point; shares the guard with scheduled runs."""
        return await self.trigger(target_date)

    async def preview(
        self, target_date: datetime.date | None = None
    ) -> tuple[datetime.date, Report, list[Alert]]:
        """Build the report for *target_date* without sending it.

        Does not take the single-flight guard and sends no error
        notification; failures propagate to the caller.
        """
        report_date = target_date or self.default_report_date()
        with run_context(run_id=uuid.uuid4().hex[:12], report_date=report_date.isoformat()):
            window = day_window(report_date)
            logger.info("report_preview_started", window=window.describe())
            _, alerts, report = await self._build(window)
            logger.info("report_preview_built", tier=report.tier, alerts=len(alerts))
        return report_date, report, alerts

    # ── Pipeline ────────────────────────────────────────────────

    async def _run(self, report_date: datetime.date) -> RunResult:
        started = time.monotonic()
        window = day_window(report_date)
        logger.info("daily_report_started", window=window.describe())

        messages, alerts, report = await self._build(window)
        await self._mailer.send_report(report, alerts, report_date)

        duration = time.monotonic() - started
        logger.info(
            "daily_report_completed",
            tier=report.tier,
            alerts=len(alerts),
            duration_secs=round(duration, 3),
        )
        return RunResult(
            report_date=report_date,
            alerts_processed=len(alerts),
            messages_fetched=len(messages),
            tier=report.tier,
            duration_secs=duration,
        )

    async def _build(self, window: TimeWindow) -> tuple[list[RawMessage], list[Alert], Report]:
        """Fetch, classify and summarize one window."""
        messages = await self._source.fetch(window)
        alerts = classify_all(messages)
        logger.info(
            "daily_report_classified",
            messages=len(messages),
            alerts=len(alerts),
        )
        for alert in alerts:
            logger.debug(
                "alert_classified",
                subject=alert.subject,
                source=alert.source.value,
                severity=alert.severity.value,
                date=alert.date.isoformat(),
            )

        report = await self._summarizer.summarize(alerts)
        return messages, alerts, report

    async def _notify_failure(self, error: BaseException) -> None:
        """Best effort; a failure here is logged and never replaces *error*."""
        try:
            await self._mailer.send_error_notification(error)
        except Exception:
            logger.exception("error_notification_failed")
