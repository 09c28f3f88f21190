#!/usr/bin/env python3
"""Daily alert digest entrypoint — runs the scheduler or a single manual run.

Usage::

    # Run the scheduler until interrupted
    python scripts/run.py

    # One manual run for the policy default day, then exit
    python scripts/run.py --once

    # One manual run for a specific day
    python scripts/run.py --once --date 2026-10-18

    # Build yesterday's report and print it as HTML without sending it
    python scripts/run.py --preview --date 2026-10-18 > report.html

    # Same, as JSON
    python scripts/run.py --preview --format json

    # Send a test email and exit
    python scripts/run.py --test-email
"""

from __future__ import annotations

import argparse
import asyncio
import datetime
import json
import signal
import sys

import structlog

from src.core.config import load_settings
from src.core.logging import setup_logging
from src.delivery.exceptions import DeliveryFailedError
from src.delivery.renderer import render_report_html
from src.jobs.daily_report import DailyReportJob
from src.jobs.factory import JobStack, create_job_stack

logger = structlog.get_logger(__name__)


async def _run_once(stack: JobStack, target_date: datetime.date | None) -> int:
    try:
        result = await stack.job.run_manual(target_date)
    except Exception:
        # Logged and notified by the job.
        return 1
    print(result.model_dump_json(indent=2))
    return 0


async def _preview(job: DailyReportJob, target_date: datetime.date | None, fmt: str) -> str:
    """Rendered report for one day; nothing is sent."""
    report_date, report, alerts = await job.preview(target_date)
    if fmt == "json":
        payload = {
            "date": report_date.isoformat(),
            "alert_count": len(alerts),
            "report": report.model_dump(mode="json"),
            "alerts": [a.model_dump(mode="json", by_alias=True) for a in alerts],
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)
    return render_report_html(report, alerts, report_date)


async def _run_forever(stack: JobStack) -> int:
    if stack.scheduler is None:
        logger.error("scheduler_disabled")
        print(
            "Scheduling is disabled (schedule.enabled: false). Use --once instead.",
            file=sys.stderr,
        )
        return 1

    await stack.scheduler.start()
    logger.info("digest_running", next_run_at=stack.scheduler.next_run_at().isoformat())

    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass

    try:
        await stop_event.wait()
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")

    logger.info("digest_shutting_down", status=stack.job.status())
    return 0


async def run(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    missing = settings.missing_required()
    if missing and not (args.once or args.preview):
        logger.error("missing_required_settings", missing=missing)
        print(f"Missing required settings: {', '.join(missing)}", file=sys.stderr)
        return 1

    stack = create_job_stack(settings)
    try:
        if args.preview:
            await stack.connect()
            try:
                print(await _preview(stack.job, args.date, args.format))
            except Exception:
                logger.exception("report_preview_failed")
                return 1
            return 0

        if args.test_email:
            try:
                await stack.mailer.send_test_email()
            except DeliveryFailedError as exc:
                print(f"Test email failed: {exc}", file=sys.stderr)
                return 1
            return 0

        if not await stack.mailer.verify_connection():
            logger.warning("smtp_unreachable", host=settings.smtp.host)

        await stack.connect()
        logger.info(
            "digest_starting",
            mailbox=settings.mailbox.base_url,
            model=settings.gemini.model,
            schedule=f"{settings.schedule.hour:02d}:{settings.schedule.minute:02d}",
            window_policy=settings.schedule.window_policy,
        )

        if args.once:
            return await _run_once(stack, args.date)
        return await _run_forever(stack)
    finally:
        await stack.close()


def _parse_date(value: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from exc


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Summarize alert emails from Mailpit into a daily report.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run the report once and exit instead of scheduling",
    )
    parser.add_argument(
        "--date",
        type=_parse_date,
        default=None,
        help="Report day for --once or --preview (YYYY-MM-DD); defaults to the window policy",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Build the report and print it to stdout without sending",
    )
    parser.add_argument(
        "--format",
        choices=("html", "json"),
        default="html",
        help="Output format for --preview (default: html)",
    )
    parser.add_argument(
        "--test-email",
        action="store_true",
        help="Send a test email and exit",
    )
    args = parser.parse_args()
    if args.once and args.preview:
        parser.error("--once and --preview are mutually exclusive")
    if args.date is not None and not (args.once or args.preview):
        parser.error("--date requires --once or --preview")

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
