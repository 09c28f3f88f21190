#!/usr/bin/env python3
"""Fetch and classify alerts from Mailpit without sending anything.

Usage::

    python scripts/fetch_alerts.py --today
    python scripts/fetch_alerts.py --yesterday --stats
    python scripts/fetch_alerts.py --recent-hours 2
    python scripts/fetch_alerts.py --start 2026-10-01 --end 2026-10-07 --stats
    python scripts/fetch_alerts.py --today --summarize
"""

from __future__ import annotations

import argparse
import asyncio
import datetime
import json
import sys

import structlog

from src.classify.classifier import classify_all
from src.core.config import load_settings
from src.core.logging import setup_logging
from src.mailbox.exceptions import SourceUnavailableError
from src.mailbox.mailpit import MailpitSource
from src.mailbox.window import (
    TimeWindow,
    range_window,
    recent_window,
    today_window,
    yesterday_window,
)
from src.summary.fallback import compute_stats
from src.summary.gemini import GeminiClient
from src.summary.summarizer import Summarizer

logger = structlog.get_logger(__name__)


def _window(args: argparse.Namespace) -> TimeWindow:
    if args.yesterday:
        return yesterday_window()
    if args.recent_hours is not None:
        return recent_window(args.recent_hours)
    if args.start is not None:
        return range_window(args.start, args.end or args.start)
    return today_window()


async def run(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    setup_logging(level=args.log_level, fmt="console")

    try:
        window = _window(args)
    except ValueError as exc:
        print(f"Invalid window: {exc}", file=sys.stderr)
        return 2

    try:
        async with MailpitSource(settings.mailbox) as source:
            messages = await source.fetch(window)
    except SourceUnavailableError as exc:
        print(f"Mailbox unavailable: {exc}", file=sys.stderr)
        return 1

    alerts = classify_all(messages)
    output: dict[str, object] = {
        "window": window.describe(),
        "count": len(alerts),
        "alerts": [a.model_dump(mode="json", by_alias=True) for a in alerts],
    }
    if args.stats:
        output["stats"] = compute_stats(alerts).model_dump(mode="json")

    if args.summarize:
        gemini = GeminiClient(settings.gemini)
        try:
            summarizer = Summarizer(gemini, settings.gemini.body_char_limit)
            report = await summarizer.summarize(alerts)
        finally:
            await gemini.close()
        output["report"] = report.model_dump(mode="json")

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="List classified alerts from Mailpit.")
    parser.add_argument("--config", default=None, help="Path to settings YAML")
    parser.add_argument("--log-level", default="WARNING", help="Log level override")

    period = parser.add_mutually_exclusive_group()
    period.add_argument("--today", action="store_true", help="Today's alerts (default)")
    period.add_argument("--yesterday", action="store_true", help="Yesterday's alerts")
    period.add_argument("--recent-hours", type=float, default=None, help="Last N hours")
    period.add_argument(
        "--start", type=datetime.date.fromisoformat, default=None,
        help="First day of a range (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--end", type=datetime.date.fromisoformat, default=None,
        help="Last day of a range, inclusive (YYYY-MM-DD); requires --start",
    )
    parser.add_argument("--stats", action="store_true", help="Include counts by source/severity")
    parser.add_argument("--summarize", action="store_true", help="Also generate the report")
    args = parser.parse_args()
    if args.end is not None and args.start is None:
        parser.error("--end requires --start")

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
