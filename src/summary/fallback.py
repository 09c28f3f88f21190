"""Deterministic reports computed from the alert list alone.

Used when the generative summarizer is unavailable (fallback tier) and when
the window holds no alerts (empty tier). Nothing here performs I/O.
"""

from __future__ import annotations

import datetime
from collections import Counter
from collections.abc import Sequence

from pydantic import BaseModel

from src.core.types import Alert

TOP_SUBJECTS = 5


class AlertStats(BaseModel):
    """Aggregate counts over one window's alerts."""

    total: int = 0
    by_source: dict[str, int] = {}
    by_severity: dict[str, int] = {}
    earliest: datetime.datetime | None = None
    latest: datetime.datetime | None = None
    top_subjects: list[tuple[str, int]] = []


def compute_stats(alerts: Sequence[Alert], top_n: int = TOP_SUBJECTS) -> AlertStats:
    """Counts by source and severity, date span, and the most frequent subjects.

    Dict keys keep first-seen order. Subjects are ranked by count; equal
    counts keep first-seen order.
    """
    by_source: Counter[str] = Counter()
    by_severity: Counter[str] = Counter()
    subjects: Counter[str] = Counter()
    for alert in alerts:
        by_source[alert.source.value] += 1
        by_severity[alert.severity.value] += 1
        subjects[alert.subject] += 1

    # Counter.most_common is stable for equal counts (insertion order).
    top = subjects.most_common(top_n)

    dates = [a.date for a in alerts]
    return AlertStats(
        total=len(alerts),
        by_source=dict(by_source),
        by_severity=dict(by_severity),
        earliest=min(dates) if dates else None,
        latest=max(dates) if dates else None,
        top_subjects=top,
    )


def _fmt_date(ts: datetime.datetime | None) -> str:
    if ts is None:
        return "N/A"
    return ts.astimezone().strftime("%a %b %d %Y %H:%M")


def render_fallback(alerts: Sequence[Alert]) -> str:
    stats = compute_stats(alerts)

    lines = [
        "# Daily Alert Summary (Fallback Report)",
        "",
        "_AI summarization is temporarily unavailable. Showing basic statistics._",
        "",
        "## Overview",
        f"- **Total Alerts:** {stats.total}",
        f"- **Unique Sources:** {len(stats.by_source)}",
        f"- **Earliest Alert:** {_fmt_date(stats.earliest)}",
        f"- **Latest Alert:** {_fmt_date(stats.latest)}",
        "",
        "## Alerts by Source",
        *(f"- **{source}:** {count}" for source, count in stats.by_source.items()),
        "",
        "## Alerts by Severity",
        *(f"- **{severity}:** {count}" for severity, count in stats.by_severity.items()),
        "",
        "## Top Alert Subjects",
        *(f"- {subject} ({count}x)" for subject, count in stats.top_subjects),
        "",
        "## Recommendations",
        "- Review high-frequency alerts for automation opportunities",
        "- Check whether any P1 alerts still need attention",
        "- Consider alert fatigue reduction for noisy sources",
    ]
    return "\n".join(lines) + "\n"


def render_empty() -> str:
    return (
        "# Daily Alert Summary\n"
        "\n"
        "## Overview\n"
        "- **Total Alerts:** 0\n"
        "- **Status:** No alerts received during the reporting period\n"
        "\n"
        "## Summary\n"
        "No monitoring alerts arrived in this window. This can mean the systems\n"
        "were stable, but also that a monitor or the alert routing is broken.\n"
        "\n"
        "## Recommendations\n"
        "- Verify the monitoring systems are operational\n"
        "- Check alert routing into the mailbox\n"
        "- Review alert thresholds if the silence is unexpected\n"
    )
