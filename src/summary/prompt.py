"""Prompt construction for the daily narrative."""

from __future__ import annotations

import json
from collections.abc import Sequence

from src.core.types import Alert

DEFAULT_BODY_CHAR_LIMIT = 500

_INSTRUCTIONS = """\
You are reviewing one day of DevOps alert emails. Write a daily risk report
for engineering management.

Cover, in this order:

1. Executive summary: alert count, time range, overall health, immediate actions.
2. Critical issues (P1): each alert, business impact, urgency, required action.
3. High-priority issues (P2): grouped by affected service, escalation risk,
   recommended response time.
4. Trends: recurring alerts and systems that are degrading.
5. Source breakdown: which monitoring systems (Grafana, Kibana, Jenkins, ...)
   produce the most alerts, and any apparent coverage gaps.
6. Recommendations: next hour, next four hours, next week, alert tuning.
7. Risk assessment: a stability score from 1 to 10 and the highest-risk areas.

Format as Markdown with headings, bullet lists and tables for counts.
Judge criticality by customer and revenue impact, not only technical severity.
"""


def project_alert(alert: Alert, body_char_limit: int = DEFAULT_BODY_CHAR_LIMIT) -> dict[str, str]:
    """The bounded view of an alert that is sent to the model."""
    return {
        "subject": alert.subject,
        "source": alert.source.value,
        "severity": alert.severity.value,
        "date": alert.date.isoformat(),
        "body": alert.body[:body_char_limit],
    }


def build_prompt(
    alerts: Sequence[Alert],
    body_char_limit: int = DEFAULT_BODY_CHAR_LIMIT,
) -> str:
    data = [project_alert(a, body_char_limit) for a in alerts]
    return (
        f"{_INSTRUCTIONS}\n"
        f"ALERTS ({len(data)}):\n"
        f"{json.dumps(data, indent=2, ensure_ascii=False)}\n"
    )
