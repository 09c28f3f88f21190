"""Ordered keyword rule tables for severity and source inference.

Rules are evaluated top to bottom and the first match wins, so table order
is the priority order. Matching is case-insensitive substring search.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import NamedTuple, TypeVar

from src.core.types import AlertSeverity, AlertSource

LabelT = TypeVar("LabelT")

# Haystack names.
TEXT = "text"
SENDER = "sender"
SUBJECT = "subject"


class Rule(NamedTuple):
    """Assigns *label* when any keyword occurs in any of the named fields."""

    label: AlertSeverity | AlertSource
    keywords: tuple[str, ...]
    fields: tuple[str, ...] = (TEXT,)

    def matches(self, haystacks: Mapping[str, str]) -> bool:
        for name in self.fields:
            hay = haystacks.get(name, "")
            if any(keyword in hay for keyword in self.keywords):
                return True
        return False


SEVERITY_RULES: tuple[Rule, ...] = (
    Rule(
        AlertSeverity.P1,
        ("critical", "down", "unavailable", "outage", "failed",
         "timeout", "p1", "urgent", "emergency"),
    ),
    Rule(
        AlertSeverity.P2,
        ("alert", "high", "elevated", "exceeded", "error rate",
         "p2", "degraded", "slow", "build failed"),
    ),
    Rule(
        AlertSeverity.P3,
        ("medium", "p3", "approaching", "usage", "capacity", "disk space"),
    ),
    Rule(
        AlertSeverity.INFO,
        ("info", "notification", "expiring", "renewal", "certificate",
         "p4", "maintenance", "scheduled"),
    ),
)

SOURCE_RULES: tuple[Rule, ...] = (
    Rule(AlertSource.GRAFANA, ("grafana",), (SENDER, SUBJECT)),
    Rule(AlertSource.KIBANA, ("kibana",), (SENDER, SUBJECT)),
    Rule(AlertSource.JENKINS, ("jenkins",), (SENDER, SUBJECT)),
    Rule(AlertSource.UPTIMEKUBE, ("uptimekube",), (SENDER, SUBJECT)),
    Rule(AlertSource.PROMETHEUS, ("prometheus",), (SENDER, SUBJECT)),
    Rule(AlertSource.SYSTEM, ("system",), (SENDER, SUBJECT)),
    Rule(AlertSource.SSL, ("ssl",), (SENDER, SUBJECT)),
    Rule(AlertSource.SSL, ("certificate",), (SUBJECT,)),
    Rule(AlertSource.CICD, ("build", "deploy"), (SUBJECT,)),
    Rule(AlertSource.DATABASE, ("database", "db"), (SUBJECT,)),
    Rule(AlertSource.GENERIC, ("alert",), (SUBJECT,)),
)


def first_match(
    rules: Sequence[Rule],
    haystacks: Mapping[str, str],
    default: LabelT,
) -> AlertSeverity | AlertSource | LabelT:
    """Label of the first rule that matches, else *default*."""
    lowered = {name: value.lower() for name, value in haystacks.items()}
    for rule in rules:
        if rule.matches(lowered):
            return rule.label
    return default


def infer_severity(subject: str, body: str) -> AlertSeverity:
    """Severity from the combined subject and body text."""
    label = first_match(
        SEVERITY_RULES,
        {TEXT: f"{subject} {body}"},
        AlertSeverity.UNKNOWN,
    )
    return AlertSeverity(label)


def infer_source(sender: str, subject: str) -> AlertSource:
    """Monitoring source from the normalized sender address and subject."""
    label = first_match(
        SOURCE_RULES,
        {SENDER: sender, SUBJECT: subject},
        AlertSource.UNKNOWN,
    )
    return AlertSource(label)
