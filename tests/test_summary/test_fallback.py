"""Tests for the statistical fallback and empty-window reports."""

from __future__ import annotations

import datetime

from src.core.types import Alert, AlertSeverity, AlertSource
from src.summary.fallback import compute_stats, render_empty, render_fallback

_BASE = datetime.datetime(2026, 10, 18, 8, 0, tzinfo=datetime.UTC)


def _alert(
    msg_id: str,
    subject: str,
    source: AlertSource,
    severity: AlertSeverity,
    minutes: int = 0,
) -> Alert:
    return Alert(
        id=msg_id,
        subject=subject,
        date=_BASE + datetime.timedelta(minutes=minutes),
        source=source,
        severity=severity,
    )


def _sample() -> list[Alert]:
    return [
        _alert("1", "High CPU", AlertSource.GRAFANA, AlertSeverity.P2, minutes=30),
        _alert("2", "Build failed", AlertSource.JENKINS, AlertSeverity.P1, minutes=0),
        _alert("3", "High CPU", AlertSource.GRAFANA, AlertSeverity.P2, minutes=90),
    ]


class TestComputeStats:
    def test_counts(self) -> None:
        stats = compute_stats(_sample())
        assert stats.total == 3
        assert stats.by_source == {"Grafana": 2, "Jenkins": 1}
        assert stats.by_severity == {"P2": 2, "P1": 1}

    def test_date_span(self) -> None:
        stats = compute_stats(_sample())
        assert stats.earliest == _BASE
        assert stats.latest == _BASE + datetime.timedelta(minutes=90)

    def test_top_subjects_ranked_by_count(self) -> None:
        stats = compute_stats(_sample())
        assert stats.top_subjects == [("High CPU", 2), ("Build failed", 1)]

    def test_top_subject_ties_keep_first_seen_order(self) -> None:
        alerts = [
            _alert(str(i), subject, AlertSource.UNKNOWN, AlertSeverity.UNKNOWN)
            for i, subject in enumerate(["b", "a", "c", "a", "b", "c", "d"])
        ]
        stats = compute_stats(alerts, top_n=3)
        assert stats.top_subjects == [("b", 2), ("a", 2), ("c", 2)]

    def test_top_subjects_capped(self) -> None:
        alerts = [
            _alert(str(i), f"subject-{i}", AlertSource.UNKNOWN, AlertSeverity.UNKNOWN)
            for i in range(10)
        ]
        assert len(compute_stats(alerts).top_subjects) == 5

    def test_mixed_naive_and_aware_dates(self) -> None:
        naive = Alert(
            id="n",
            subject="naive",
            date=datetime.datetime(2026, 10, 18, 7, 0),
        )
        aware = _alert("a", "aware", AlertSource.GRAFANA, AlertSeverity.P2)
        stats = compute_stats([naive, aware])
        assert stats.earliest is not None and stats.latest is not None
        assert stats.earliest <= stats.latest

    def test_empty(self) -> None:
        stats = compute_stats([])
        assert stats.total == 0
        assert stats.earliest is None
        assert stats.top_subjects == []


class TestRenderFallback:
    def test_contains_sections_and_counts(self) -> None:
        text = render_fallback(_sample())
        assert text.startswith("# Daily Alert Summary (Fallback Report)")
        assert "- **Total Alerts:** 3" in text
        assert "- **Grafana:** 2" in text
        assert "- **Jenkins:** 1" in text
        assert "- **P1:** 1" in text
        assert "- **P2:** 2" in text
        assert "- High CPU (2x)" in text
        assert "## Recommendations" in text

    def test_deterministic(self) -> None:
        assert render_fallback(_sample()) == render_fallback(_sample())


class TestRenderEmpty:
    def test_zero_total(self) -> None:
        text = render_empty()
        assert text.startswith("# Daily Alert Summary")
        assert "**Total Alerts:** 0" in text
        assert "Fallback" not in text
