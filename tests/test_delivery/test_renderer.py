"""Tests for report rendering — Markdown subset, alert table, error report."""

from __future__ import annotations

import datetime

from src.core.types import AiReport, Alert, AlertSeverity, AlertSource, EmptyReport, FallbackReport
from src.delivery.renderer import (
    format_report_date,
    markdown_to_html,
    render_error_html,
    render_report_html,
    render_report_text,
)

_DAY = datetime.date(2026, 10, 18)
_TS = datetime.datetime(2026, 10, 18, 9, 0, tzinfo=datetime.UTC)


def _alert(msg_id: str, severity: AlertSeverity, minutes: int = 0, subject: str = "s") -> Alert:
    return Alert(
        id=msg_id,
        subject=subject,
        date=_TS + datetime.timedelta(minutes=minutes),
        source=AlertSource.GRAFANA,
        severity=severity,
    )


# ── Markdown ───────────────────────────────────────────────────


class TestMarkdownToHtml:
    def test_headings(self) -> None:
        html = markdown_to_html("# Title\n## Section")
        assert "<h1>Title</h1>" in html
        assert "<h2>Section</h2>" in html

    def test_bullet_list(self) -> None:
        html = markdown_to_html("- one\n- two")
        assert html == "<ul>\n<li>one</li>\n<li>two</li>\n</ul>"

    def test_numbered_list(self) -> None:
        html = markdown_to_html("1. first\n2. second")
        assert html.startswith("<ol>")
        assert "<li>second</li>" in html

    def test_inline_formatting(self) -> None:
        html = markdown_to_html("**bold** and *soft* and `code`")
        assert "<strong>bold</strong>" in html
        assert "<em>soft</em>" in html
        assert "<code>code</code>" in html

    def test_snake_case_not_italicized(self) -> None:
        assert "<em>" not in markdown_to_html("check disk_usage_pct now")

    def test_table(self) -> None:
        html = markdown_to_html("| Source | Count |\n|---|---|\n| Grafana | 2 |")
        assert '<table class="md-table">' in html
        assert "<th>Source</th><th>Count</th>" in html
        assert "<td>Grafana</td><td>2</td>" in html
        assert "---" not in html

    def test_paragraph_lines_joined(self) -> None:
        assert markdown_to_html("first line\nsecond line") == "<p>first line second line</p>"

    def test_html_is_escaped(self) -> None:
        html = markdown_to_html("<script>alert(1)</script> & more")
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "&amp;" in html


# ── Report bodies ──────────────────────────────────────────────


class TestRenderReport:
    def test_format_report_date(self) -> None:
        assert format_report_date(datetime.date(2026, 10, 9)) == "October 9, 2026"

    def test_html_includes_heading_tier_and_narrative(self) -> None:
        report = AiReport(narrative="## Executive Summary\nAll good")
        html = render_report_html(report, [], _DAY)
        assert "Daily Alert Summary - October 18, 2026" in html
        assert "AI summary" in html
        assert "<h2>Executive Summary</h2>" in html
        assert "All Alerts" not in html

    def test_fallback_tier_label(self) -> None:
        html = render_report_html(FallbackReport(narrative="stats"), [], _DAY)
        assert "Statistical fallback" in html

    def test_alert_table_sorted_by_severity_then_date(self) -> None:
        alerts = [
            _alert("a", AlertSeverity.INFO, 0, subject="info-first"),
            _alert("b", AlertSeverity.P1, 30, subject="p1-late"),
            _alert("c", AlertSeverity.P1, 10, subject="p1-early"),
            _alert("d", AlertSeverity.P3, 5, subject="p3"),
        ]
        html = render_report_html(AiReport(narrative="x"), alerts, _DAY)
        assert "All Alerts (4)" in html
        positions = [html.index(s) for s in ("p1-early", "p1-late", "p3", "info-first")]
        assert positions == sorted(positions)

    def test_mixed_naive_and_aware_dates(self) -> None:
        alerts = [
            Alert(id="n", subject="naive", date=datetime.datetime(2026, 10, 18, 7, 0)),
            _alert("a", AlertSeverity.UNKNOWN, subject="aware"),
        ]
        html = render_report_html(AiReport(narrative="x"), alerts, _DAY)
        assert "All Alerts (2)" in html

    def test_subject_escaped_in_table(self) -> None:
        alerts = [_alert("a", AlertSeverity.P2, subject="<b>bad</b>")]
        html = render_report_html(AiReport(narrative="x"), alerts, _DAY)
        assert "&lt;b&gt;bad&lt;/b&gt;" in html

    def test_text_alternative(self) -> None:
        alerts = [_alert("a", AlertSeverity.P2, subject="High CPU")]
        text = render_report_text(AiReport(narrative="  narrative  "), alerts, _DAY)
        assert text.startswith("Daily Alert Summary - October 18, 2026")
        assert "narrative" in text
        assert "All alerts (1):" in text
        assert "High CPU" in text

    def test_text_without_alerts(self) -> None:
        text = render_report_text(EmptyReport(narrative="none"), [], _DAY)
        assert "All alerts" not in text


class TestRenderError:
    def test_includes_type_message_and_traceback(self) -> None:
        try:
            raise RuntimeError("mailbox <down>")
        except RuntimeError as exc:
            error = exc
        occurred = datetime.datetime(2026, 10, 19, 0, 5, tzinfo=datetime.UTC)
        html = render_error_html(error, occurred_at=occurred)
        assert "Error Report" in html
        assert "RuntimeError: mailbox &lt;down&gt;" in html
        assert "Traceback" in html
        assert "2026-10-19 00:05:00" in html
