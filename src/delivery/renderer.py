"""HTML and plain-text rendering of a daily report."""

from __future__ import annotations

import datetime
import re
import traceback
from collections.abc import Sequence
from html import escape as html_escape

from src.core.types import Alert, AlertSeverity, Report, ReportTier

_SEVERITY_ORDER = {severity: rank for rank, severity in enumerate(AlertSeverity)}

_SEVERITY_COLORS: dict[AlertSeverity, str] = {
    AlertSeverity.P1: "#e74c3c",   # red
    AlertSeverity.P2: "#f39c12",   # orange
    AlertSeverity.P3: "#f1c40f",   # yellow
    AlertSeverity.INFO: "#3498db", # blue
    AlertSeverity.UNKNOWN: "#95a5a6",
}

_TIER_LABELS: dict[str, str] = {
    ReportTier.AI: "AI summary",
    ReportTier.FALLBACK: "Statistical fallback",
    ReportTier.EMPTY: "No alerts",
}

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$")
_BULLET_RE = re.compile(r"^\s*[-*]\s+(.*)$")
_NUMBERED_RE = re.compile(r"^\s*\d+[.)]\s+(.*)$")
_TABLE_SEP_RE = re.compile(r"^\|?\s*:?-{3,}:?\s*(\|\s*:?-{3,}:?\s*)*\|?$")
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_ITALIC_RE = re.compile(r"(?<![\w*])[*_](?![\s*_])(.+?)(?<![\s*_])[*_](?![\w*])")
_CODE_RE = re.compile(r"`([^`]+)`")


def format_report_date(day: datetime.date) -> str:
    """``October 19, 2026`` style date for subjects and headings."""
    return f"{day.strftime('%B')} {day.day}, {day.year}"


def _inline(text: str) -> str:
    out = html_escape(text, quote=False)
    out = _CODE_RE.sub(r"<code>\1</code>", out)
    out = _BOLD_RE.sub(r"<strong>\1</strong>", out)
    return _ITALIC_RE.sub(r"<em>\1</em>", out)


def _table_cells(line: str) -> list[str]:
    return [cell.strip() for cell in line.strip().strip("|").split("|")]


def markdown_to_html(markdown: str) -> str:
    """Render the Markdown subset the narratives use.

    Handles headings, bullet and numbered lists, pipe tables, paragraphs,
    and bold/italic/code spans. Anything else is escaped as text.
    """
    html: list[str] = []
    paragraph: list[str] = []
    list_tag: str | None = None
    table_rows: list[list[str]] = []

    def flush_paragraph() -> None:
        if paragraph:
            html.append(f"<p>{' '.join(_inline(p) for p in paragraph)}</p>")
            paragraph.clear()

    def close_list() -> None:
        nonlocal list_tag
        if list_tag is not None:
            html.append(f"</{list_tag}>")
            list_tag = None

    def flush_table() -> None:
        if not table_rows:
            return
        header, *body = table_rows
        html.append('<table class="md-table">')
        html.append("<tr>" + "".join(f"<th>{_inline(c)}</th>" for c in header) + "</tr>")
        for row in body:
            html.append("<tr>" + "".join(f"<td>{_inline(c)}</td>" for c in row) + "</tr>")
        html.append("</table>")
        table_rows.clear()

    def open_list(tag: str) -> None:
        nonlocal list_tag
        if list_tag != tag:
            close_list()
            html.append(f"<{tag}>")
            list_tag = tag

    for raw_line in markdown.splitlines():
        line = raw_line.rstrip()

        if line.lstrip().startswith("|"):
            flush_paragraph()
            close_list()
            if not _TABLE_SEP_RE.match(line.strip()):
                table_rows.append(_table_cells(line))
            continue
        flush_table()

        if not line.strip():
            flush_paragraph()
            close_list()
            continue

        heading = _HEADING_RE.match(line)
        if heading:
            flush_paragraph()
            close_list()
            level = len(heading.group(1))
            html.append(f"<h{level}>{_inline(heading.group(2))}</h{level}>")
            continue

        bullet = _BULLET_RE.match(line)
        numbered = None if bullet else _NUMBERED_RE.match(line)
        if bullet or numbered:
            flush_paragraph()
            open_list("ul" if bullet else "ol")
            item = (bullet or numbered).group(1)  # type: ignore[union-attr]
            html.append(f"<li>{_inline(item)}</li>")
            continue

        close_list()
        paragraph.append(line.strip())

    flush_paragraph()
    close_list()
    flush_table()
    return "\n".join(html)


def _sorted_alerts(alerts: Sequence[Alert]) -> list[Alert]:
    return sorted(alerts, key=lambda a: (_SEVERITY_ORDER[a.severity], a.date))


def _alert_table(alerts: Sequence[Alert]) -> str:
    if not alerts:
        return ""
    rows = []
    for alert in _sorted_alerts(alerts):
        color = _SEVERITY_COLORS[alert.severity]
        rows.append(
            "<tr>"
            f"<td>{html_escape(alert.date.astimezone().strftime('%H:%M'))}</td>"
            f'<td style="color: {color}; font-weight: bold;">{alert.severity.value}</td>'
            f"<td>{html_escape(alert.source.value)}</td>"
            f"<td>{html_escape(alert.subject)}</td>"
            "</tr>"
        )
    return (
        f"<h2>All Alerts ({len(alerts)})</h2>\n"
        '<table class="alerts">\n'
        "<tr><th>Time</th><th>Severity</th><th>Source</th><th>Subject</th></tr>\n"
        + "\n".join(rows)
        + "\n</table>"
    )


_STYLE = """
body { font-family: Arial, sans-serif; color: #333; max-width: 900px; margin: auto; }
.header { border-bottom: 2px solid #2c3e50; margin-bottom: 16px; }
.tier { display: inline-block; padding: 2px 8px; border-radius: 4px;
        background: #ecf0f1; font-size: 12px; }
table { border-collapse: collapse; margin: 8px 0; }
th, td { border: 1px solid #ddd; padding: 4px 8px; text-align: left; }
th { background: #f5f5f5; }
.footer { margin-top: 24px; font-size: 12px; color: #888; }
"""


def render_report_html(
    report: Report,
    alerts: Sequence[Alert],
    report_date: datetime.date,
) -> str:
    """Full HTML email body for one daily report."""
    tier_label = _TIER_LABELS.get(report.tier, report.tier)
    generated = report.generated_at.astimezone().strftime("%Y-%m-%d %H:%M:%S %Z")
    return (
        "<html>\n<head>\n"
        f"<style>{_STYLE}</style>\n"
        "</head>\n<body>\n"
        '<div class="header">\n'
        f"<h1>Daily Alert Summary - {format_report_date(report_date)}</h1>\n"
        f'<span class="tier">{html_escape(tier_label)}</span>\n'
        "</div>\n"
        f"{markdown_to_html(report.narrative)}\n"
        f"{_alert_table(alerts)}\n"
        f'<div class="footer">Generated at {html_escape(generated)}</div>\n'
        "</body>\n</html>\n"
    )


def render_report_text(
    report: Report,
    alerts: Sequence[Alert],
    report_date: datetime.date,
) -> str:
    """Plain-text alternative: the narrative plus one line per alert."""
    lines = [
        f"Daily Alert Summary - {format_report_date(report_date)}",
        "=" * 50,
        "",
        report.narrative.strip(),
    ]
    if alerts:
        lines += ["", f"All alerts ({len(alerts)}):"]
        lines += [
            f"  {a.date.astimezone().strftime('%H:%M')}  {a.severity.value:<7}  "
            f"{a.source.value:<17}  {a.subject}"
            for a in _sorted_alerts(alerts)
        ]
    return "\n".join(lines) + "\n"


def render_error_html(error: BaseException, occurred_at: datetime.datetime | None = None) -> str:
    """Minimal HTML report describing a failed run."""
    when = (occurred_at or datetime.datetime.now().astimezone()).strftime("%Y-%m-%d %H:%M:%S %Z")
    trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    return (
        "<html>\n<body>\n"
        "<h2>Daily Alert Summary - Error Report</h2>\n"
        f"<p><strong>Time:</strong> {html_escape(when)}</p>\n"
        f"<p><strong>Error:</strong> {html_escape(f'{type(error).__name__}: {error}')}</p>\n"
        '<pre style="background: #f5f5f5; padding: 1rem;">'
        f"{html_escape(trace)}</pre>\n"
        "<p>The daily alert summary job has failed. "
        "Check the application logs and configuration.</p>\n"
        "</body>\n</html>\n"
    )
