"""Report rendering and outbound delivery."""

from src.delivery.exceptions import DeliveryError, DeliveryFailedError
from src.delivery.mailer import ReportMailer, SmtpMailer, alerts_attachment, report_subject
from src.delivery.renderer import (
    format_report_date,
    markdown_to_html,
    render_error_html,
    render_report_html,
    render_report_text,
)

__all__ = [
    "DeliveryError",
    "DeliveryFailedError",
    "ReportMailer",
    "SmtpMailer",
    "alerts_attachment",
    "format_report_date",
    "markdown_to_html",
    "render_error_html",
    "render_report_html",
    "render_report_text",
    "report_subject",
]
