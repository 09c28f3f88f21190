"""Report delivery over SMTP."""

from __future__ import annotations

import abc
import asyncio
import datetime
import json
import smtplib
import ssl
from collections.abc import Sequence
from email.message import EmailMessage

import structlog

from src.core.config import SmtpConfig
from src.core.types import Alert, Report
from src.delivery.exceptions import DeliveryFailedError
from src.delivery.renderer import (
    format_report_date,
    render_error_html,
    render_report_html,
    render_report_text,
)

logger = structlog.get_logger(__name__)

ERROR_SUBJECT = "Daily Alert Summary - Job Failed"


def report_subject(report_date: datetime.date) -> str:
    return f"Daily Alert Summary - {format_report_date(report_date)}"


def alerts_attachment(alerts: Sequence[Alert]) -> bytes:
    """Raw alert list as pretty-printed JSON."""
    data = [a.model_dump(mode="json", by_alias=True) for a in alerts]
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


class ReportMailer(abc.ABC):
    """Base class for report delivery channels."""

    @abc.abstractmethod
    async def send_report(
        self,
        report: Report,
        alerts: Sequence[Alert],
        report_date: datetime.date,
    ) -> None:
        """Deliver the daily report.

        Raises:
            DeliveryFailedError: the report was not sent.
        """

    @abc.abstractmethod
    async def send_error_notification(self, error: BaseException) -> None:
        """Deliver a minimal error report for a failed run."""

    async def close(self) -> None:
        """Release resources."""


class SmtpMailer(ReportMailer):
    """Sends reports through an SMTP relay.

    Port 465 or ``secure: true`` uses implicit TLS; otherwise STARTTLS is
    negotiated when ``starttls`` is set. Each send opens its own connection
    in a worker thread.
    """

    def __init__(self, config: SmtpConfig) -> None:
        self._config = config
        self.sent_count = 0

    @property
    def configured(self) -> bool:
        return bool(self._config.host and self._config.to_emails)

    # ── Message assembly ────────────────────────────────────────

    def build_report_message(
        self,
        report: Report,
        alerts: Sequence[Alert],
        report_date: datetime.date,
    ) -> EmailMessage:
        msg = self._new_message(report_subject(report_date))
        msg.set_content(render_report_text(report, alerts, report_date))
        msg.add_alternative(render_report_html(report, alerts, report_date), subtype="html")
        if alerts:
            msg.add_attachment(
                alerts_attachment(alerts),
                maintype="application",
                subtype="json",
                filename=f"alerts-{report_date.isoformat()}.json",
            )
        return msg

    def build_error_message(self, error: BaseException) -> EmailMessage:
        msg = self._new_message(ERROR_SUBJECT)
        msg.set_content(f"The daily alert summary job failed: {type(error).__name__}: {error}")
        msg.add_alternative(render_error_html(error), subtype="html")
        return msg

    def _new_message(self, subject: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self._config.from_email
        msg["To"] = ", ".join(self._config.to_emails)
        return msg

    # ── Transport ───────────────────────────────────────────────

    def _tls_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if not self._config.verify_tls:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _connect(self) -> smtplib.SMTP:
        cfg = self._config
        if cfg.secure or cfg.port == 465:
            server: smtplib.SMTP = smtplib.SMTP_SSL(
                cfg.host, cfg.port, timeout=cfg.timeout_secs, context=self._tls_context(),
            )
        else:
            server = smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout_secs)
            if cfg.starttls:
                server.starttls(context=self._tls_context())
        password = cfg.password.get_secret_value()
        if cfg.username and password:
            server.login(cfg.username, password)
        return server

    def _send_blocking(self, msg: EmailMessage) -> None:
        with self._connect() as server:
            server.send_message(msg)

    async def _deliver(self, msg: EmailMessage) -> None:
        if not self.configured:
            raise DeliveryFailedError("SMTP host or recipients not configured")
        try:
            await asyncio.to_thread(self._send_blocking, msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryFailedError(f"Email send failed: {exc}") from exc
        self.sent_count += 1
        logger.info(
            "email_sent",
            subject=msg["Subject"],
            recipients=len(self._config.to_emails),
        )

    # ── Public API ──────────────────────────────────────────────

    async def send_report(
        self,
        report: Report,
        alerts: Sequence[Alert],
        report_date: datetime.date,
    ) -> None:
        await self._deliver(self.build_report_message(report, alerts, report_date))

    async def send_error_notification(self, error: BaseException) -> None:
        await self._deliver(self.build_error_message(error))

    async def send_test_email(self) -> None:
        msg = self._new_message("Alert Digest - Test Email")
        sent_at = datetime.datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S %Z")
        msg.set_content(f"Test email from the alert digest service, sent at {sent_at}.")
        await self._deliver(msg)

    async def verify_connection(self) -> bool:
        """Open (and close) an SMTP session. Returns True on success."""
        if not self._config.host:
            return False

        def _check() -> None:
            with self._connect() as server:
                server.noop()

        try:
            await asyncio.to_thread(_check)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("smtp_verify_failed", host=self._config.host, error=str(exc))
            return False
        return True
