"""Mailpit message source — lists the inbox and resolves bodies by id."""

from __future__ import annotations

import datetime
from typing import Any

import httpx
import structlog

from src.core.config import MailboxConfig, get_settings
from src.core.types import RawMessage
from src.mailbox.base import MessageSource
from src.mailbox.exceptions import MessageUnreadableError, SourceUnavailableError
from src.mailbox.window import TimeWindow

logger = structlog.stdlib.get_logger()


def _first(entry: dict[str, Any], *keys: str) -> Any:
    """Value of the first key present in *entry* (Mailpit vs lowercase casing)."""
    for key in keys:
        value = entry.get(key)
        if value is not None:
            return value
    return None


def _address_text(value: object) -> str:
    """Render a Mailpit address object (or plain string) as header text."""
    if isinstance(value, dict):
        address = str(value.get("Address") or value.get("address") or "")
        name = str(value.get("Name") or value.get("name") or "")
        if name and address:
            return f"{name} <{address}>"
        return address or name
    if value is None:
        return ""
    return str(value)


def _parse_created(value: object) -> datetime.datetime | None:
    """Parse an ISO-8601 creation timestamp, or None when unusable."""
    if isinstance(value, datetime.datetime):
        created = value
    elif isinstance(value, str) and value:
        try:
            created = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if created.tzinfo is None:
        created = created.replace(tzinfo=datetime.UTC)
    return created


def _extract_listing(body: object) -> list[dict[str, Any]]:
    if isinstance(body, dict):
        body = body.get("messages") or body.get("Messages") or []
    if not isinstance(body, list):
        return []
    return [entry for entry in body if isinstance(entry, dict)]


class MailpitSource(MessageSource):
    """Reads alert emails from the Mailpit REST API (``/api/v1``).

    The listing endpoint has no server-side date filter, so a bounded page
    is fetched and filtered to the window client-side.
    """

    def __init__(self, config: MailboxConfig | None = None) -> None:
        self._config = config or get_settings().mailbox
        self._api_url = f"{self._config.base_url.rstrip('/')}/api/v1"
        self._http: httpx.AsyncClient | None = None

    @property
    def connected(self) -> bool:
        """Whether the HTTP client is active."""
        return self._http is not None and not self._http.is_closed

    async def connect(self) -> None:
        """Create the httpx async client."""
        auth: httpx.BasicAuth | None = None
        password = self._config.password.get_secret_value()
        if self._config.username and password:
            auth = httpx.BasicAuth(self._config.username, password)
        self._http = httpx.AsyncClient(
            auth=auth,
            verify=self._config.verify_tls,
            timeout=httpx.Timeout(self._config.timeout_secs),
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        """Close the httpx async client."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    # ── API calls ───────────────────────────────────────────────

    async def list_messages(self) -> list[dict[str, Any]]:
        """Fetch one bounded page of message summaries."""
        if self._http is None:
            raise SourceUnavailableError("HTTP client not connected")

        url = f"{self._api_url}/messages"
        try:
            response = await self._http.get(url, params={"limit": self._config.page_limit})
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SourceUnavailableError(
                f"Mailpit returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailableError(f"Mailpit request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise SourceUnavailableError("Mailpit returned invalid JSON") from exc

        return _extract_listing(body)

    async def get_message(self, message_id: str) -> dict[str, Any]:
        """Fetch the full message (text and HTML parts) by id."""
        if self._http is None:
            raise MessageUnreadableError(message_id, "HTTP client not connected")

        try:
            response = await self._http.get(f"{self._api_url}/message/{message_id}")
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            raise MessageUnreadableError(
                message_id, f"status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise MessageUnreadableError(message_id, str(exc)) from exc
        except ValueError as exc:
            raise MessageUnreadableError(message_id, "invalid JSON") from exc

        if not isinstance(body, dict):
            raise MessageUnreadableError(message_id, "unexpected response shape")
        return body

    # ── Fetch ───────────────────────────────────────────────────

    async def fetch(self, window: TimeWindow) -> list[RawMessage]:
        entries = await self.list_messages()
        logger.info(
            "mailbox_listing_received",
            total=len(entries),
            window=window.describe(),
        )

        accepted: list[tuple[dict[str, Any], datetime.datetime]] = []
        for entry in entries:
            created = _parse_created(_first(entry, "Created", "created", "date"))
            if created is None:
                logger.debug("mailbox_entry_undated", message_id=_first(entry, "ID", "id"))
                continue
            if window.contains(created):
                accepted.append((entry, created))
            else:
                logger.debug(
                    "mailbox_entry_outside_window",
                    message_id=_first(entry, "ID", "id"),
                    created=created.isoformat(),
                )

        messages: list[RawMessage] = []
        skipped = 0
        for entry, created in accepted:
            message_id = str(_first(entry, "ID", "id") or "")
            try:
                if not message_id:
                    raise MessageUnreadableError("<missing>", "entry has no id")
                full = await self.get_message(message_id)
            except MessageUnreadableError as exc:
                skipped += 1
                logger.warning(
                    "mailbox_message_unreadable",
                    message_id=exc.message_id,
                    reason=exc.reason,
                )
                continue
            messages.append(self._to_raw_message(entry, full, message_id, created))

        logger.info(
            "mailbox_fetch_complete",
            in_window=len(accepted),
            resolved=len(messages),
            skipped=skipped,
        )
        return messages

    @staticmethod
    def _to_raw_message(
        entry: dict[str, Any],
        full: dict[str, Any],
        message_id: str,
        created: datetime.datetime,
    ) -> RawMessage:
        recipients = _first(entry, "To", "to") or []
        if not isinstance(recipients, list):
            recipients = [recipients]
        text = _first(full, "Text", "text")
        html = _first(full, "HTML", "html")
        return RawMessage(
            id=message_id,
            subject=str(_first(entry, "Subject", "subject") or ""),
            from_address=_address_text(_first(entry, "From", "from")),
            to=[_address_text(r) for r in recipients],
            created=created,
            text=str(text) if text else None,
            html=str(html) if html else None,
        )
