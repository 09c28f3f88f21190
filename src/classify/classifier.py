"""Raw message -> structured Alert."""

from __future__ import annotations

from collections.abc import Iterable

import structlog
from pydantic import ValidationError

from src.classify.rules import infer_severity, infer_source
from src.classify.text import extract_text_body, normalize_address
from src.core.types import NO_SUBJECT, Alert, RawMessage

logger = structlog.get_logger(__name__)


def classify(raw: RawMessage) -> Alert | None:
    """Normalize *raw* and attach inferred source and severity.

    Returns None when the message cannot be turned into a valid Alert.
    Output depends only on the message content, so repeated calls agree.
    """
    subject = raw.subject.strip() or NO_SUBJECT
    sender = normalize_address(raw.from_address)
    body = extract_text_body(raw.text, raw.html)

    try:
        return Alert(
            id=raw.id,
            subject=subject,
            from_address=sender,
            to=tuple(normalize_address(r) for r in raw.to),
            date=raw.created,
            body=body,
            source=infer_source(sender, subject),
            severity=infer_severity(subject, body),
        )
    except ValidationError as exc:
        logger.warning(
            "alert_classification_failed",
            message_id=raw.id,
            errors=exc.error_count(),
        )
        return None


def classify_all(messages: Iterable[RawMessage]) -> list[Alert]:
    """Classify each message, dropping those that fail."""
    alerts: list[Alert] = []
    for raw in messages:
        alert = classify(raw)
        if alert is not None:
            alerts.append(alert)
    return alerts
