"""Domain types for alert ingestion and daily reporting."""

from __future__ import annotations

import datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AlertSource(StrEnum):
    """Monitoring system an alert is attributed to."""

    GRAFANA = "Grafana"
    KIBANA = "Kibana"
    JENKINS = "Jenkins"
    UPTIMEKUBE = "UptimeKube"
    PROMETHEUS = "Prometheus"
    SYSTEM = "System Monitoring"
    SSL = "SSL Monitor"
    CICD = "CI/CD"
    DATABASE = "Database"
    GENERIC = "Generic Alert"
    UNKNOWN = "Unknown"


class AlertSeverity(StrEnum):
    """Inferred severity; declaration order is priority order."""

    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    INFO = "Info"
    UNKNOWN = "Unknown"


class ReportTier(StrEnum):
    """Provenance of a generated report."""

    AI = "ai"
    FALLBACK = "fallback"
    EMPTY = "empty"


NO_SUBJECT = "No Subject"


def _assume_local(ts: datetime.datetime) -> datetime.datetime:
    """Naive timestamps are read as local time."""
    if ts.tzinfo is None:
        return ts.astimezone()
    return ts


class RawMessage(BaseModel):
    """A mailbox entry with its full body resolved."""

    id: str
    subject: str = ""
    from_address: str = ""
    to: list[str] = Field(default_factory=list)
    created: datetime.datetime
    text: str | None = None
    html: str | None = None

    @field_validator("created")
    @classmethod
    def _created_aware(cls, value: datetime.datetime) -> datetime.datetime:
        return _assume_local(value)


class Alert(BaseModel):
    """Structured alert derived from one raw message."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    subject: str = Field(default=NO_SUBJECT, min_length=1)
    from_address: str = Field(default="", alias="from")
    to: tuple[str, ...] = ()
    date: datetime.datetime
    body: str = ""
    source: AlertSource = AlertSource.UNKNOWN
    severity: AlertSeverity = AlertSeverity.UNKNOWN

    @field_validator("date")
    @classmethod
    def _date_aware(cls, value: datetime.datetime) -> datetime.datetime:
        return _assume_local(value)


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class _ReportBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    narrative: str
    generated_at: datetime.datetime = Field(default_factory=_now)


class AiReport(_ReportBase):
    """Narrative written by the generative summarizer."""

    tier: Literal["ai"] = "ai"


class FallbackReport(_ReportBase):
    """Deterministic statistical narrative used when the summarizer fails."""

    tier: Literal["fallback"] = "fallback"


class EmptyReport(_ReportBase):
    """Fixed narrative for a window with no alerts."""

    tier: Literal["empty"] = "empty"


Report = Annotated[AiReport | FallbackReport | EmptyReport, Field(discriminator="tier")]


class RunResult(BaseModel):
    """Outcome of one successful daily run."""

    report_date: datetime.date
    alerts_processed: int
    messages_fetched: int
    tier: ReportTier
    duration_secs: float
