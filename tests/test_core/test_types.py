"""Tests for src/core/types.py — Alert immutability and the Report variant."""

from __future__ import annotations

import datetime

import pytest
from pydantic import TypeAdapter, ValidationError

from src.core.types import (
    AiReport,
    Alert,
    AlertSeverity,
    AlertSource,
    EmptyReport,
    FallbackReport,
    RawMessage,
    Report,
    ReportTier,
)

_TS = datetime.datetime(2026, 10, 18, 9, 30, tzinfo=datetime.UTC)


class TestAlert:
    def test_defaults(self) -> None:
        alert = Alert(id="m1", date=_TS)
        assert alert.subject == "No Subject"
        assert alert.source == AlertSource.UNKNOWN
        assert alert.severity == AlertSeverity.UNKNOWN
        assert alert.body == ""

    def test_frozen(self) -> None:
        alert = Alert(id="m1", date=_TS)
        with pytest.raises(ValidationError):
            alert.subject = "changed"  # type: ignore[misc]

    def test_empty_subject_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Alert(id="m1", subject="", date=_TS)

    def test_from_alias(self) -> None:
        alert = Alert.model_validate({"id": "m1", "from": "ops@example.com", "date": _TS})
        assert alert.from_address == "ops@example.com"
        dumped = alert.model_dump(mode="json", by_alias=True)
        assert dumped["from"] == "ops@example.com"

    def test_naive_date_read_as_local(self) -> None:
        naive = datetime.datetime(2026, 10, 18, 9, 30)
        alert = Alert(id="m1", date=naive)
        assert alert.date.tzinfo is not None
        assert alert.date == naive.astimezone()

    def test_aware_date_kept(self) -> None:
        assert Alert(id="m1", date=_TS).date.tzinfo is datetime.UTC

    def test_severity_declaration_is_priority_order(self) -> None:
        assert list(AlertSeverity) == [
            AlertSeverity.P1,
            AlertSeverity.P2,
            AlertSeverity.P3,
            AlertSeverity.INFO,
            AlertSeverity.UNKNOWN,
        ]


class TestRawMessage:
    def test_naive_created_read_as_local(self) -> None:
        raw = RawMessage(id="m1", created=datetime.datetime(2026, 10, 18, 9, 30))
        assert raw.created.tzinfo is not None


class TestReport:
    def test_tiers(self) -> None:
        assert AiReport(narrative="x").tier == ReportTier.AI
        assert FallbackReport(narrative="x").tier == ReportTier.FALLBACK
        assert EmptyReport(narrative="x").tier == ReportTier.EMPTY

    def test_generated_at_is_aware(self) -> None:
        assert AiReport(narrative="x").generated_at.tzinfo is not None

    def test_discriminated_union(self) -> None:
        adapter: TypeAdapter[Report] = TypeAdapter(Report)
        report = adapter.validate_python({"tier": "fallback", "narrative": "stats"})
        assert isinstance(report, FallbackReport)

    def test_unknown_tier_rejected(self) -> None:
        adapter: TypeAdapter[Report] = TypeAdapter(Report)
        with pytest.raises(ValidationError):
            adapter.validate_python({"tier": "guess", "narrative": "x"})
