"""Time windows used to select messages for one run.

Every helper builds a half-open window ``[start, end)`` bounded by local
midnight, so consecutive day windows never overlap. A closed window has to
be asked for explicitly with ``closed=True``.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, model_validator


class TimeWindow(BaseModel):
    """Interval of message creation timestamps."""

    model_config = ConfigDict(frozen=True)

    start: datetime.datetime
    end: datetime.datetime
    closed: bool = False

    @model_validator(mode="after")
    def _check_order(self) -> TimeWindow:
        if _aware(self.end) < _aware(self.start):
            raise ValueError("window end precedes start")
        return self

    @property
    def is_empty(self) -> bool:
        return not self.closed and self.start == self.end

    def contains(self, ts: datetime.datetime) -> bool:
        """Whether *ts* falls inside the window under its boundary policy."""
        ts = _aware(ts)
        start, end = _aware(self.start), _aware(self.end)
        if ts < start:
            return False
        if self.closed:
            return ts <= end
        return ts < end

    def describe(self) -> str:
        bracket = "]" if self.closed else ")"
        return f"[{self.start.isoformat()}, {self.end.isoformat()}{bracket}"


def _aware(ts: datetime.datetime) -> datetime.datetime:
    """Treat naive datetimes as local time."""
    if ts.tzinfo is None:
        return ts.astimezone()
    return ts


def local_midnight(day: datetime.date) -> datetime.datetime:
    return datetime.datetime.combine(day, datetime.time.min).astimezone()


def day_window(day: datetime.date) -> TimeWindow:
    """Local midnight of *day* up to (excluding) the next local midnight."""
    return TimeWindow(
        start=local_midnight(day),
        end=local_midnight(day + datetime.timedelta(days=1)),
    )


def range_window(first: datetime.date, last: datetime.date) -> TimeWindow:
    """Whole local days from *first* through *last* inclusive."""
    if last < first:
        raise ValueError("range end precedes start")
    return TimeWindow(
        start=local_midnight(first),
        end=local_midnight(last + datetime.timedelta(days=1)),
    )


def _local_today(now: datetime.datetime | None) -> datetime.date:
    current = _aware(now) if now is not None else datetime.datetime.now().astimezone()
    return current.astimezone().date()


def today_window(now: datetime.datetime | None = None) -> TimeWindow:
    return day_window(_local_today(now))


def yesterday_window(now: datetime.datetime | None = None) -> TimeWindow:
    return day_window(_local_today(now) - datetime.timedelta(days=1))


def recent_window(hours: float, now: datetime.datetime | None = None) -> TimeWindow:
    """The last *hours* hours, ending at *now*."""
    end = _aware(now) if now is not None else datetime.datetime.now(datetime.UTC)
    return TimeWindow(start=end - datetime.timedelta(hours=hours), end=end)
