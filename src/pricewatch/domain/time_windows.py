"""Calendar-day windows used to bucket observations for duplicate detection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, time, timedelta
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import date, tzinfo


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def _ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError("Time window values must include timezone information")
    return value


def calendar_day(moment: datetime, tz: tzinfo) -> date:
    """Return the calendar date of ``moment`` as seen in ``tz``."""

    return _ensure_aware(moment).astimezone(tz).date()


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive ``[start, end]`` interval of aware timestamps."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        _ensure_aware(self.start)
        _ensure_aware(self.end)
        if self.start > self.end:
            raise ValueError("Time window start must be before end")

    @classmethod
    def for_day(cls, moment: datetime, tz: tzinfo) -> TimeWindow:
        """Return the calendar day containing ``moment`` in ``tz``.

        The window ends one microsecond before the next midnight so that both
        bounds can be used with inclusive comparisons. Raises ``ValueError`` when
        the day or its bounds fall outside the range ``datetime`` can hold in
        ``tz`` or in UTC.
        """

        try:
            day = calendar_day(moment, tz)
            start = datetime.combine(day, time.min, tzinfo=tz)
            end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
            # bounds are stored and compared in UTC
            start.astimezone(UTC)
            end.astimezone(UTC)
        except OverflowError as exc:
            raise ValueError(f"Timestamp out of range: {moment.isoformat()}") from exc
        return cls(start=start, end=end - timedelta(microseconds=1))

    def contains(self, moment: datetime) -> bool:
        return self.start <= _ensure_aware(moment) <= self.end


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken to be UTC."""

    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


__all__ = ["Clock", "TimeWindow", "calendar_day", "parse_iso_datetime", "utcnow"]
