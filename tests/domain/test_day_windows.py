from __future__ import annotations

from datetime import UTC, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo

import pytest

from pricewatch.domain.time_windows import TimeWindow, calendar_day, parse_iso_datetime

NAIROBI = ZoneInfo("Africa/Nairobi")


def test_day_window_is_inclusive_and_covers_the_whole_day() -> None:
    moment = datetime(2024, 3, 5, 10, 0, tzinfo=UTC)

    window = TimeWindow.for_day(moment, UTC)

    assert window.start == datetime(2024, 3, 5, tzinfo=UTC)
    assert window.end == datetime(2024, 3, 6, tzinfo=UTC) - timedelta(microseconds=1)
    assert window.contains(window.start)
    assert window.contains(window.end)
    assert not window.contains(datetime(2024, 3, 6, tzinfo=UTC))


def test_calendar_day_follows_the_reference_timezone() -> None:
    late_utc = datetime(2024, 3, 5, 22, 30, tzinfo=UTC)

    assert calendar_day(late_utc, UTC).isoformat() == "2024-03-05"
    assert calendar_day(late_utc, NAIROBI).isoformat() == "2024-03-06"


def test_day_window_in_local_timezone_starts_at_local_midnight() -> None:
    window = TimeWindow.for_day(datetime(2024, 3, 5, 22, 30, tzinfo=UTC), NAIROBI)

    assert window.start.astimezone(UTC) == datetime(2024, 3, 5, 21, 0, tzinfo=UTC)


def test_time_window_requires_aware_and_ordered_bounds() -> None:
    with pytest.raises(ValueError, match="timezone"):
        TimeWindow(start=datetime(2024, 1, 1), end=datetime(2024, 1, 2, tzinfo=UTC))  # noqa: DTZ001
    with pytest.raises(ValueError, match="before end"):
        TimeWindow(
            start=datetime(2024, 1, 2, tzinfo=UTC),
            end=datetime(2024, 1, 1, tzinfo=UTC),
        )


def test_parse_iso_datetime_handles_zulu_and_naive_values() -> None:
    assert parse_iso_datetime("2024-03-05T10:00:00Z") == datetime(2024, 3, 5, 10, tzinfo=UTC)
    assert parse_iso_datetime("2024-03-05T10:00:00") == datetime(2024, 3, 5, 10, tzinfo=UTC)
    offset = parse_iso_datetime("2024-03-05T13:00:00+03:00")
    assert offset == datetime(2024, 3, 5, 10, tzinfo=UTC)


def test_parse_iso_datetime_rejects_garbage() -> None:
    with pytest.raises(ValueError, match="Invalid ISO timestamp"):
        parse_iso_datetime("yesterday")


@pytest.mark.parametrize(
    ("moment", "tz"),
    [
        (datetime(9999, 12, 31, 12, tzinfo=UTC), UTC),
        (parse_iso_datetime("0001-01-01T00:30:00+05:00"), UTC),
        (datetime(1, 1, 1, 5, tzinfo=UTC), NAIROBI),
    ],
)
def test_day_window_rejects_days_at_the_edge_of_the_calendar(
    moment: datetime, tz: tzinfo
) -> None:
    with pytest.raises(ValueError, match="Timestamp out of range"):
        TimeWindow.for_day(moment, tz)
