"""Agency-local calendar arithmetic.

GTFS expresses every date and wall-clock time in the agency's timezone;
these helpers turn them into timezone-aware instants.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo


def to_agency_time(instant: datetime, tz_name: str) -> datetime:
    """Reinterpret an instant on the agency's wall clock.

    Naive datetimes are taken to be in the host's local zone.
    """

    return instant.astimezone(ZoneInfo(tz_name))


def local_weekday(value: datetime | date) -> int:
    """Weekday index with 0=Sunday .. 6=Saturday."""

    return value.isoweekday() % 7


def parse_gtfs_date(raw: str) -> date:
    """Parse a GTFS ``YYYYMMDD`` date."""

    value = raw.strip()
    if len(value) != 8 or not value.isdigit():
        raise ValueError(f"Invalid GTFS date: {raw!r}")
    return date(int(value[0:4]), int(value[4:6]), int(value[6:8]))


def agency_midnight(day: date, tz_name: str) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=ZoneInfo(tz_name))


def parse_gtfs_time(raw: str) -> timedelta:
    """Parse ``H:MM:SS`` into an offset from the service day's midnight.

    Hours past 23 are kept as-is; 25:10:00 is 1:10 on the following day.
    """

    parts = raw.strip().split(":")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid GTFS time: {raw!r}")
    hours, minutes, seconds = (int(p) for p in parts)
    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


def apply_gtfs_time(anchor: date, raw: str | None, tz_name: str) -> datetime | None:
    """Absolute agency-local instant of a stop_times value on the anchor day.

    The offset is added to the anchor's local midnight as wall-clock time, so a
    DST change on the anchor day does not shift the result.
    """

    if raw is None or not raw.strip():
        return None
    return agency_midnight(anchor, tz_name) + parse_gtfs_time(raw)
