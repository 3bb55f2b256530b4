"""Typed rows of the nine GTFS tables a schedule snapshot is built from.

Each record type is tagged with the table (file stem) it comes from; the
column casts live with the table reader.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import ClassVar

TABLE_NAMES: tuple[str, ...] = (
    "agency",
    "calendar",
    "calendar_dates",
    "feed_info",
    "routes",
    "shapes",
    "stop_times",
    "stops",
    "trips",
)


@dataclass(frozen=True, slots=True)
class AgencyRecord:
    table: ClassVar[str] = "agency"

    agency_name: str
    agency_timezone: str
    agency_id: str | None = None
    agency_url: str | None = None
    agency_lang: str | None = None
    agency_phone: str | None = None


@dataclass(frozen=True, slots=True)
class CalendarRecord:
    table: ClassVar[str] = "calendar"

    service_id: str
    monday: bool
    tuesday: bool
    wednesday: bool
    thursday: bool
    friday: bool
    saturday: bool
    sunday: bool
    start_date: date
    end_date: date

    def weekday_vector(self) -> tuple[bool, bool, bool, bool, bool, bool, bool]:
        """Weekday flags ordered Sunday..Saturday."""

        return (
            self.sunday,
            self.monday,
            self.tuesday,
            self.wednesday,
            self.thursday,
            self.friday,
            self.saturday,
        )


@dataclass(frozen=True, slots=True)
class CalendarDateRecord:
    table: ClassVar[str] = "calendar_dates"

    service_id: str
    date: date
    exception_type: int


@dataclass(frozen=True, slots=True)
class FeedInfoRecord:
    table: ClassVar[str] = "feed_info"

    feed_publisher_name: str | None = None
    feed_publisher_url: str | None = None
    feed_lang: str | None = None
    feed_start_date: date | None = None
    feed_end_date: date | None = None
    feed_version: str | None = None


@dataclass(frozen=True, slots=True)
class RouteRecord:
    table: ClassVar[str] = "routes"

    route_id: str
    agency_id: str | None = None
    route_short_name: str | None = None
    route_long_name: str | None = None
    route_type: int | None = None
    route_color: str | None = None
    route_text_color: str | None = None


@dataclass(frozen=True, slots=True)
class ShapeRecord:
    table: ClassVar[str] = "shapes"

    shape_id: str
    shape_pt_lat: float
    shape_pt_lon: float
    shape_pt_sequence: int
    shape_dist_traveled: float | None = None


@dataclass(frozen=True, slots=True)
class StopTimeRecord:
    table: ClassVar[str] = "stop_times"

    trip_id: str
    arrival_time: str | None = None  # raw HH:MM:SS, hours may exceed 23
    departure_time: str | None = None
    stop_id: str | None = None
    stop_sequence: int | None = None
    stop_headsign: str | None = None
    pickup_type: int | None = None
    drop_off_type: int | None = None
    timepoint: int | None = None


@dataclass(frozen=True, slots=True)
class StopRecord:
    table: ClassVar[str] = "stops"

    stop_id: str
    stop_name: str
    stop_lat: float
    stop_lon: float
    stop_code: str | None = None
    location_type: int | None = None
    parent_station: str | None = None


@dataclass(frozen=True, slots=True)
class TripRecord:
    table: ClassVar[str] = "trips"

    route_id: str
    service_id: str
    trip_id: str
    trip_headsign: str | None = None
    direction_id: int | None = None
    block_id: str | None = None
    shape_id: str | None = None


@dataclass(frozen=True, slots=True)
class ScheduleCache:
    """All parsed tables of one on-disk snapshot."""

    agency: tuple[AgencyRecord, ...] = ()
    calendar: tuple[CalendarRecord, ...] = ()
    calendar_dates: tuple[CalendarDateRecord, ...] = ()
    feed_info: tuple[FeedInfoRecord, ...] = ()
    routes: tuple[RouteRecord, ...] = ()
    shapes: tuple[ShapeRecord, ...] = ()
    stop_times: tuple[StopTimeRecord, ...] = ()
    stops: tuple[StopRecord, ...] = ()
    trips: tuple[TripRecord, ...] = ()
