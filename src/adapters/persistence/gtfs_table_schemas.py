from __future__ import annotations

from typing import Any

from src.domain.models.records import (
    AgencyRecord,
    CalendarDateRecord,
    CalendarRecord,
    FeedInfoRecord,
    RouteRecord,
    ShapeRecord,
    StopRecord,
    StopTimeRecord,
    TripRecord,
)

from .csv_table_reader import (
    Column,
    TableSchema,
    decimal,
    flag,
    gtfs_date,
    identifier,
    integer,
    optional_decimal,
    optional_gtfs_date,
    optional_integer,
    optional_text,
    text,
)

AGENCY = TableSchema(
    record_type=AgencyRecord,
    columns=(
        Column("agency_id", optional_text),
        Column("agency_name", text),
        Column("agency_url", optional_text),
        Column("agency_timezone", identifier),
        Column("agency_lang", optional_text),
        Column("agency_phone", optional_text),
    ),
)

CALENDAR = TableSchema(
    record_type=CalendarRecord,
    columns=(
        Column("service_id", identifier),
        Column("monday", flag),
        Column("tuesday", flag),
        Column("wednesday", flag),
        Column("thursday", flag),
        Column("friday", flag),
        Column("saturday", flag),
        Column("sunday", flag),
        Column("start_date", gtfs_date),
        Column("end_date", gtfs_date),
    ),
)

CALENDAR_DATES = TableSchema(
    record_type=CalendarDateRecord,
    columns=(
        Column("service_id", identifier),
        Column("date", gtfs_date),
        Column("exception_type", integer),
    ),
)

FEED_INFO = TableSchema(
    record_type=FeedInfoRecord,
    columns=(
        Column("feed_publisher_name", optional_text),
        Column("feed_publisher_url", optional_text),
        Column("feed_lang", optional_text),
        Column("feed_start_date", optional_gtfs_date),
        Column("feed_end_date", optional_gtfs_date),
        Column("feed_version", optional_text),
    ),
)

ROUTES = TableSchema(
    record_type=RouteRecord,
    columns=(
        Column("route_id", identifier),
        Column("agency_id", optional_text),
        Column("route_short_name", optional_text),
        Column("route_long_name", optional_text),
        Column("route_type", optional_integer),
        Column("route_color", optional_text),
        Column("route_text_color", optional_text),
    ),
)

SHAPES = TableSchema(
    record_type=ShapeRecord,
    columns=(
        Column("shape_id", identifier),
        Column("shape_pt_lat", decimal),
        Column("shape_pt_lon", decimal),
        Column("shape_pt_sequence", integer),
        Column("shape_dist_traveled", optional_decimal),
    ),
)

STOP_TIMES = TableSchema(
    record_type=StopTimeRecord,
    columns=(
        Column("trip_id", identifier),
        Column("arrival_time", optional_text),
        Column("departure_time", optional_text),
        Column("stop_id", optional_text),
        Column("stop_sequence", optional_integer),
        Column("stop_headsign", optional_text),
        Column("pickup_type", optional_integer),
        Column("drop_off_type", optional_integer),
        Column("timepoint", optional_integer),
    ),
)

STOPS = TableSchema(
    record_type=StopRecord,
    columns=(
        Column("stop_id", identifier),
        Column("stop_code", optional_text),
        Column("stop_name", text),
        Column("stop_lat", decimal),
        Column("stop_lon", decimal),
        Column("location_type", optional_integer),
        Column("parent_station", optional_text),
    ),
)

TRIPS = TableSchema(
    record_type=TripRecord,
    columns=(
        Column("route_id", identifier),
        Column("service_id", identifier),
        Column("trip_id", identifier),
        Column("trip_headsign", optional_text),
        Column("direction_id", optional_integer),
        Column("block_id", optional_text),
        Column("shape_id", optional_text),
    ),
)

# Keyed by file stem, one entry per table in records.TABLE_NAMES.
SCHEMAS: dict[str, TableSchema[Any]] = {
    "agency": AGENCY,
    "calendar": CALENDAR,
    "calendar_dates": CALENDAR_DATES,
    "feed_info": FEED_INFO,
    "routes": ROUTES,
    "shapes": SHAPES,
    "stop_times": STOP_TIMES,
    "stops": STOPS,
    "trips": TRIPS,
}
