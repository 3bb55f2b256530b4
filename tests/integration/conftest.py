from __future__ import annotations

import io
import os
import zipfile

import pytest

from src.adapters.settings import ScheduleRuntimeConfig

GTFS_TABLES: dict[str, str] = {
    "agency": (
        "agency_id,agency_name,agency_url,agency_timezone,agency_lang\n"
        "OC,OC Transpo,https://www.octranspo.com,America/Toronto,en\n"
    ),
    "calendar": (
        "service_id,monday,tuesday,wednesday,thursday,friday,saturday,sunday,"
        "start_date,end_date\n"
        "WEEKDAY,1,1,1,1,1,0,0,20250106,20250331\n"
        "SUNDAY,0,0,0,0,0,0,1,20250106,20250331\n"
    ),
    "calendar_dates": "service_id,date,exception_type\nWEEKDAY,20250217,2\n",
    "feed_info": (
        "feed_publisher_name,feed_publisher_url,feed_lang,feed_start_date,"
        "feed_end_date,feed_version\n"
        "OC Transpo,https://www.octranspo.com,en,20250106,20250331,2025-01\n"
    ),
    "routes": (
        "route_id,agency_id,route_short_name,route_long_name,route_type\n"
        "75,OC,75,Barrhaven Centre,3\n"
    ),
    "shapes": (
        "shape_id,shape_pt_lat,shape_pt_lon,shape_pt_sequence\n"
        "S75,45.3662,-75.7833,1\n"
        "S75,45.2730,-75.7400,2\n"
    ),
    "stops": (
        "stop_id,stop_code,stop_name,stop_lat,stop_lon,location_type\n"
        "3836,3014,LINCOLN FIELDS,45.3662,-75.7833,0\n"
        "7001,7001,BARRHAVEN CENTRE,45.2730,-75.7400,0\n"
    ),
    "trips": (
        "route_id,service_id,trip_id,trip_headsign,direction_id,shape_id\n"
        "75,WEEKDAY,75-WK-1,Barrhaven Centre,0,S75\n"
        "75,SUNDAY,75-SU-1,Barrhaven Centre,0,S75\n"
    ),
    "stop_times": (
        "trip_id,arrival_time,departure_time,stop_id,stop_sequence\r\n"
        "75-WK-1,08:00:00,08:00:00,3836,1\r\n"
        "75-WK-1,08:25:00,08:26:00,7001,2\r\n"
        "75-SU-1,09:00:00,09:00:00,3836,1\r\n"
        "GHOST,10:00:00,10:00:00,3836,1\r\n"
        "75-WK-1,24:40:00,,3836,3\r\n"
    ),
}


@pytest.fixture()
def gtfs_bundle() -> bytes:
    """A small but complete OC Transpo-shaped GTFS zip."""

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for table, content in GTFS_TABLES.items():
            archive.writestr(f"{table}.txt", content)
    return buf.getvalue()


@pytest.fixture(scope="session")
def require_live_feed() -> str:
    """Opt-in guard for tests that download the published schedule."""

    if not os.getenv("GTFS_LIVE_TESTS"):
        pytest.skip("GTFS_LIVE_TESTS not set; skipping live schedule download")
    return ScheduleRuntimeConfig.from_env().schedule_url
