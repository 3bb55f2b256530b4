from __future__ import annotations

from datetime import date

import pytest

from src.adapters.persistence.csv_table_reader import parse_table, read_table
from src.adapters.persistence.gtfs_table_schemas import (
    CALENDAR,
    SCHEMAS,
    STOP_TIMES,
    STOPS,
)
from src.domain.exceptions import TableParseError
from src.domain.models.records import TABLE_NAMES, CalendarRecord, StopRecord


def test_every_table_has_a_schema() -> None:
    assert set(SCHEMAS) == set(TABLE_NAMES)


def test_parses_rows_by_header_position() -> None:
    content = (
        "stop_lat,stop_lon,stop_id,stop_name,stop_code\r\n"
        "45.3662,-75.7833,3836,LINCOLN FIELDS,3014\r\n"
    )

    rows = parse_table(content, STOPS)

    assert rows == (
        StopRecord(
            stop_id="3836",
            stop_name="LINCOLN FIELDS",
            stop_lat=45.3662,
            stop_lon=-75.7833,
            stop_code="3014",
        ),
    )


def test_header_is_not_a_record_and_blank_lines_are_skipped() -> None:
    content = (
        "service_id,monday,tuesday,wednesday,thursday,friday,saturday,sunday,"
        "start_date,end_date\n"
        "\n"
        "WKD,1,1,1,1,1,0,0,20250106,20250331\n"
        "\n"
    )

    (row,) = parse_table(content, CALENDAR)

    assert isinstance(row, CalendarRecord)
    assert row.service_id == "WKD"
    assert row.weekday_vector() == (False, True, True, True, True, True, False)
    assert row.start_date == date(2025, 1, 6)


def test_missing_trailing_columns_read_as_empty() -> None:
    content = (
        "trip_id,arrival_time,departure_time,stop_id,stop_sequence\n"
        "T1,,08:00:00,3836\n"
    )

    (row,) = parse_table(content, STOP_TIMES)

    assert row.arrival_time is None
    assert row.departure_time == "08:00:00"
    assert row.stop_id == "3836"
    assert row.stop_sequence is None


def test_unknown_columns_are_ignored() -> None:
    content = (
        "stop_id,stop_name,stop_lat,stop_lon,wheelchair_boarding\n"
        "A,Alpha,45,-75,1\n"
    )

    (row,) = parse_table(content, STOPS)

    assert row.stop_id == "A"
    assert row.stop_code is None


def test_bad_value_reports_file_line_and_column() -> None:
    content = "stop_id,stop_name,stop_lat,stop_lon\nA,Alpha,45,-75\nB,Beta,north,-75\n"

    with pytest.raises(TableParseError) as excinfo:
        parse_table(content, STOPS, source="stops.txt")

    assert excinfo.value.line == 3
    assert excinfo.value.column == "stop_lat"
    assert str(excinfo.value).startswith("stops.txt:3:")


def test_empty_required_identifier_is_rejected() -> None:
    content = "stop_id,stop_name,stop_lat,stop_lon\n,Nowhere,45,-75\n"

    with pytest.raises(TableParseError):
        parse_table(content, STOPS)


def test_calendar_flags_must_be_zero_or_one() -> None:
    content = (
        "service_id,monday,tuesday,wednesday,thursday,friday,saturday,sunday,"
        "start_date,end_date\n"
        "WKD,yes,1,1,1,1,0,0,20250106,20250331\n"
    )

    with pytest.raises(TableParseError):
        parse_table(content, CALENDAR)


def test_quoted_commas_are_not_supported() -> None:
    content = (
        "stop_id,stop_code,stop_name,stop_lat,stop_lon\n"
        '1,,"Main St, North",45.0,-75.0\n'
    )

    with pytest.raises(TableParseError):
        parse_table(content, STOPS)


def test_read_table_strips_a_byte_order_mark(tmp_path) -> None:
    path = tmp_path / "stops.txt"
    path.write_text(
        "stop_id,stop_name,stop_lat,stop_lon\nA,Alpha,45,-75\n", encoding="utf-8-sig"
    )

    (row,) = read_table(path, STOPS)

    assert row.stop_id == "A"


def test_read_table_missing_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        read_table(tmp_path / "stops.txt", STOPS)


def test_read_table_handles_crlf_files(tmp_path) -> None:
    path = tmp_path / "stops.txt"
    path.write_bytes(b"stop_id,stop_name,stop_lat,stop_lon\r\nA,Alpha,45,-75\r\n\r\n")

    (row,) = read_table(path, STOPS)

    assert row.stop_lon == -75.0


def test_unreadable_row_is_reported_as_parse_error() -> None:
    oversized = "x" * 200_000
    content = f"stop_id,stop_name,stop_lat,stop_lon\nA,{oversized},45,-75\n"

    with pytest.raises(TableParseError) as excinfo:
        parse_table(content, STOPS, source="stops.txt")

    assert excinfo.value.line == 2
