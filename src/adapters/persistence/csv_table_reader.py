"""Minimal reader for GTFS ``.txt`` tables.

Rows are read with ``csv.QUOTE_NONE``: quote characters are ordinary text, so
quoted fields containing commas or newlines are not supported.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Callable, Generic, Iterable, TypeVar

from src.domain.algorithms.calendar import parse_gtfs_date
from src.domain.exceptions import TableParseError

R = TypeVar("R")


@dataclass(frozen=True, slots=True)
class Column:
    name: str
    parse: Callable[[str], Any]


@dataclass(frozen=True)
class TableSchema(Generic[R]):
    """Ordered column list plus the record type the parsed values build."""

    record_type: Callable[..., R]
    columns: tuple[Column, ...]


def identifier(raw: str) -> str:
    value = raw.strip()
    if not value:
        raise ValueError("required value is empty")
    return value


def text(raw: str) -> str:
    return raw.strip()


def optional_text(raw: str) -> str | None:
    return raw.strip() or None


def integer(raw: str) -> int:
    return int(raw.strip())


def optional_integer(raw: str) -> int | None:
    value = raw.strip()
    return int(value) if value else None


def decimal(raw: str) -> float:
    return float(raw.strip())


def optional_decimal(raw: str) -> float | None:
    value = raw.strip()
    return float(value) if value else None


def flag(raw: str) -> bool:
    value = raw.strip()
    if value in ("", "0"):
        return False
    if value == "1":
        return True
    raise ValueError(f"expected 0 or 1, got {raw!r}")


def gtfs_date(raw: str) -> date:
    return parse_gtfs_date(raw)


def optional_gtfs_date(raw: str) -> date | None:
    return parse_gtfs_date(raw) if raw.strip() else None


def parse_table(
    content: str, schema: TableSchema[R], *, source: str = "<string>"
) -> tuple[R, ...]:
    return parse_lines(io.StringIO(content, newline=""), schema, source=source)


def read_table(path: str | Path, schema: TableSchema[R]) -> tuple[R, ...]:
    path = Path(path)
    with path.open("r", encoding="utf-8-sig", newline="") as fp:
        return parse_lines(fp, schema, source=str(path))


def parse_lines(
    lines: Iterable[str], schema: TableSchema[R], *, source: str
) -> tuple[R, ...]:
    """Cast every data row of a table through its schema.

    The first row is the header; blank rows are skipped and missing trailing
    columns read as empty.
    """

    reader = csv.reader(lines, quoting=csv.QUOTE_NONE)
    records: list[R] = []
    try:
        header = next(reader, None)
        if header is None:
            return ()
        names = [name.strip() for name in header]
        if names:
            names[0] = names[0].lstrip("\ufeff")
        position = {name: i for i, name in enumerate(names)}

        for values in reader:
            if not any(v.strip() for v in values):
                continue
            kwargs: dict[str, Any] = {}
            for column in schema.columns:
                i = position.get(column.name)
                raw = values[i] if i is not None and i < len(values) else ""
                try:
                    kwargs[column.name] = column.parse(raw)
                except ValueError as exc:
                    raise TableParseError(
                        source, reader.line_num, column.name, str(exc)
                    ) from exc
            records.append(schema.record_type(**kwargs))
    except csv.Error as exc:
        raise TableParseError(source, reader.line_num, "<row>", str(exc)) from exc

    return tuple(records)
