from __future__ import annotations

from datetime import datetime, timezone


def iso_timestamp(*, file_safe: bool = False, now: datetime | None = None) -> str:
    """UTC ISO-8601 timestamp with millisecond precision, e.g. 2025-01-31T08:15:00.123Z.

    With ``file_safe`` every ``:`` is replaced by ``_`` so the value can be used
    as a directory name on any filesystem.
    """

    instant = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    value = instant.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return value.replace(":", "_") if file_safe else value


def parse_iso_timestamp(value: str) -> datetime | None:
    """Inverse of ``iso_timestamp``; returns None for anything unparsable.

    Naive timestamps are read as UTC.
    """

    raw = value.strip().replace("_", ":")
    if not raw:
        return None
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
