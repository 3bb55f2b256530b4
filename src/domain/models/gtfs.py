from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Mapping


class ExceptionType(int, Enum):
    """calendar_dates.txt exception_type values."""

    ADDED = 1
    REMOVED = 2


@dataclass(frozen=True, slots=True)
class Agency:
    name: str
    timezone: str
    agency_id: str | None = None


@dataclass(frozen=True, slots=True)
class FeedInfo:
    """Validity window of the published feed, in agency-local time."""

    start: datetime | None
    end: datetime | None
    version: str | None = None


@dataclass(frozen=True, slots=True)
class TransitRoute:
    # Identity only; the richer routes.txt columns stay in the table records.
    route_id: str


@dataclass(frozen=True, slots=True)
class Service:
    """A calendar.txt service with its weekday vector ordered Sunday..Saturday."""

    service_id: str
    start: datetime
    end: datetime
    weekdays: tuple[bool, bool, bool, bool, bool, bool, bool]

    @property
    def start_date(self) -> date:
        return self.start.date()

    def active_weekdays(self) -> frozenset[int]:
        return frozenset(i for i, active in enumerate(self.weekdays) if active)

    def runs_on_weekday(self, weekday: int) -> bool:
        return self.weekdays[weekday]


@dataclass(frozen=True, slots=True)
class ServiceException:
    service_id: str
    date: date
    exception_type: ExceptionType


@dataclass(frozen=True, slots=True)
class Trip:
    trip_id: str
    service_id: str
    route_id: str
    headsign: str | None = None


@dataclass(frozen=True, slots=True)
class StopTime:
    """A scheduled call of a trip at a stop.

    Times are absolute, agency-local instants (None when the row left them blank).
    """

    stop_id: str
    route_id: str
    trip_id: str
    arrival: datetime | None = None
    departure: datetime | None = None
    is_realtime: bool = False


# route_id -> stop times in file order; read-only once built
StopSchedule = Mapping[str, tuple[StopTime, ...]]
