from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class FeedHeader:
    gtfs_realtime_version: str
    incrementality: str = "FULL_DATASET"
    timestamp: datetime | None = None
    feed_version: str | None = None


@dataclass(frozen=True, slots=True)
class TripDescriptor:
    trip_id: str | None = None
    route_id: str | None = None
    start_time: str | None = None
    start_date: str | None = None
    schedule_relationship: str = "SCHEDULED"


@dataclass(frozen=True, slots=True)
class StopTimeUpdate:
    stop_id: str | None
    stop_sequence: int | None = None
    arrival_time: datetime | None = None
    schedule_relationship: str = "SCHEDULED"


@dataclass(frozen=True, slots=True)
class TripUpdate:
    trip: TripDescriptor
    stop_time_updates: tuple[StopTimeUpdate, ...] = ()


@dataclass(frozen=True, slots=True)
class RealtimeVehicle:
    vehicle_id: str | None
    trip_id: str | None
    route_id: str | None
    lat: float
    lon: float
    bearing: float | None = None
    timestamp: datetime | None = None
    stop_id: str | None = None


@dataclass(frozen=True, slots=True)
class FeedEntity:
    id: str
    is_deleted: bool = False
    trip_update: TripUpdate | None = None
    vehicle: RealtimeVehicle | None = None


@dataclass(frozen=True, slots=True)
class FeedMessage:
    header: FeedHeader
    entities: tuple[FeedEntity, ...] = field(default_factory=tuple)

    def trip_updates(self) -> tuple[TripUpdate, ...]:
        return tuple(e.trip_update for e in self.entities if e.trip_update)

    def vehicles(self) -> tuple[RealtimeVehicle, ...]:
        return tuple(e.vehicle for e in self.entities if e.vehicle)


@dataclass(frozen=True, slots=True)
class RealtimeArrival:
    """A predicted arrival at one stop, flattened out of a trip update."""

    stop_id: str
    trip_id: str | None
    route_id: str | None
    arrival_time: datetime | None
    schedule_relationship: str = "SCHEDULED"
