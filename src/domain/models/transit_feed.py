from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Mapping

from .gtfs import Agency, FeedInfo, Service, StopSchedule, TransitRoute, Trip
from .stop import Stop

if TYPE_CHECKING:
    from .realtime import FeedMessage


@dataclass(frozen=True, slots=True)
class TransitFeed:
    """Calendar-resolved index of one schedule snapshot.

    Built once by ``build_transit_feed`` for a single load instant and never
    mutated afterwards; a newer snapshot produces a new instance. Every index
    is a read-only mapping and stop-time lists are tuples, so schedules handed
    out by the lookups are shared safely between readers.
    """

    agency: Agency
    feed_info: FeedInfo
    loaded_at: datetime
    stops_by_id: Mapping[str, Stop]
    stop_ids_by_code: Mapping[str, str]
    routes_by_id: Mapping[str, TransitRoute]
    trips_by_id: Mapping[str, Trip]
    services_by_id: Mapping[str, Service]
    active_service_ids: frozenset[str]
    schedules_by_stop: Mapping[str, StopSchedule]

    def lookup_by_id(self, stop_id: str) -> StopSchedule | None:
        return self.schedules_by_stop.get(stop_id)

    def lookup_by_code(self, stop_code: str) -> StopSchedule | None:
        stop_id = self.stop_ids_by_code.get(stop_code)
        if stop_id is None:
            return None
        return self.lookup_by_id(stop_id)

    def agency_local_now(self) -> datetime:
        from src.domain.algorithms.calendar import to_agency_time

        return to_agency_time(datetime.now().astimezone(), self.agency.timezone)

    def merge_realtime_update(self, update: FeedMessage) -> TransitFeed:
        """Extension point for folding realtime data into the schedule.

        Realtime merging is not supported; the schedule is returned as is.
        """

        return self
