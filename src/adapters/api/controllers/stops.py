from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from src.adapters.api.dependencies import get_schedule_manager
from src.adapters.api.schemas.stops import (
    GeoPointSchema,
    StopSchema,
    StopScheduleSchema,
    StopTimeSchema,
)
from src.app.services.schedule_cache_manager import ScheduleCacheManager
from src.domain.models import StopSchedule, TransitFeed

router = APIRouter(prefix="/stops", tags=["stops"])


def _published_feed(manager: ScheduleCacheManager) -> TransitFeed:
    feed = manager.feed
    if feed is None:
        raise HTTPException(status_code=503, detail="Schedule not loaded yet")
    return feed


def _schedule_to_schema(
    feed: TransitFeed, stop_id: str, schedule: StopSchedule, snapshot: str | None
) -> StopScheduleSchema:
    stop = feed.stops_by_id.get(stop_id)
    return StopScheduleSchema(
        stop=(
            StopSchema(
                stop_id=stop.id,
                code=stop.code,
                name=stop.name,
                location=GeoPointSchema(lat=stop.location.lat, lon=stop.location.lon),
            )
            if stop
            else None
        ),
        agency_timezone=feed.agency.timezone,
        loaded_at=feed.loaded_at,
        snapshot=snapshot,
        routes={
            route_id: [
                StopTimeSchema(
                    trip_id=st.trip_id,
                    route_id=st.route_id,
                    arrival=st.arrival,
                    departure=st.departure,
                    is_realtime=st.is_realtime,
                )
                for st in stop_times
            ]
            for route_id, stop_times in schedule.items()
        },
    )


@router.get("/{stop_id}/schedule", response_model=StopScheduleSchema)
def get_stop_schedule(
    stop_id: str,
    manager: ScheduleCacheManager = Depends(get_schedule_manager),
) -> StopScheduleSchema:
    feed = _published_feed(manager)
    schedule = feed.lookup_by_id(stop_id)
    if schedule is None:
        raise HTTPException(status_code=404, detail="No scheduled service at stop")
    return _schedule_to_schema(feed, stop_id, schedule, manager.current_snapshot)


@router.get("/by-code/{stop_code}/schedule", response_model=StopScheduleSchema)
def get_stop_schedule_by_code(
    stop_code: str,
    manager: ScheduleCacheManager = Depends(get_schedule_manager),
) -> StopScheduleSchema:
    feed = _published_feed(manager)
    schedule = feed.lookup_by_code(stop_code)
    if schedule is None:
        raise HTTPException(status_code=404, detail="No scheduled service at stop")
    stop_id = feed.stop_ids_by_code[stop_code]
    return _schedule_to_schema(feed, stop_id, schedule, manager.current_snapshot)
