from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from src.adapters.api.dependencies import get_realtime_view_service
from src.adapters.api.schemas.realtime import (
    ArrivalSchema,
    ArrivalsResponseSchema,
    VehicleSchema,
    VehiclesResponseSchema,
)
from src.app.services.realtime_view_service import RealtimeViewService

router = APIRouter(prefix="/realtime", tags=["realtime"])


@router.get("/stops/{stop_id}/arrivals", response_model=ArrivalsResponseSchema)
async def list_stop_arrivals(
    stop_id: str,
    route_id: str | None = Query(default=None),
    service: RealtimeViewService = Depends(get_realtime_view_service),
) -> ArrivalsResponseSchema:
    arrivals = await service.stop_arrivals(stop_id=stop_id, route_id=route_id)
    return ArrivalsResponseSchema(
        stop_id=stop_id,
        fetched_at=datetime.now(timezone.utc),
        arrivals=[
            ArrivalSchema(
                trip_id=a.trip_id,
                route_id=a.route_id,
                arrival_time=a.arrival_time,
                schedule_relationship=a.schedule_relationship,
            )
            for a in arrivals
        ],
    )


@router.get("/vehicles", response_model=VehiclesResponseSchema)
async def list_vehicles(
    route_id: list[str] | None = Query(default=None),
    service: RealtimeViewService = Depends(get_realtime_view_service),
) -> VehiclesResponseSchema:
    route_ids = set(route_id) if route_id else None
    vehicles = await service.list_vehicles(route_ids=route_ids)

    return VehiclesResponseSchema(
        fetched_at=datetime.now(timezone.utc),
        vehicles=[
            VehicleSchema(
                vehicle_id=v.vehicle_id,
                trip_id=v.trip_id,
                route_id=v.route_id,
                lat=v.lat,
                lon=v.lon,
                bearing=v.bearing,
                timestamp=v.timestamp,
                stop_id=v.stop_id,
            )
            for v in vehicles
        ],
    )
