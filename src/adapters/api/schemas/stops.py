from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class StopSchema(BaseModel):
    stop_id: str
    code: str | None = None
    name: str
    location: GeoPointSchema


class StopTimeSchema(BaseModel):
    trip_id: str
    route_id: str
    arrival: datetime | None = None
    departure: datetime | None = None
    is_realtime: bool = False


class StopScheduleSchema(BaseModel):
    stop: StopSchema | None = None
    agency_timezone: str
    loaded_at: datetime
    snapshot: str | None = None
    # route_id -> stop times, in feed order
    routes: dict[str, list[StopTimeSchema]]
