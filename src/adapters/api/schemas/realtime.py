from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ArrivalSchema(BaseModel):
    trip_id: str | None = None
    route_id: str | None = None
    arrival_time: datetime | None = None
    schedule_relationship: str = "SCHEDULED"


class ArrivalsResponseSchema(BaseModel):
    stop_id: str
    fetched_at: datetime
    arrivals: list[ArrivalSchema]


class VehicleSchema(BaseModel):
    vehicle_id: str | None = None
    trip_id: str | None = None
    route_id: str | None = None
    lat: float
    lon: float
    bearing: float | None = None
    timestamp: datetime | None = None
    stop_id: str | None = None


class VehiclesResponseSchema(BaseModel):
    fetched_at: datetime
    vehicles: list[VehicleSchema]
