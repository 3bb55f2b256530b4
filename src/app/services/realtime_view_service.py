from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from src.app.ports.output import IRealtimeFeedProvider
from src.domain.models.realtime import RealtimeArrival, RealtimeVehicle

_NEVER = datetime.max.replace(tzinfo=timezone.utc)


@dataclass(slots=True)
class RealtimeViewService:
    """Read-only views over the GTFS-Realtime feeds.

    - Predicted arrivals at a stop, optionally for a single route.
    - Vehicle positions, optionally filtered by route.
    """

    feed_provider: IRealtimeFeedProvider

    async def stop_arrivals(
        self, *, stop_id: str, route_id: str | None = None
    ) -> tuple[RealtimeArrival, ...]:
        message = await self.feed_provider.trip_updates()

        arrivals: list[RealtimeArrival] = []
        for update in message.trip_updates():
            if route_id and update.trip.route_id != route_id:
                continue
            for stu in update.stop_time_updates:
                if stu.stop_id != stop_id:
                    continue
                arrivals.append(
                    RealtimeArrival(
                        stop_id=stop_id,
                        trip_id=update.trip.trip_id,
                        route_id=update.trip.route_id,
                        arrival_time=stu.arrival_time,
                        schedule_relationship=stu.schedule_relationship,
                    )
                )

        # Unknown arrival times sort last.
        arrivals.sort(key=lambda a: a.arrival_time or _NEVER)
        return tuple(arrivals)

    async def list_vehicles(
        self, *, route_ids: set[str] | None = None
    ) -> tuple[RealtimeVehicle, ...]:
        message = await self.feed_provider.vehicle_positions()
        vehicles = message.vehicles()
        if route_ids:
            vehicles = tuple(
                v for v in vehicles if v.route_id and v.route_id in route_ids
            )
        return vehicles
