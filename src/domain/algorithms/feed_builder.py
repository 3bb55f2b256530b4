from __future__ import annotations

import logging
from datetime import datetime
from types import MappingProxyType

from src.domain.algorithms.calendar import (
    agency_midnight,
    apply_gtfs_time,
    local_weekday,
    to_agency_time,
)
from src.domain.exceptions import FeedConstructionError
from src.domain.models import (
    Agency,
    ExceptionType,
    FeedInfo,
    GeoPoint,
    ScheduleCache,
    Service,
    ServiceException,
    Stop,
    StopSchedule,
    StopTime,
    TransitFeed,
    TransitRoute,
    Trip,
)

_log = logging.getLogger(__name__)


def build_transit_feed(
    cache: ScheduleCache,
    loaded_at: datetime,
    *,
    logger: logging.Logger | None = None,
) -> TransitFeed:
    """Resolve one snapshot's tables into a stop -> route -> stop times index.

    Only services running on the agency-local day of ``loaded_at`` (after
    calendar_dates overrides) contribute stop times. Rows with dangling trip,
    service or route references are skipped with a warning.

    Raises:
        FeedConstructionError: the snapshot has no agency or feed_info row, or
            the agency timezone is unknown.
    """

    log = logger or _log

    if not cache.agency:
        raise FeedConstructionError("Schedule has no agency.txt rows")
    if not cache.feed_info:
        raise FeedConstructionError("Schedule has no feed_info.txt rows")

    agency_row = cache.agency[0]
    tz_name = agency_row.agency_timezone.strip()
    try:
        local_now = to_agency_time(loaded_at, tz_name)
    except (KeyError, ValueError) as exc:
        raise FeedConstructionError(f"Unknown agency timezone: {tz_name!r}") from exc

    agency = Agency(
        name=agency_row.agency_name,
        timezone=tz_name,
        agency_id=agency_row.agency_id,
    )
    feed_info = _feed_info(cache, tz_name)

    stops_by_id: dict[str, Stop] = {}
    stop_ids_by_code: dict[str, str] = {}
    for row in cache.stops:
        try:
            location = GeoPoint(lat=row.stop_lat, lon=row.stop_lon)
        except ValueError as exc:
            log.warning("Skipping stop %s: %s", row.stop_id, exc)
            continue
        stops_by_id[row.stop_id] = Stop(
            id=row.stop_id, name=row.stop_name, location=location, code=row.stop_code
        )
        if row.stop_code:
            stop_ids_by_code[row.stop_code] = row.stop_id

    routes_by_id = {r.route_id: TransitRoute(route_id=r.route_id) for r in cache.routes}
    trips_by_id = {
        t.trip_id: Trip(
            trip_id=t.trip_id,
            service_id=t.service_id,
            route_id=t.route_id,
            headsign=t.trip_headsign,
        )
        for t in cache.trips
    }

    services_by_id = {
        c.service_id: Service(
            service_id=c.service_id,
            start=agency_midnight(c.start_date, tz_name),
            end=agency_midnight(c.end_date, tz_name),
            weekdays=c.weekday_vector(),
        )
        for c in cache.calendar
    }

    weekday = local_weekday(local_now)
    active = {
        sid
        for sid, service in services_by_id.items()
        if service.runs_on_weekday(weekday)
    }
    _apply_exceptions(
        active, services_by_id, _exceptions_on(cache, local_now, log), log
    )

    schedules: dict[str, dict[str, list[StopTime]]] = {}
    kept = 0
    dropped = 0
    for row in cache.stop_times:
        trip = trips_by_id.get(row.trip_id)
        if trip is None:
            log.warning("stop_times row references unknown trip %s", row.trip_id)
            dropped += 1
            continue

        service = services_by_id.get(trip.service_id)
        if service is None:
            log.warning(
                "Trip %s references unknown service %s", trip.trip_id, trip.service_id
            )
            dropped += 1
            continue

        if service.service_id not in active:
            continue

        if trip.route_id not in routes_by_id:
            log.warning(
                "Trip %s references unknown route %s", trip.trip_id, trip.route_id
            )
            dropped += 1
            continue

        if not row.stop_id:
            log.warning("stop_times row for trip %s has no stop_id", trip.trip_id)
            dropped += 1
            continue

        try:
            arrival = apply_gtfs_time(service.start_date, row.arrival_time, tz_name)
            departure = apply_gtfs_time(
                service.start_date, row.departure_time, tz_name
            )
        except ValueError as exc:
            log.warning("Skipping stop_times row for trip %s: %s", trip.trip_id, exc)
            dropped += 1
            continue

        stop_time = StopTime(
            stop_id=row.stop_id,
            route_id=trip.route_id,
            trip_id=trip.trip_id,
            arrival=arrival,
            departure=departure,
        )
        schedules.setdefault(row.stop_id, {}).setdefault(trip.route_id, []).append(
            stop_time
        )
        kept += 1

    log.info(
        "Built transit feed for %s (%s): %d active services, %d stop times, %d dropped",
        agency.name,
        local_now.date().isoformat(),
        len(active),
        kept,
        dropped,
    )

    return TransitFeed(
        agency=agency,
        feed_info=feed_info,
        loaded_at=local_now,
        stops_by_id=MappingProxyType(stops_by_id),
        stop_ids_by_code=MappingProxyType(stop_ids_by_code),
        routes_by_id=MappingProxyType(routes_by_id),
        trips_by_id=MappingProxyType(trips_by_id),
        services_by_id=MappingProxyType(services_by_id),
        active_service_ids=frozenset(active),
        schedules_by_stop=_freeze(schedules),
    )


def _feed_info(cache: ScheduleCache, tz_name: str) -> FeedInfo:
    row = cache.feed_info[0]
    return FeedInfo(
        start=agency_midnight(row.feed_start_date, tz_name)
        if row.feed_start_date
        else None,
        end=agency_midnight(row.feed_end_date, tz_name) if row.feed_end_date else None,
        version=row.feed_version,
    )


def _exceptions_on(
    cache: ScheduleCache, local_now: datetime, log: logging.Logger
) -> list[ServiceException]:
    today = local_now.date()
    out: list[ServiceException] = []
    for row in cache.calendar_dates:
        if row.date != today:
            continue
        try:
            kind = ExceptionType(row.exception_type)
        except ValueError:
            log.warning(
                "Ignoring calendar_dates row for %s with exception_type %s",
                row.service_id,
                row.exception_type,
            )
            continue
        out.append(
            ServiceException(
                service_id=row.service_id, date=row.date, exception_type=kind
            )
        )
    return out


def _apply_exceptions(
    active: set[str],
    services_by_id: dict[str, Service],
    exceptions: list[ServiceException],
    log: logging.Logger,
) -> None:
    # Additions first, then removals; both are checked against every declared
    # service, not just the weekday-active ones.
    for exc in exceptions:
        if exc.exception_type is not ExceptionType.ADDED:
            continue
        if exc.service_id not in services_by_id:
            log.warning("calendar_dates adds unknown service %s", exc.service_id)
            continue
        active.add(exc.service_id)

    for exc in exceptions:
        if exc.exception_type is not ExceptionType.REMOVED:
            continue
        if exc.service_id not in services_by_id:
            log.warning("calendar_dates removes unknown service %s", exc.service_id)
            continue
        active.discard(exc.service_id)


def _freeze(
    schedules: dict[str, dict[str, list[StopTime]]],
) -> MappingProxyType[str, StopSchedule]:
    return MappingProxyType(
        {
            stop_id: MappingProxyType(
                {route_id: tuple(times) for route_id, times in by_route.items()}
            )
            for stop_id, by_route in schedules.items()
        }
    )
