from .gtfs import (
    Agency,
    ExceptionType,
    FeedInfo,
    Service,
    ServiceException,
    StopSchedule,
    StopTime,
    TransitRoute,
    Trip,
)
from .realtime import FeedMessage, RealtimeArrival, RealtimeVehicle
from .records import ScheduleCache
from .stop import GeoPoint, Stop
from .transit_feed import TransitFeed

__all__ = [
    "Agency",
    "ExceptionType",
    "FeedInfo",
    "FeedMessage",
    "GeoPoint",
    "RealtimeArrival",
    "RealtimeVehicle",
    "ScheduleCache",
    "Service",
    "ServiceException",
    "Stop",
    "StopSchedule",
    "StopTime",
    "TransitFeed",
    "TransitRoute",
    "Trip",
]
