from __future__ import annotations

import asyncio
import os
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

import httpx
from google.protobuf.json_format import MessageToDict
from google.transit import gtfs_realtime_pb2

from src.adapters.settings import RealtimeRuntimeConfig
from src.app.ports.output import IRealtimeFeedProvider
from src.domain.exceptions import MissingCredentialError
from src.domain.models.realtime import (
    FeedEntity,
    FeedHeader,
    FeedMessage,
    RealtimeVehicle,
    StopTimeUpdate,
    TripDescriptor,
    TripUpdate,
)


@dataclass(slots=True)
class _CachedFeed:
    fetched_at_monotonic: float
    message: FeedMessage


@dataclass(slots=True)
class HttpGtfsRealtimeFeedProvider(IRealtimeFeedProvider):
    """Fetches GTFS-Realtime TripUpdates and VehiclePositions over HTTP.

    Env vars (see RealtimeRuntimeConfig):
      - GTFS_RT_TRIP_UPDATES_URL / GTFS_RT_VEHICLE_POSITIONS_URL
      - OC_TRANSPO_APP_KEY: subscription key (required; name set by GTFS_RT_API_KEY_ENV)
      - GTFS_RT_HEADERS: extra headers, as 'Key:Value;Key2:Value2'
      - GTFS_RT_TIMEOUT_S / GTFS_RT_CACHE_TTL_S

    Notes:
      - A missing subscription key fails construction, not the first request.
      - Cache is per-process and per-feed.
    """

    config: RealtimeRuntimeConfig = field(
        default_factory=RealtimeRuntimeConfig.from_env
    )
    api_key: str | None = None
    headers_raw: str | None = None
    transport: httpx.AsyncBaseTransport | None = None

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _cache: dict[str, _CachedFeed] = field(
        default_factory=dict, init=False, repr=False
    )
    _key_headers: dict[str, str] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.api_key is None:
            self.api_key = (os.getenv(self.config.api_key_env) or "").strip() or None
        if not self.api_key:
            raise MissingCredentialError(
                f"{self.config.api_key_env} environment variable missing"
            )
        if self.headers_raw is None:
            self.headers_raw = os.getenv("GTFS_RT_HEADERS")
        self._key_headers = {self.config.api_key_header: self.api_key}

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        for part in (self.headers_raw or "").split(";"):
            part = part.strip()
            if not part or ":" not in part:
                continue
            k, v = part.split(":", 1)
            k = k.strip()
            if k:
                headers[k] = v.strip()
        headers.update(self._key_headers)
        return headers

    async def trip_updates(self) -> FeedMessage:
        return await self._fetch(self.config.trip_updates_url)

    async def vehicle_positions(self) -> FeedMessage:
        return await self._fetch(self.config.vehicle_positions_url)

    async def _fetch(self, url: str) -> FeedMessage:
        async with self._lock:
            cached = self._cache.get(url)
            if (
                cached is not None
                and (time.monotonic() - cached.fetched_at_monotonic)
                < self.config.cache_ttl_s
            ):
                return cached.message

            async with httpx.AsyncClient(
                timeout=self.config.timeout_s, transport=self.transport
            ) as client:
                resp = await client.get(url, headers=self._headers())
                resp.raise_for_status()
                content = resp.content

            message = feed_message_from_tree(decode_feed_message(content))
            self._cache[url] = _CachedFeed(time.monotonic(), message)
            return message


def decode_feed_message(content: bytes) -> dict[str, Any]:
    """Decode a GTFS-Realtime FeedMessage into a JSON-like tree.

    Keys keep their proto field names (``trip_update``, ``stop_time_update``);
    enums are rendered by name and uint64 values as strings.
    """

    feed = gtfs_realtime_pb2.FeedMessage()
    feed.ParseFromString(content)
    return MessageToDict(feed, preserving_proto_field_name=True)


def feed_message_from_tree(tree: Mapping[str, Any]) -> FeedMessage:
    header = tree.get("header") or {}
    return FeedMessage(
        header=FeedHeader(
            gtfs_realtime_version=str(header.get("gtfs_realtime_version", "")),
            incrementality=header.get("incrementality", "FULL_DATASET"),
            timestamp=_timestamp(header.get("timestamp")),
            feed_version=header.get("feed_version") or None,
        ),
        entities=tuple(_entity(e) for e in tree.get("entity") or ()),
    )


def _timestamp(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    value = int(raw)
    if value <= 0:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


def _trip(raw: Mapping[str, Any]) -> TripDescriptor:
    return TripDescriptor(
        trip_id=raw.get("trip_id") or None,
        route_id=raw.get("route_id") or None,
        start_time=raw.get("start_time") or None,
        start_date=raw.get("start_date") or None,
        schedule_relationship=raw.get("schedule_relationship", "SCHEDULED"),
    )


def _entity(raw: Mapping[str, Any]) -> FeedEntity:
    trip_update = None
    if "trip_update" in raw:
        tu = raw["trip_update"]
        trip_update = TripUpdate(
            trip=_trip(tu.get("trip") or {}),
            stop_time_updates=tuple(
                StopTimeUpdate(
                    stop_id=stu.get("stop_id") or None,
                    stop_sequence=(
                        int(stu["stop_sequence"]) if "stop_sequence" in stu else None
                    ),
                    arrival_time=_timestamp((stu.get("arrival") or {}).get("time")),
                    schedule_relationship=stu.get(
                        "schedule_relationship", "SCHEDULED"
                    ),
                )
                for stu in tu.get("stop_time_update") or ()
            ),
        )

    vehicle = None
    if "vehicle" in raw and "position" in raw["vehicle"]:
        v = raw["vehicle"]
        pos = v["position"]
        trip = _trip(v.get("trip") or {})
        vehicle = RealtimeVehicle(
            vehicle_id=(v.get("vehicle") or {}).get("id") or None,
            trip_id=trip.trip_id,
            route_id=trip.route_id,
            lat=float(pos.get("latitude", 0.0)),
            lon=float(pos.get("longitude", 0.0)),
            bearing=float(pos["bearing"]) if "bearing" in pos else None,
            timestamp=_timestamp(v.get("timestamp")),
            stop_id=v.get("stop_id") or None,
        )

    return FeedEntity(
        id=str(raw.get("id", "")),
        is_deleted=bool(raw.get("is_deleted", False)),
        trip_update=trip_update,
        vehicle=vehicle,
    )
