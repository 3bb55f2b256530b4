from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_SCHEDULE_URL = (
    "https://oct-gtfs-emasagcnfmcgeham.z01.azurefd.net/public-access/GTFSExport.zip"
)
DEFAULT_REALTIME_ROOT = "https://nextrip-public-api.azure-api.net/octranspo"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float | None) -> float | None:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    return float(raw)


@dataclass(frozen=True, slots=True)
class ScheduleRuntimeConfig:
    schedule_url: str
    cache_dir: str
    max_age_s: float
    check_interval_s: float
    download_timeout_s: float | None
    log_dir: str | None
    autostart: bool

    @staticmethod
    def from_env() -> "ScheduleRuntimeConfig":
        return ScheduleRuntimeConfig(
            schedule_url=os.getenv("GTFS_SCHEDULE_URL", DEFAULT_SCHEDULE_URL),
            cache_dir=os.getenv("GTFS_CACHE_DIR", "cache/schedule"),
            max_age_s=float(_env_float("GTFS_CACHE_MAX_AGE_S", 24 * 60 * 60)),
            check_interval_s=float(_env_float("GTFS_UPDATE_CHECK_INTERVAL_S", 60.0)),
            # No deadline unless configured: a stalled download stalls one cycle.
            download_timeout_s=_env_float("GTFS_SCHEDULE_TIMEOUT_S", None),
            log_dir=(os.getenv("GTFS_LOG_DIR") or "").strip() or None,
            autostart=_env_bool("GTFS_AUTOSTART", True),
        )


@dataclass(frozen=True, slots=True)
class RealtimeRuntimeConfig:
    trip_updates_url: str
    vehicle_positions_url: str
    api_key_env: str
    api_key_header: str
    timeout_s: float
    cache_ttl_s: float

    @staticmethod
    def from_env() -> "RealtimeRuntimeConfig":
        return RealtimeRuntimeConfig(
            trip_updates_url=os.getenv(
                "GTFS_RT_TRIP_UPDATES_URL",
                f"{DEFAULT_REALTIME_ROOT}/gtfs-rt-tp/beta/v1/TripUpdates",
            ),
            vehicle_positions_url=os.getenv(
                "GTFS_RT_VEHICLE_POSITIONS_URL",
                f"{DEFAULT_REALTIME_ROOT}/gtfs-rt-vp/beta/v1/VehiclePositions",
            ),
            api_key_env=os.getenv("GTFS_RT_API_KEY_ENV", "OC_TRANSPO_APP_KEY"),
            api_key_header=os.getenv(
                "GTFS_RT_API_KEY_HEADER", "Ocp-Apim-Subscription-Key"
            ),
            timeout_s=float(_env_float("GTFS_RT_TIMEOUT_S", 10.0)),
            cache_ttl_s=float(_env_float("GTFS_RT_CACHE_TTL_S", 25.0)),
        )
