from __future__ import annotations

from functools import lru_cache

from src.adapters.http.http_schedule_bundle_source import HttpScheduleBundleSource
from src.adapters.persistence import LocalSnapshotStore
from src.adapters.realtime.http_gtfs_realtime_feed_provider import (
    HttpGtfsRealtimeFeedProvider,
)
from src.adapters.settings import ScheduleRuntimeConfig
from src.app.services.realtime_view_service import RealtimeViewService
from src.app.services.schedule_cache_manager import ScheduleCacheManager


@lru_cache(maxsize=1)
def get_schedule_manager() -> ScheduleCacheManager:
    # One manager per process: it owns the cache directory and the published feed.
    cfg = ScheduleRuntimeConfig.from_env()
    return ScheduleCacheManager(
        bundle_source=HttpScheduleBundleSource(
            url=cfg.schedule_url, timeout_s=cfg.download_timeout_s
        ),
        snapshot_store=LocalSnapshotStore(root=cfg.cache_dir),
        max_age_s=cfg.max_age_s,
        check_interval_s=cfg.check_interval_s,
    )


@lru_cache(maxsize=1)
def get_realtime_view_service() -> RealtimeViewService:
    # Raises MissingCredentialError (not cached) until the API key is configured.
    return RealtimeViewService(feed_provider=HttpGtfsRealtimeFeedProvider())
