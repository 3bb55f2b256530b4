from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from src.app.ports.output import IScheduleBundleSource, ISnapshotStore
from src.app.services.task_scheduler import TaskScheduler
from src.domain.algorithms.feed_builder import build_transit_feed
from src.domain.algorithms.timestamps import iso_timestamp, parse_iso_timestamp
from src.domain.exceptions import SnapshotNotFoundError
from src.domain.models import ScheduleCache, StopSchedule, TransitFeed
from src.domain.models.records import TABLE_NAMES


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class ScheduleCacheManager:
    """Keeps a fresh on-disk schedule snapshot and the feed model built from it.

    Each ``update()`` cycle:
      1) ensures the cache root exists;
      2) removes snapshots whose timestamp name is unparsable or older than
         ``max_age_s``;
      3) downloads and extracts a new snapshot when none survived;
      4) rebuilds the in-memory feed after a download, or when no feed has
         been published yet (e.g. after a restart with a warm disk cache).

    A downloaded snapshot that fails to extract or build is removed again,
    so the next tick retries the download.

    Failures are logged and never escape ``update()``; the last published
    feed keeps serving until a rebuild succeeds.
    """

    bundle_source: IScheduleBundleSource
    snapshot_store: ISnapshotStore
    max_age_s: float = 24 * 60 * 60
    check_interval_s: float = 60.0
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger(__name__)
    )
    now: Callable[[], datetime] = _utc_now

    _feed: TransitFeed | None = field(default=None, init=False, repr=False)
    _current_snapshot: str | None = field(default=None, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _scheduler: TaskScheduler | None = field(default=None, init=False, repr=False)

    @property
    def feed(self) -> TransitFeed | None:
        return self._feed

    @property
    def current_snapshot(self) -> str | None:
        """Snapshot the published feed was built from."""

        return self._current_snapshot

    def lookup_by_id(self, stop_id: str) -> StopSchedule | None:
        feed = self._feed
        return feed.lookup_by_id(stop_id) if feed is not None else None

    def lookup_by_code(self, stop_code: str) -> StopSchedule | None:
        feed = self._feed
        return feed.lookup_by_code(stop_code) if feed is not None else None

    async def start(self) -> None:
        if self._scheduler is None:
            self._scheduler = TaskScheduler(
                self.check_interval_s, self.update, logger=self.logger
            )
        self.logger.info("Schedule manager started")
        await self._scheduler.start()

    def stop(self) -> None:
        if self._scheduler is not None:
            self._scheduler.stop()
            self.logger.info("Schedule manager stopped")

    async def update(self) -> None:
        async with self._lock:
            try:
                await self.snapshot_store.ensure_root()

                if await self.check_for_update():
                    snapshot = iso_timestamp(file_safe=True, now=self.now())
                    payload = await self.bundle_source.fetch_bundle()
                    try:
                        await self.snapshot_store.extract(snapshot, payload)
                        self.logger.info(
                            "Schedule file system cache updated: %s", snapshot
                        )
                        await self.rebuild(snapshot)
                    except Exception:
                        # A snapshot that cannot be extracted or built is removed.
                        await self._discard(snapshot)
                        raise
                elif self._feed is None:
                    await self.rebuild()
            except Exception:
                self.logger.exception("Schedule cache update failed")

    async def check_for_update(self) -> bool:
        """Expire stale snapshots; True when no valid snapshot remains."""

        names = await self.snapshot_store.list_names()
        if not names:
            return True

        now = self.now()
        flagged = [name for name in names if self._is_expired(name, now)]

        # One failed removal fails the whole cycle.
        await asyncio.gather(*(self.snapshot_store.remove(name) for name in flagged))
        for name in flagged:
            self.logger.info("Removed expired schedule snapshot %s", name)

        return len(flagged) >= len(names)

    async def rebuild(self, snapshot: str | None = None) -> TransitFeed:
        """Load every table of a snapshot in parallel and publish a new feed.

        Without an explicit snapshot the newest valid one on disk is used.
        """

        name = snapshot or await self._newest_snapshot()

        tables = await asyncio.gather(
            *(self.snapshot_store.read_table(name, table) for table in TABLE_NAMES)
        )
        cache = ScheduleCache(**dict(zip(TABLE_NAMES, tables)))
        for table, rows in zip(TABLE_NAMES, tables):
            self.logger.debug("Schedule table %s/%s: %d rows", name, table, len(rows))

        feed = await asyncio.to_thread(
            build_transit_feed, cache, self.now(), logger=self.logger
        )

        self._feed = feed
        self._current_snapshot = name
        self.logger.info("Schedule %s cached into memory", name)
        return feed

    async def _discard(self, name: str) -> None:
        self.logger.warning("Discarding unusable schedule snapshot %s", name)
        try:
            await self.snapshot_store.remove(name)
        except Exception:
            self.logger.exception("Could not remove schedule snapshot %s", name)

    def _is_expired(self, name: str, now: datetime) -> bool:
        created_at = parse_iso_timestamp(name)
        if created_at is None:
            return True
        return (now - created_at).total_seconds() > self.max_age_s

    async def _newest_snapshot(self) -> str:
        candidates: list[tuple[datetime, str]] = []
        for name in await self.snapshot_store.list_names():
            created_at = parse_iso_timestamp(name)
            if created_at is not None:
                candidates.append((created_at, name))

        if not candidates:
            raise SnapshotNotFoundError("No schedule snapshot directory to load")
        return max(candidates)[1]
