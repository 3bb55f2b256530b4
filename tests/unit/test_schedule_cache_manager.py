from __future__ import annotations

import asyncio
import logging
import zipfile
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone

import pytest

from src.app.services.schedule_cache_manager import ScheduleCacheManager
from src.domain.exceptions import SnapshotNotFoundError
from src.domain.models.records import (
    AgencyRecord,
    CalendarRecord,
    FeedInfoRecord,
    RouteRecord,
    ScheduleCache,
    StopRecord,
    StopTimeRecord,
    TripRecord,
)

NOW = datetime(2025, 1, 7, 15, 0, tzinfo=timezone.utc)
FRESH = "2025-01-07T14_00_00.000Z"
OLDER = "2025-01-07T09_30_00.000Z"
STALE = "2025-01-05T15_00_00.000Z"


def _schedule() -> ScheduleCache:
    return ScheduleCache(
        agency=(
            AgencyRecord(agency_name="OC Transpo", agency_timezone="America/Toronto"),
        ),
        feed_info=(FeedInfoRecord(feed_version="2025-01"),),
        calendar=(
            CalendarRecord(
                service_id="WKD",
                monday=True,
                tuesday=True,
                wednesday=True,
                thursday=True,
                friday=True,
                saturday=False,
                sunday=False,
                start_date=date(2025, 1, 6),
                end_date=date(2025, 3, 31),
            ),
        ),
        routes=(RouteRecord(route_id="75"),),
        stops=(
            StopRecord(
                stop_id="3836",
                stop_code="3014",
                stop_name="LINCOLN FIELDS",
                stop_lat=45.3662,
                stop_lon=-75.7833,
            ),
        ),
        trips=(TripRecord(route_id="75", service_id="WKD", trip_id="T1"),),
        stop_times=(
            StopTimeRecord(
                trip_id="T1",
                arrival_time="10:15:00",
                departure_time="10:15:00",
                stop_id="3836",
            ),
        ),
    )


@dataclass(slots=True)
class FakeBundleSource:
    fail: bool = False
    calls: int = 0
    payloads: list[bytes] = field(default_factory=list)

    async def fetch_bundle(self) -> bytes:
        self.calls += 1
        await asyncio.sleep(0)
        if self.fail:
            raise OSError("network unreachable")
        return self.payloads.pop(0) if self.payloads else b"PK-bundle"


@dataclass(slots=True)
class FakeSnapshotStore:
    template: ScheduleCache = field(default_factory=_schedule)
    snapshots: dict[str, ScheduleCache] = field(default_factory=dict)
    removed: list[str] = field(default_factory=list)
    fail_remove: bool = False
    roots_ensured: int = 0

    async def ensure_root(self) -> None:
        self.roots_ensured += 1

    async def list_names(self) -> list[str]:
        return sorted(self.snapshots)

    async def remove(self, name: str) -> None:
        if self.fail_remove:
            raise PermissionError(name)
        self.snapshots.pop(name, None)
        self.removed.append(name)

    async def extract(self, name: str, payload: bytes) -> None:
        if payload != b"PK-bundle":
            raise zipfile.BadZipFile("File is not a zip file")
        self.snapshots[name] = self.template

    async def read_table(self, name: str, table: str):
        return getattr(self.snapshots[name], table)


def _manager(
    store: FakeSnapshotStore, source: FakeBundleSource | None = None, now=NOW
) -> ScheduleCacheManager:
    return ScheduleCacheManager(
        bundle_source=source or FakeBundleSource(),
        snapshot_store=store,
        max_age_s=24 * 60 * 60,
        logger=logging.getLogger("test.schedule_cache"),
        now=lambda: now,
    )


def test_fresh_snapshot_needs_no_update_and_check_is_idempotent() -> None:
    store = FakeSnapshotStore(snapshots={FRESH: _schedule()})
    manager = _manager(store)

    first = asyncio.run(manager.check_for_update())
    second = asyncio.run(manager.check_for_update())

    assert first is False
    assert second is False
    assert store.removed == []


def test_stale_and_unparsable_entries_are_removed() -> None:
    store = FakeSnapshotStore(snapshots={STALE: _schedule(), "latest": _schedule()})
    manager = _manager(store)

    assert asyncio.run(manager.check_for_update()) is True
    assert sorted(store.removed) == [STALE, "latest"]
    assert store.snapshots == {}


def test_stale_entries_are_removed_but_fresh_one_is_kept() -> None:
    store = FakeSnapshotStore(snapshots={STALE: _schedule(), FRESH: _schedule()})
    manager = _manager(store)

    assert asyncio.run(manager.check_for_update()) is False
    assert store.removed == [STALE]


def test_empty_cache_downloads_and_publishes() -> None:
    store = FakeSnapshotStore()
    source = FakeBundleSource()
    manager = _manager(store, source)

    asyncio.run(manager.update())

    assert source.calls == 1
    assert store.roots_ensured == 1
    assert manager.current_snapshot == "2025-01-07T15_00_00.000Z"
    assert list(store.snapshots) == [manager.current_snapshot]
    assert manager.feed is not None
    schedule = manager.lookup_by_id("3836")
    assert schedule is not None
    assert [st.trip_id for st in schedule["75"]] == ["T1"]
    assert manager.lookup_by_code("3014") is schedule


def test_second_update_with_fresh_snapshot_does_nothing() -> None:
    store = FakeSnapshotStore()
    source = FakeBundleSource()
    manager = _manager(store, source)

    async def run() -> None:
        await manager.update()
        feed = manager.feed
        await manager.update()
        assert manager.feed is feed

    asyncio.run(run())

    assert source.calls == 1


def test_warm_restart_rebuilds_from_newest_snapshot_without_download() -> None:
    store = FakeSnapshotStore(snapshots={OLDER: _schedule(), FRESH: _schedule()})
    source = FakeBundleSource()
    manager = _manager(store, source)

    asyncio.run(manager.update())

    assert source.calls == 0
    assert manager.current_snapshot == FRESH
    assert manager.lookup_by_code("3014") is not None


def test_failed_download_keeps_previous_feed() -> None:
    store = FakeSnapshotStore()
    source = FakeBundleSource()
    manager = _manager(store, source)
    asyncio.run(manager.update())
    published = manager.feed
    snapshot = manager.current_snapshot

    # A day and a bit later the snapshot has expired and the network is down.
    manager.now = lambda: NOW + timedelta(days=1, minutes=1)
    source.fail = True
    asyncio.run(manager.update())

    assert source.calls == 2
    assert manager.feed is published
    assert manager.current_snapshot == snapshot


def test_unusable_snapshot_is_logged_and_nothing_is_published(caplog) -> None:
    store = FakeSnapshotStore(template=replace(_schedule(), agency=()))
    manager = _manager(store)

    with caplog.at_level(logging.ERROR, logger="test.schedule_cache"):
        asyncio.run(manager.update())

    assert manager.feed is None
    assert manager.current_snapshot is None
    assert manager.lookup_by_id("3836") is None
    assert "Schedule cache update failed" in caplog.text
    assert store.snapshots == {}


def test_failed_removal_aborts_the_cycle() -> None:
    store = FakeSnapshotStore(snapshots={STALE: _schedule()}, fail_remove=True)
    source = FakeBundleSource()
    manager = _manager(store, source)

    asyncio.run(manager.update())

    assert source.calls == 0
    assert manager.feed is None
    assert list(store.snapshots) == [STALE]


def test_concurrent_updates_download_once() -> None:
    store = FakeSnapshotStore()
    source = FakeBundleSource()

    async def run() -> None:
        manager = _manager(store, source)
        await asyncio.gather(manager.update(), manager.update())
        assert manager.feed is not None

    asyncio.run(run())

    assert source.calls == 1
    assert len(store.snapshots) == 1


def test_rebuild_without_snapshots_raises() -> None:
    manager = _manager(FakeSnapshotStore(snapshots={"latest": _schedule()}))

    with pytest.raises(SnapshotNotFoundError):
        asyncio.run(manager.rebuild())


def test_start_runs_an_update_immediately() -> None:
    store = FakeSnapshotStore()
    source = FakeBundleSource()

    async def run() -> None:
        manager = _manager(store, source)
        manager.check_interval_s = 3600.0
        await manager.start()
        assert manager.feed is not None
        manager.stop()

    asyncio.run(run())

    assert source.calls == 1


def test_bad_payload_is_discarded_and_retried_on_next_tick() -> None:
    store = FakeSnapshotStore()
    source = FakeBundleSource(payloads=[b"<html>maintenance</html>"])
    manager = _manager(store, source)

    asyncio.run(manager.update())

    assert manager.feed is None
    assert store.snapshots == {}

    manager.now = lambda: NOW + timedelta(minutes=1)
    asyncio.run(manager.update())

    assert source.calls == 2
    assert manager.feed is not None
    assert manager.current_snapshot == "2025-01-07T15_01_00.000Z"
    assert list(store.snapshots) == [manager.current_snapshot]
