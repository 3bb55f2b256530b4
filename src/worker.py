from __future__ import annotations

import asyncio
import logging
import signal

from src.adapters.http.http_schedule_bundle_source import HttpScheduleBundleSource
from src.adapters.logging_config import configure_logging
from src.adapters.persistence import LocalSnapshotStore
from src.adapters.settings import ScheduleRuntimeConfig
from src.app.services.schedule_cache_manager import ScheduleCacheManager

logger = logging.getLogger("transit.worker")


async def run(cfg: ScheduleRuntimeConfig) -> None:
    manager = ScheduleCacheManager(
        bundle_source=HttpScheduleBundleSource(
            url=cfg.schedule_url, timeout_s=cfg.download_timeout_s
        ),
        snapshot_store=LocalSnapshotStore(root=cfg.cache_dir),
        max_age_s=cfg.max_age_s,
        check_interval_s=cfg.check_interval_s,
        logger=logger,
    )

    stop_requested = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_requested.set)
        except NotImplementedError:
            # Windows event loops have no signal handler support.
            pass

    await manager.start()

    feed = manager.feed
    if feed is not None:
        logger.info(
            "Serving %s schedule from %s (%d stops with service today)",
            feed.agency.name,
            manager.current_snapshot,
            len(feed.schedules_by_stop),
        )

    await stop_requested.wait()
    manager.stop()


def main() -> None:
    cfg = ScheduleRuntimeConfig.from_env()
    configure_logging(cfg.log_dir)
    logger.info("Application start")
    asyncio.run(run(cfg))


if __name__ == "__main__":
    main()
