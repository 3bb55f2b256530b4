from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

import httpx

from src.adapters.settings import DEFAULT_SCHEDULE_URL
from src.app.ports.output import IScheduleBundleSource

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Cache-Control": "no-cache",
    "Content-Type": "application/octet-stream",
}


@dataclass(slots=True)
class HttpScheduleBundleSource(IScheduleBundleSource):
    """Downloads the GTFS static bundle over HTTP.

    Env vars:
      - GTFS_SCHEDULE_URL: bundle URL (default: OC Transpo GTFS export)

    ``timeout_s=None`` disables the request deadline.
    """

    url: str = field(
        default_factory=lambda: os.getenv("GTFS_SCHEDULE_URL", DEFAULT_SCHEDULE_URL)
    )
    headers: dict[str, str] = field(default_factory=dict)
    timeout_s: float | None = None
    transport: httpx.AsyncBaseTransport | None = None

    async def fetch_bundle(self) -> bytes:
        async with httpx.AsyncClient(
            timeout=self.timeout_s, follow_redirects=True, transport=self.transport
        ) as client:
            resp = await client.get(
                self.url, headers={**DEFAULT_HEADERS, **self.headers}
            )
            resp.raise_for_status()
            content = resp.content

        logger.info(
            "Downloaded schedule bundle from %s (%d bytes)", self.url, len(content)
        )
        return content
