from __future__ import annotations

from abc import ABC, abstractmethod


class IScheduleBundleSource(ABC):
    """Port for fetching the published GTFS schedule bundle (a zip archive)."""

    @abstractmethod
    async def fetch_bundle(self) -> bytes:
        raise NotImplementedError
