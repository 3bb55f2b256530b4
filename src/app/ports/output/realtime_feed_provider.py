from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.realtime import FeedMessage


class IRealtimeFeedProvider(ABC):
    """Port for obtaining GTFS-Realtime feed messages."""

    @abstractmethod
    async def trip_updates(self) -> FeedMessage:
        raise NotImplementedError

    @abstractmethod
    async def vehicle_positions(self) -> FeedMessage:
        raise NotImplementedError
