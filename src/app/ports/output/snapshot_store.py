from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ISnapshotStore(ABC):
    """Persistence port for timestamp-named schedule snapshot directories."""

    @abstractmethod
    async def ensure_root(self) -> None:
        """Create the cache root if missing; existing roots are left alone."""

    @abstractmethod
    async def list_names(self) -> list[str]:
        """Names of every entry directly under the cache root."""

    @abstractmethod
    async def remove(self, name: str) -> None:
        """Delete a snapshot (or stray file) from the cache root."""

    @abstractmethod
    async def extract(self, name: str, payload: bytes) -> None:
        """Unpack a bundle archive into the named snapshot, overwriting files."""

    @abstractmethod
    async def read_table(self, name: str, table: str) -> tuple[Any, ...]:
        """Parse one ``<table>.txt`` of a snapshot into typed records."""
