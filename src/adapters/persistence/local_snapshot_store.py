from __future__ import annotations

import asyncio
import io
import os
import shutil
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.app.ports.output import ISnapshotStore

from .csv_table_reader import read_table
from .gtfs_table_schemas import SCHEMAS


@dataclass(slots=True)
class LocalSnapshotStore(ISnapshotStore):
    """Snapshots kept as extracted bundle directories under a local root.

    Layout: ``<root>/<file-safe ISO timestamp>/<table>.txt``.

    Env vars:
      - GTFS_CACHE_DIR: cache root (default: cache/schedule)

    Blocking filesystem work runs in worker threads.
    """

    root: str | Path | None = None

    def _root(self) -> Path:
        value = self.root or os.getenv("GTFS_CACHE_DIR") or "cache/schedule"
        return Path(value)

    def snapshot_path(self, name: str) -> Path:
        return self._root() / name

    def table_path(self, name: str, table: str) -> Path:
        return self.snapshot_path(name) / f"{table}.txt"

    async def ensure_root(self) -> None:
        await asyncio.to_thread(self._root().mkdir, parents=True, exist_ok=True)

    async def list_names(self) -> list[str]:
        return await asyncio.to_thread(lambda: sorted(os.listdir(self._root())))

    async def remove(self, name: str) -> None:
        await asyncio.to_thread(_remove_path, self.snapshot_path(name))

    async def extract(self, name: str, payload: bytes) -> None:
        await asyncio.to_thread(_extract_zip, payload, self.snapshot_path(name))

    async def read_table(self, name: str, table: str) -> tuple[Any, ...]:
        schema = SCHEMAS[table]
        return await asyncio.to_thread(read_table, self.table_path(name, table), schema)


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def _extract_zip(payload: bytes, target: Path) -> None:
    # A bad archive must not leave a snapshot directory behind.
    with zipfile.ZipFile(io.BytesIO(payload)) as archive:
        bad_member = archive.testzip()
        if bad_member is not None:
            raise zipfile.BadZipFile(f"Corrupt member in bundle: {bad_member}")

        created = not target.exists()
        target.mkdir(parents=True, exist_ok=True)
        try:
            archive.extractall(target)
        except Exception:
            if created:
                shutil.rmtree(target, ignore_errors=True)
            raise
