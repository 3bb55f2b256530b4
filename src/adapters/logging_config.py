"""Process-wide logging setup for the API and the worker.

Console output always goes to stdout; with a log directory each process
also appends to its own ``<log_dir>/<start timestamp>.log``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from src.domain.algorithms.timestamps import iso_timestamp

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(
    log_dir: str | Path | None = None, level: int = logging.INFO
) -> logging.Logger:
    root = logging.getLogger()
    formatter = logging.Formatter(fmt=LOG_FORMAT)

    # Avoid duplicate handlers when called more than once.
    if not any(getattr(h, "_transit_console", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        handler._transit_console = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    if log_dir is not None:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(
            path / f"{iso_timestamp(file_safe=True)}.log", encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.setLevel(level)
    return root
