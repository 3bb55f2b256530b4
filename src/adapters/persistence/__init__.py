from .local_snapshot_store import LocalSnapshotStore

__all__ = [
    "LocalSnapshotStore",
]
