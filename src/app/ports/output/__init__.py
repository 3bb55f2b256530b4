from .realtime_feed_provider import IRealtimeFeedProvider
from .schedule_bundle_source import IScheduleBundleSource
from .snapshot_store import ISnapshotStore

__all__ = [
    "IRealtimeFeedProvider",
    "IScheduleBundleSource",
    "ISnapshotStore",
]
