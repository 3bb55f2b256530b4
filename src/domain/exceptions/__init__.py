from .feed import (
    FeedConstructionError,
    MissingCredentialError,
    SnapshotNotFoundError,
    TableParseError,
    TransitFeedError,
)

__all__ = [
    "FeedConstructionError",
    "MissingCredentialError",
    "SnapshotNotFoundError",
    "TableParseError",
    "TransitFeedError",
]
