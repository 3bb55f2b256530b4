class TransitFeedError(Exception):
    """Base exception for schedule cache and feed model failures."""


class FeedConstructionError(TransitFeedError):
    """Raised when a snapshot lacks the tables a feed model cannot exist without."""


class TableParseError(TransitFeedError):
    """Raised when a table value does not match its column type."""

    def __init__(self, path: str, line: int, column: str, message: str) -> None:
        super().__init__(f"{path}:{line}: column {column!r}: {message}")
        self.path = path
        self.line = line
        self.column = column


class SnapshotNotFoundError(TransitFeedError):
    """Raised when the cache root holds no snapshot to rebuild from."""


class MissingCredentialError(TransitFeedError, RuntimeError):
    """Raised when a required API credential is absent from the environment."""
