"""Error types raised by the explorer services."""

from __future__ import annotations


class ExplorerError(Exception):
    """Base class for explorer failures."""


class FetchFailed(ExplorerError):
    """A remote endpoint could not be fetched or parsed."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"Fetching {source} failed: {reason}")
        self.source = source
        self.reason = reason


class StoreUnavailable(ExplorerError):
    """The persistence layer cannot be opened or has an incompatible schema."""


class MalformedRemoteData(ExplorerError):
    """A single remote record is missing required fields."""
