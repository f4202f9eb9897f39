"""Fatal error types raised by the sync pipeline."""

from __future__ import annotations


class MetaFetcherError(RuntimeError):
    """Base class for errors that abort a sync run."""


class DataDirError(MetaFetcherError):
    """Raised when the data directory cannot be listed."""


class CacheDirError(MetaFetcherError):
    """Raised when the metas directory cannot be listed."""


class MetaWriteError(MetaFetcherError):
    """Raised when a fetched meta cannot be persisted."""


__all__ = [
    "CacheDirError",
    "DataDirError",
    "MetaFetcherError",
    "MetaWriteError",
]
