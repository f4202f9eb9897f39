"""Convenience re-exports for meta fetcher data models."""

from .meta import FetchedMeta, FetchOutcome, SkipReason
from .sync import CsvSyncResult, StageMetrics

__all__ = [
    "CsvSyncResult",
    "FetchOutcome",
    "FetchedMeta",
    "SkipReason",
    "StageMetrics",
]
