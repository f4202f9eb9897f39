"""Per-CSV bookkeeping for sync runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from .meta import FetchOutcome, SkipReason


@dataclass
class StageMetrics:
    """Lightweight counters for one CSV pass."""

    required: int = 0
    cache_hits: int = 0
    produced: int = 0
    skipped: int = 0

    def record_required(self, count: int) -> None:
        self.required += max(0, count)

    def record_cache_hits(self, count: int) -> None:
        self.cache_hits += max(0, count)

    def record_produced(self, count: int) -> None:
        self.produced += max(0, count)

    def record_skipped(self, count: int) -> None:
        self.skipped += max(0, count)


@dataclass
class CsvSyncResult:
    """Everything a single CSV pass resolved, fetched and wrote."""

    csv_path: Path
    missing: List[str] = field(default_factory=list)
    outcomes: List[FetchOutcome] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)
    metrics: StageMetrics = field(default_factory=StageMetrics)

    def skip_reasons(self) -> Dict[str, SkipReason]:
        """Map skipped identifiers to the reason they were skipped."""
        return {
            outcome.identifier: outcome.reason
            for outcome in self.outcomes
            if outcome.reason is not None
        }


__all__ = ["CsvSyncResult", "StageMetrics"]
