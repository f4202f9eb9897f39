"""Pipeline stages: missing-set resolution, fetching and orchestration."""

from .fetch import fetch_metas, successful_metas
from .missing import resolve_missing, unique_in_order
from .orchestrator import resolve_csv, run_sync, sync_csv

__all__ = [
    "fetch_metas",
    "resolve_csv",
    "resolve_missing",
    "run_sync",
    "successful_metas",
    "sync_csv",
    "unique_in_order",
]
