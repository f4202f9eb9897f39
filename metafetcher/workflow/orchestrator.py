"""Orchestrator running the sync pipeline once per CSV input."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, List, Optional, Set

from metafetcher.clients import CinemetaClient
from metafetcher.config import Settings, load_settings
from metafetcher.errors import CacheDirError
from metafetcher.models import CsvSyncResult
from metafetcher.services import metas_store
from metafetcher.services.csv_input import discover_csv_files, load_identifiers
from metafetcher.services.logging import console_kwargs, get_logger
from metafetcher.utils.progress import create_progress_bar
from metafetcher.workflow.fetch import MetaClient, Throttle, fetch_metas, successful_metas
from metafetcher.workflow.missing import resolve_missing, unique_in_order

logger = get_logger(__name__)


def run_sync(
    *,
    settings: Settings | None = None,
    client: Optional[MetaClient] = None,
    sleep: Callable[[float], None] = time.sleep,
    dry_run: bool = False,
) -> List[CsvSyncResult]:
    """
    Sync the metas directory against every CSV in the data directory.

    With ``dry_run`` only the missing sets are resolved; nothing is fetched
    or written. Fatal errors propagate as ``MetaFetcherError``.
    """
    resolved_settings = settings or load_settings()
    csv_files = discover_csv_files(resolved_settings.data_dir)
    if not csv_files:
        logger.info(
            "No CSV files found in %s", resolved_settings.data_dir, extra=console_kwargs()
        )
        return []

    owned_client: CinemetaClient | None = None
    if client is None and not dry_run:
        owned_client = CinemetaClient.from_settings(resolved_settings)
        client = owned_client

    throttle = Throttle(resolved_settings.request_delay, sleep)
    results: List[CsvSyncResult] = []
    try:
        for csv_path in csv_files:
            if dry_run:
                result = resolve_csv(csv_path, resolved_settings, dry_run=True)
            else:
                result = sync_csv(
                    csv_path, resolved_settings, client=client, sleep=sleep, throttle=throttle
                )
            results.append(result)
    finally:
        if owned_client is not None:
            owned_client.close()
    return results


def resolve_csv(
    csv_path: Path,
    settings: Settings,
    *,
    dry_run: bool = False,
) -> CsvSyncResult:
    """Compute the missing set for one CSV against the current cache inventory."""
    result = CsvSyncResult(csv_path=csv_path)
    identifiers = load_identifiers(csv_path, settings.id_column)
    if settings.deduplicate:
        identifiers = unique_in_order(identifiers)

    cached = _take_inventory(settings, dry_run=dry_run)
    result.missing = resolve_missing(identifiers, cached)
    result.metrics.record_required(len(identifiers))
    result.metrics.record_cache_hits(len(identifiers) - len(result.missing))
    logger.info(
        "%s: %d identifiers, %d missing",
        csv_path.name,
        len(identifiers),
        len(result.missing),
        extra=console_kwargs(),
    )
    return result


def sync_csv(
    csv_path: Path,
    settings: Settings,
    *,
    client: MetaClient,
    sleep: Callable[[float], None] = time.sleep,
    throttle: Optional[Throttle] = None,
) -> CsvSyncResult:
    """
    Resolve, fetch and write the missing metas for one CSV.

    ``run_sync`` passes one ``throttle`` for every CSV so the pause between
    lookups also spans file boundaries.
    """
    result = resolve_csv(csv_path, settings)

    progress = create_progress_bar(
        settings.show_progress, len(result.missing), f"Fetching {csv_path.name}", unit="meta"
    )
    try:
        result.outcomes = fetch_metas(
            result.missing,
            client,
            delay=settings.request_delay,
            sleep=sleep,
            throttle=throttle,
            progress_hook=progress.update if progress is not None else None,
        )
    finally:
        if progress is not None:
            progress.close()

    metas = successful_metas(result.outcomes)
    result.written = metas_store.write_metas(
        settings.metas_dir,
        metas,
        extension=settings.metas_extension,
        mode=settings.metas_file_mode,
    )
    result.metrics.record_produced(len(result.written))
    result.metrics.record_skipped(len(result.outcomes) - len(metas))
    _log_summary(result)
    return result


def _take_inventory(settings: Settings, *, dry_run: bool) -> Set[str]:
    metas_dir = settings.metas_dir
    if settings.create_metas_dir and not metas_dir.exists():
        if dry_run:
            return set()
        try:
            metas_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CacheDirError(f"Couldn't create metas directory {metas_dir}: {exc}") from exc
        logger.info("Created metas directory %s", metas_dir, extra=console_kwargs())
    return metas_store.list_cached_ids(metas_dir, settings.metas_extension)


def _log_summary(result: CsvSyncResult) -> None:
    metrics = result.metrics
    logger.info(
        "%s: required=%d cached=%d written=%d skipped=%d",
        result.csv_path.name,
        metrics.required,
        metrics.cache_hits,
        metrics.produced,
        metrics.skipped,
        extra=console_kwargs(),
    )


__all__ = ["resolve_csv", "run_sync", "sync_csv"]
