"""Inventory and persistence of cached meta files."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Set

from metafetcher.errors import CacheDirError, MetaWriteError
from metafetcher.models import FetchedMeta
from metafetcher.services.logging import console_kwargs, get_logger

logger = get_logger(__name__)

DEFAULT_EXTENSION = ".json"
DEFAULT_FILE_MODE = 0o600
TEMP_PREFIX = ".metafetcher-"


def list_cached_ids(metas_dir: Path, extension: str = DEFAULT_EXTENSION) -> Set[str]:
    """Return the identifiers that already have a file in ``metas_dir``."""
    try:
        names = os.listdir(metas_dir)
    except OSError as exc:
        raise CacheDirError(f"Couldn't read metas directory {metas_dir}: {exc}") from exc
    return {name.removesuffix(extension) for name in names}


def meta_path(metas_dir: Path, identifier: str, extension: str = DEFAULT_EXTENSION) -> Path:
    return metas_dir / f"{identifier}{extension}"


def write_meta(
    metas_dir: Path,
    meta: FetchedMeta,
    *,
    extension: str = DEFAULT_EXTENSION,
    mode: int = DEFAULT_FILE_MODE,
) -> Path:
    """
    Write one meta payload verbatim with permissions ``mode``.

    The payload goes to a temporary file in ``metas_dir`` first and is then
    renamed over the target, so an interrupted run never leaves a truncated
    meta file behind.
    """
    path = meta_path(metas_dir, meta.identifier, extension)
    tmp_path: str | None = None
    try:
        fd, tmp_path = tempfile.mkstemp(dir=metas_dir, prefix=TEMP_PREFIX, suffix=".tmp")
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(meta.payload)
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except OSError as exc:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise MetaWriteError(f"Couldn't write file {path}: {exc}") from exc
    return path


def write_metas(
    metas_dir: Path,
    metas: Iterable[FetchedMeta],
    *,
    extension: str = DEFAULT_EXTENSION,
    mode: int = DEFAULT_FILE_MODE,
) -> List[Path]:
    """Persist every fetched meta; the first failure aborts the batch."""
    written: List[Path] = []
    for meta in metas:
        logger.info("Write meta file for %s", meta.identifier, extra=console_kwargs())
        written.append(write_meta(metas_dir, meta, extension=extension, mode=mode))
    return written


__all__ = [
    "DEFAULT_EXTENSION",
    "DEFAULT_FILE_MODE",
    "TEMP_PREFIX",
    "list_cached_ids",
    "meta_path",
    "write_meta",
    "write_metas",
]
