"""Reading identifier lists out of CSV exports."""

from __future__ import annotations

import csv
import os
from pathlib import Path
from typing import List, Sequence

from metafetcher.errors import DataDirError, MetaFetcherError
from metafetcher.services.logging import get_logger

logger = get_logger(__name__)

CSV_SUFFIX = ".csv"

_PATH_SEPARATORS = {sep for sep in ("/", os.sep, os.altsep) if sep}


class CsvInputError(MetaFetcherError):
    """Raised when a CSV file cannot be read or parsed."""


class MissingHeaderError(CsvInputError):
    """Raised when a CSV file has no header row."""


class MissingIdColumnError(CsvInputError):
    """Raised when the header row lacks the identifier column."""


class MalformedRowError(CsvInputError):
    """Raised when a data row is too short to hold an identifier."""


def discover_csv_files(data_dir: Path) -> List[Path]:
    """Return the CSV files directly inside ``data_dir``, sorted by name."""
    try:
        entries = sorted(data_dir.iterdir(), key=lambda path: path.name)
    except OSError as exc:
        raise DataDirError(f"Couldn't read directory {data_dir}: {exc}") from exc
    return [
        entry
        for entry in entries
        if entry.name.endswith(CSV_SUFFIX) and entry.is_file()
    ]


def read_rows(csv_path: Path) -> List[List[str]]:
    """Read every non-blank row of ``csv_path``."""
    try:
        with csv_path.open("r", encoding="utf-8-sig", newline="") as handle:
            return [row for row in csv.reader(handle) if row]
    except (OSError, UnicodeDecodeError) as exc:
        raise CsvInputError(f"Couldn't read file {csv_path}: {exc}") from exc
    except csv.Error as exc:
        raise CsvInputError(f"Couldn't read CSV {csv_path}: {exc}") from exc


def find_id_column(header: Sequence[str], column: str) -> int:
    """Locate ``column`` in the header row."""
    for index, label in enumerate(header):
        if label == column:
            return index
    raise MissingIdColumnError(f'Couldn\'t find "{column}" in CSV header: {list(header)}')


def extract_identifiers(rows: Sequence[Sequence[str]], column: str) -> List[str]:
    """
    Pull the identifier column out of parsed CSV rows.

    Parameters
    ----------
    rows : sequence of rows
        Parsed CSV rows; the first one is the header.
    column : str
        Header label of the identifier column.

    Returns
    -------
    list of str
        Identifiers in row order. Duplicates are kept; blank cells and values
        that are not plain file names are dropped with a warning.
    """
    if not rows:
        raise MissingHeaderError("CSV input has no header row")

    index = find_id_column(rows[0], column)
    identifiers: List[str] = []
    # Row numbers are 1-based and count the header.
    for row_number, row in enumerate(rows[1:], start=2):
        if len(row) <= index:
            raise MalformedRowError(
                f"Row {row_number} has {len(row)} fields, "
                f'expected at least {index + 1} to read "{column}"'
            )
        value = row[index].strip()
        if not value:
            logger.warning("Row %d has an empty %r value, skipping", row_number, column)
            continue
        if not is_safe_identifier(value):
            logger.warning(
                "Row %d has %r value %r that isn't a valid file name, skipping",
                row_number,
                column,
                value,
            )
            continue
        identifiers.append(value)
    return identifiers


def is_safe_identifier(value: str) -> bool:
    """Whether ``value`` can name a file directly inside the metas directory."""
    if value in (".", ".."):
        return False
    return not any(sep in value for sep in _PATH_SEPARATORS)


def load_identifiers(csv_path: Path, column: str) -> List[str]:
    """Read ``csv_path`` and return its identifiers."""
    rows = read_rows(csv_path)
    try:
        return extract_identifiers(rows, column)
    except CsvInputError as exc:
        raise type(exc)(f"{csv_path.name}: {exc}") from exc


__all__ = [
    "CSV_SUFFIX",
    "CsvInputError",
    "MalformedRowError",
    "MissingHeaderError",
    "MissingIdColumnError",
    "discover_csv_files",
    "extract_identifiers",
    "find_id_column",
    "is_safe_identifier",
    "load_identifiers",
    "read_rows",
]
