"""Service layer for the meta fetcher: CSV input, metas store and logging."""

from __future__ import annotations

from . import csv_input, logging, metas_store
from .csv_input import (
    CsvInputError,
    MalformedRowError,
    MissingHeaderError,
    MissingIdColumnError,
)

__all__ = [
    "CsvInputError",
    "MalformedRowError",
    "MissingHeaderError",
    "MissingIdColumnError",
    "csv_input",
    "logging",
    "metas_store",
]
