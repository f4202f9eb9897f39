"""Small helpers shared across the meta fetcher."""

from .progress import create_progress_bar
from .rawjson import RawJSONError, raw_member

__all__ = [
    "RawJSONError",
    "create_progress_bar",
    "raw_member",
]
