"""
Stremio meta fetcher: keeps a local cache of Cinemeta ``meta`` documents in
sync with the IMDb IDs listed in CSV exports.

Modules expose the individual pipeline pieces (CSV input, cache inventory,
missing-set resolution, fetching, writing) and a CLI that chains them.
"""

__version__ = "0.1.0"

__all__ = [
    "cli",
    "clients",
    "config",
    "errors",
    "models",
    "services",
    "utils",
    "workflow",
]
