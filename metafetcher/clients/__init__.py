"""Remote service clients."""

from .cinemeta import META_FIELD, CinemetaClient

__all__ = ["CinemetaClient", "META_FIELD"]
