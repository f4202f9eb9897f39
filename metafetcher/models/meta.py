"""Data models for fetched metas and per-identifier fetch outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SkipReason(str, Enum):
    """Why a lookup did not produce a meta."""

    NETWORK_ERROR = "network_error"
    BAD_STATUS = "bad_status"
    UNREADABLE_BODY = "unreadable_body"
    INVALID_JSON = "invalid_json"
    MISSING_META = "missing_meta"


@dataclass(frozen=True)
class FetchedMeta:
    """Raw ``meta`` JSON text fetched for one identifier."""

    identifier: str
    payload: str


@dataclass(frozen=True)
class FetchOutcome:
    """Result of a single lookup: either a meta or a tagged skip reason."""

    identifier: str
    meta: Optional[FetchedMeta] = None
    reason: Optional[SkipReason] = None
    detail: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.meta is None) == (self.reason is None):
            raise ValueError("FetchOutcome needs exactly one of meta or reason")

    @property
    def success(self) -> bool:
        return self.meta is not None

    @classmethod
    def fetched(cls, identifier: str, payload: str) -> FetchOutcome:
        return cls(identifier=identifier, meta=FetchedMeta(identifier, payload))

    @classmethod
    def skipped(
        cls,
        identifier: str,
        reason: SkipReason,
        detail: Optional[str] = None,
    ) -> FetchOutcome:
        return cls(identifier=identifier, reason=reason, detail=detail)


__all__ = ["FetchOutcome", "FetchedMeta", "SkipReason"]
