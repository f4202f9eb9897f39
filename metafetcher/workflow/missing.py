"""Resolve which required identifiers are not cached yet."""

from __future__ import annotations

from typing import AbstractSet, Iterable, List, Sequence


def resolve_missing(identifiers: Sequence[str], cached: AbstractSet[str]) -> List[str]:
    """
    Return the identifiers that have no cached meta.

    Order and multiplicity of ``identifiers`` are preserved; an identifier is
    kept iff it is not a member of ``cached``.
    """
    cached_lookup = cached if isinstance(cached, (set, frozenset)) else set(cached)
    return [identifier for identifier in identifiers if identifier not in cached_lookup]


def unique_in_order(identifiers: Iterable[str]) -> List[str]:
    """Drop repeated identifiers, keeping the first occurrence of each."""
    return list(dict.fromkeys(identifiers))


__all__ = ["resolve_missing", "unique_in_order"]
