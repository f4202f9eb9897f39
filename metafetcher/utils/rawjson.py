"""Extract a member of a JSON object as its original source text."""

from __future__ import annotations

import json
import re
from typing import Optional

_decoder = json.JSONDecoder()
_WHITESPACE = re.compile(r"[ \t\n\r]*")


class RawJSONError(ValueError):
    """Raised when a document is not a well-formed JSON object."""


def _skip_ws(document: str, index: int) -> int:
    return _WHITESPACE.match(document, index).end()


def _decode_at(document: str, index: int) -> int:
    try:
        _, end = _decoder.raw_decode(document, index)
    except ValueError as exc:
        raise RawJSONError(str(exc)) from exc
    return end


def raw_member(document: str, key: str) -> Optional[str]:
    """
    Return the raw text of ``key`` in the top-level JSON object ``document``.

    The value is returned exactly as it appears in the source, whitespace and
    member order included, so it can be persisted verbatim. When the key is
    repeated the first occurrence wins. Returns None when the key is absent.
    """
    index = _skip_ws(document, 0)
    if document[index : index + 1] != "{":
        raise RawJSONError("Top-level JSON value is not an object")
    index = _skip_ws(document, index + 1)

    found: Optional[str] = None
    if document[index : index + 1] == "}":
        index += 1
    else:
        while True:
            if document[index : index + 1] != '"':
                raise RawJSONError(f"Expected member name at char {index}")
            try:
                name, index = _decoder.raw_decode(document, index)
            except ValueError as exc:
                raise RawJSONError(str(exc)) from exc
            index = _skip_ws(document, index)
            if document[index : index + 1] != ":":
                raise RawJSONError(f"Expected ':' at char {index}")
            start = _skip_ws(document, index + 1)
            end = _decode_at(document, start)
            if name == key and found is None:
                found = document[start:end]

            index = _skip_ws(document, end)
            delimiter = document[index : index + 1]
            if delimiter == ",":
                index = _skip_ws(document, index + 1)
                continue
            if delimiter == "}":
                index += 1
                break
            raise RawJSONError(f"Expected ',' or '}}' at char {index}")

    if _skip_ws(document, index) != len(document):
        raise RawJSONError(f"Extra data after JSON object at char {index}")
    return found


__all__ = ["RawJSONError", "raw_member"]
