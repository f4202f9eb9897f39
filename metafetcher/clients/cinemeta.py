"""HTTP client for Stremio's Cinemeta meta lookups."""

from __future__ import annotations

import json
import uuid
from typing import Optional

import requests

from metafetcher.config import DEFAULT_META_URL_TEMPLATE, Settings
from metafetcher.models import FetchOutcome, SkipReason
from metafetcher.utils.rawjson import RawJSONError, raw_member

META_FIELD = "meta"
_EMPTY_VALUES = (None, {}, [], "")


class CinemetaClient:
    """Fetch the raw ``meta`` document for one identifier at a time."""

    def __init__(
        self,
        *,
        url_template: str = DEFAULT_META_URL_TEMPLATE,
        timeout: float = 5.0,
        cache_bust: bool = False,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url_template = url_template
        self.timeout = timeout
        self.cache_bust = cache_bust
        self._owns_session = session is None
        self._session = session or requests.Session()
        if user_agent:
            self._session.headers.update({"User-Agent": user_agent})

    @classmethod
    def from_settings(cls, settings: Settings) -> CinemetaClient:
        return cls(
            url_template=settings.meta_url_template,
            timeout=settings.request_timeout,
            cache_bust=settings.cache_bust,
            user_agent=settings.user_agent,
        )

    def build_url(self, identifier: str) -> str:
        return self.url_template.format(identifier=identifier)

    def fetch(self, identifier: str) -> FetchOutcome:
        """
        Look up ``identifier`` and extract its ``meta`` member.

        Every failure is returned as a skipped outcome rather than raised.
        """
        url = self.build_url(identifier)
        params = {"_": uuid.uuid4().hex} if self.cache_bust else None
        try:
            response = self._session.get(url, params=params, timeout=self.timeout, stream=True)
        except requests.RequestException as exc:
            return FetchOutcome.skipped(
                identifier, SkipReason.NETWORK_ERROR, f"Couldn't GET {url}: {exc}"
            )

        with response:
            if response.status_code != requests.codes.ok:
                return FetchOutcome.skipped(
                    identifier,
                    SkipReason.BAD_STATUS,
                    f"Bad GET response: {response.status_code}",
                )
            try:
                body = response.content
            except (requests.RequestException, OSError) as exc:
                return FetchOutcome.skipped(
                    identifier,
                    SkipReason.UNREADABLE_BODY,
                    f"Couldn't read response body: {exc}",
                )

        return self._extract_meta(identifier, body)

    @staticmethod
    def _extract_meta(identifier: str, body: bytes) -> FetchOutcome:
        try:
            raw = raw_member(body.decode("utf-8"), META_FIELD)
        except (UnicodeDecodeError, RawJSONError) as exc:
            return FetchOutcome.skipped(
                identifier, SkipReason.INVALID_JSON, f"Response body is not a JSON object: {exc}"
            )
        if raw is None or json.loads(raw) in _EMPTY_VALUES:
            return FetchOutcome.skipped(
                identifier,
                SkipReason.MISSING_META,
                f'Response body is empty or doesn\'t contain a "{META_FIELD}" element',
            )
        return FetchOutcome.fetched(identifier, raw)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> CinemetaClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()


__all__ = ["CinemetaClient", "META_FIELD"]
