"""Sequential, throttled meta fetching."""

from __future__ import annotations

import time
from typing import Callable, Iterable, List, Optional, Protocol, Sequence

from metafetcher.models import FetchedMeta, FetchOutcome
from metafetcher.services.logging import console_kwargs, get_logger

logger = get_logger(__name__)


class MetaClient(Protocol):
    def fetch(self, identifier: str) -> FetchOutcome:
        ...


class Throttle:
    """Blocking pause between consecutive lookups, shared across a whole run."""

    def __init__(self, delay: float, sleep: Callable[[float], None] = time.sleep) -> None:
        self.delay = delay
        self._sleep = sleep
        self._attempted = False

    def wait(self) -> None:
        """Pause if an earlier lookup already went out, then mark this one."""
        if self._attempted and self.delay > 0:
            self._sleep(self.delay)
        self._attempted = True


def fetch_metas(
    identifiers: Sequence[str],
    client: MetaClient,
    *,
    delay: float,
    sleep: Callable[[float], None] = time.sleep,
    throttle: Optional[Throttle] = None,
    progress_hook: Callable[[int], object] | None = None,
) -> List[FetchOutcome]:
    """
    Look up every identifier in order, pausing ``delay`` seconds between lookups.

    The pause follows every attempt, successful or skipped. Pass a shared
    ``throttle`` to keep the spacing across several calls; otherwise the
    first lookup of this call goes out immediately. Skips are logged as
    warnings and returned as outcomes; nothing is raised for per-identifier
    failures.
    """
    throttle = throttle or Throttle(delay, sleep)
    outcomes: List[FetchOutcome] = []
    for identifier in identifiers:
        throttle.wait()

        logger.info("Fetching meta for %s", identifier, extra=console_kwargs())
        outcome = client.fetch(identifier)
        if not outcome.success:
            logger.warning(
                "Skipping %s (%s): %s",
                identifier,
                outcome.reason.value,
                outcome.detail,
            )
        outcomes.append(outcome)
        if progress_hook is not None:
            progress_hook(1)
    return outcomes


def successful_metas(outcomes: Iterable[FetchOutcome]) -> List[FetchedMeta]:
    """Return the metas of successful outcomes, in order."""
    return [outcome.meta for outcome in outcomes if outcome.meta is not None]


__all__ = ["MetaClient", "Throttle", "fetch_metas", "successful_metas"]
