"""Optional tqdm progress display for the fetch loop."""

from __future__ import annotations

from tqdm.auto import tqdm


def create_progress_bar(enabled: bool, total: int, desc: str, *, unit: str = "item") -> tqdm | None:
    """Create a tqdm progress bar if console display is enabled."""
    if not enabled or total <= 0:
        return None
    return tqdm(total=total, desc=desc, leave=False, unit=unit)


__all__ = ["create_progress_bar"]
