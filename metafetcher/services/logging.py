"""Logging utilities for the meta fetcher."""

from __future__ import annotations

import logging
import queue
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from typing import Optional


_ROOT_LOGGER_NAME = "metafetcher"
_CONSOLE_FILTER_FLAG = "to_console"
_queue_listener: Optional[QueueListener] = None


class _ConsoleFilter(logging.Filter):
    """Allow records flagged for console emission, plus warnings and errors."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - simple predicate
        if record.levelno >= logging.WARNING:
            return True
        return bool(getattr(record, _CONSOLE_FILTER_FLAG, False))


def configure_logging(
    *,
    level: str = "INFO",
    log_to_file: bool = False,
    log_file: Optional[Path] = None,
    log_to_console: bool = True,
) -> None:
    """Configure logging sinks for this run."""

    shutdown_logging()

    global _queue_listener
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handlers: list[logging.Handler] = []
    if log_to_file and log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    fetcher_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    fetcher_logger.setLevel(logging.DEBUG)
    fetcher_logger.propagate = True

    if log_to_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
        )
        console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
        console_handler.addFilter(_ConsoleFilter())
        handlers.append(console_handler)

    if not handlers:
        # Fallback to console output when no other handlers exist.
        fallback_handler = logging.StreamHandler()
        fallback_handler.setFormatter(formatter)
        fallback_handler.setLevel(logging.WARNING)
        handlers.append(fallback_handler)

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    root_logger.addHandler(QueueHandler(log_queue))
    _queue_listener = QueueListener(log_queue, *handlers, respect_handler_level=True)
    _queue_listener.start()


def shutdown_logging() -> None:
    """Flush and stop the queue listener started by ``configure_logging``."""

    global _queue_listener
    if _queue_listener is None:
        return
    try:
        _queue_listener.stop()
    except Exception:  # pragma: no cover - best-effort shutdown
        pass
    for handler in _queue_listener.handlers:
        handler.close()
    _queue_listener = None


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a namespaced logger rooted under ``metafetcher``."""

    if not name or name == _ROOT_LOGGER_NAME:
        return logging.getLogger(_ROOT_LOGGER_NAME)
    if name.startswith(f"{_ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")


def console_kwargs() -> dict[str, bool]:
    """Helper to flag log records for console emission."""

    return {_CONSOLE_FILTER_FLAG: True}


__all__ = ["configure_logging", "console_kwargs", "get_logger", "shutdown_logging"]
