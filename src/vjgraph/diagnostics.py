"""Optional append-only logging of graph mutations and engine faults."""
from __future__ import annotations

import threading
import time
from pathlib import Path

__all__ = [
    "DEFAULT_LOG_PATH",
    "enable_graph_logging",
    "graph_logging_enabled",
    "log_graph_event",
]


DEFAULT_LOG_PATH = Path("logs/graph_events.log")

_LOG_GRAPH_EVENTS = False
_LOG_PATH = DEFAULT_LOG_PATH
_LOG_LOCK = threading.Lock()


def enable_graph_logging(enabled: bool, path: str | Path | None = None) -> None:
    """Enable or disable graph event logging, optionally redirecting the log file."""

    global _LOG_GRAPH_EVENTS, _LOG_PATH
    _LOG_GRAPH_EVENTS = bool(enabled)
    if path is not None:
        _LOG_PATH = Path(path)


def graph_logging_enabled() -> bool:
    """Return ``True`` when graph event logging is enabled."""

    return _LOG_GRAPH_EVENTS


def log_graph_event(message: str) -> None:
    """Append ``message`` to the graph log when logging is enabled."""

    if not _LOG_GRAPH_EVENTS:
        return
    try:
        _LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
    except Exception:
        return
    stamp = time.strftime("%Y-%m-%dT%H:%M:%S")
    try:
        with _LOG_LOCK:
            with _LOG_PATH.open("a", encoding="utf-8") as handle:
                handle.write(f"{stamp} {message}\n")
    except Exception:
        return
