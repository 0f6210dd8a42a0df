"""Logging for eqverify.

One process-wide ``EqVerifyLogger`` collects category-tagged messages from
the engine. Warnings that never become a verification failure (tolerated
exemptions, hash collisions) are kept in a bounded history so callers and
tests can inspect them after a run.
"""

from __future__ import annotations

import sys
import time
from collections import deque
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TextIO

# most recent entries kept by a logger; older ones are discarded
HISTORY_SIZE = 1000


class LogLevel(IntEnum):
    """Log levels for eqverify."""

    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3
    TRACE = 4


RESET = "\033[0m"

_MARKERS = {
    LogLevel.NORMAL: ("•", "\033[37m"),
    LogLevel.VERBOSE: ("→", "\033[34m"),
    LogLevel.DEBUG: ("⚙", "\033[35m"),
    LogLevel.TRACE: ("⋯", "\033[90m"),
}
_WARNING_MARKER = ("⚠", "\033[33m")
_CATEGORY_COLOR = "\033[36m"


def supports_color(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


@dataclass
class LogEntry:
    """One recorded message."""

    level: LogLevel
    message: str
    category: str = "general"
    timestamp: float = field(default_factory=time.time)
    is_warning: bool = False

    def format(self, color: bool = True, show_time: bool = True) -> str:
        """Render as ``[time] marker [category] message``."""

        def paint(text: str, code: str) -> str:
            return f"{code}{text}{RESET}" if color else text

        parts = []
        if show_time:
            stamp = time.strftime("%H:%M:%S", time.localtime(self.timestamp))
            parts.append(paint(stamp, "\033[90m"))
        marker = _WARNING_MARKER if self.is_warning else _MARKERS.get(self.level)
        if marker:
            parts.append(paint(*marker))
        if self.category != "general":
            parts.append(paint(f"[{self.category}]", _CATEGORY_COLOR))
        parts.append(self.message)
        return " ".join(parts)


class EqVerifyLogger:
    """Writes messages at or below ``level`` and keeps a bounded history.

    Only entries that pass the level filter, and warnings, are recorded.
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.NORMAL,
        color: bool = True,
        stream: TextIO | None = None,
        history: int = HISTORY_SIZE,
    ):
        self.level = level
        self._stream = stream or sys.stderr
        self._color = color and supports_color(self._stream)
        self._entries: deque[LogEntry] = deque(maxlen=history)

    def set_level(self, level: LogLevel) -> None:
        self.level = level

    @contextmanager
    def at_level(self, level: LogLevel | None) -> Iterator[EqVerifyLogger]:
        """Use ``level`` inside the block, then restore the previous one."""
        previous = self.level
        if level is not None:
            self.level = level
        try:
            yield self
        finally:
            self.level = previous

    def _record(self, entry: LogEntry) -> None:
        if entry.level > self.level and not entry.is_warning:
            return
        self._entries.append(entry)
        if entry.level <= self.level:
            self._stream.write(entry.format(color=self._color) + "\n")
            self._stream.flush()

    def log(self, level: LogLevel, message: str, category: str = "general") -> None:
        self._record(LogEntry(level=level, message=message, category=category))

    def verbose(self, message: str, category: str = "general") -> None:
        self.log(LogLevel.VERBOSE, message, category)

    def debug(self, message: str, category: str = "general") -> None:
        self.log(LogLevel.DEBUG, message, category)

    def trace(self, message: str, category: str = "general") -> None:
        self.log(LogLevel.TRACE, message, category)

    def warning(self, message: str, category: str = "general") -> None:
        """Record a warning; written unless the logger is QUIET."""
        self._record(
            LogEntry(level=LogLevel.NORMAL, message=message, category=category, is_warning=True)
        )

    @contextmanager
    def timer(self, name: str, category: str = "timing") -> Iterator[None]:
        """Log the wall time spent in the block at DEBUG level."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.debug(f"{name}: {time.perf_counter() - start:.3f}s", category=category)

    def get_entries(
        self,
        level: LogLevel | None = None,
        category: str | None = None,
        warnings_only: bool = False,
    ) -> list[LogEntry]:
        """Recorded entries, oldest first, optionally filtered."""
        return [
            e
            for e in self._entries
            if (level is None or e.level == level)
            and (category is None or e.category == category)
            and (not warnings_only or e.is_warning)
        ]


_logger: EqVerifyLogger | None = None


def get_logger() -> EqVerifyLogger:
    """The process-wide logger, created on first use."""
    global _logger
    if _logger is None:
        _logger = EqVerifyLogger()
    return _logger


def configure_logging(
    level: LogLevel = LogLevel.NORMAL,
    color: bool = True,
    stream: TextIO | None = None,
) -> EqVerifyLogger:
    """Replace the process-wide logger and return it."""
    global _logger
    _logger = EqVerifyLogger(level=level, color=color, stream=stream)
    return _logger


__all__ = [
    "LogLevel",
    "LogEntry",
    "EqVerifyLogger",
    "HISTORY_SIZE",
    "get_logger",
    "configure_logging",
    "supports_color",
]
