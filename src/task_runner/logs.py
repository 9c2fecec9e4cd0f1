"""Deferred task logging.

Tasks write to a ``DeferredLogger`` while they run; nothing reaches the
console until the whole invocation tree has finished and the
``LogAggregator`` flushes every logger in the order the tasks completed.
"""

from __future__ import annotations

from collections.abc import Callable
from pprint import pformat
from typing import Any

import rich_click as click

from task_runner.models import LogEntry, LogLevel

_LEVEL_STYLES: dict[LogLevel, tuple[str, str]] = {
    LogLevel.INFO: ("INFO:", "blue"),
    LogLevel.WARN: ("WARN:", "yellow"),
    LogLevel.ERROR: ("ERROR:", "red"),
}


class DeferredLogger:
    """Append-only log buffer owned by one task invocation."""

    def __init__(self, tag: str = "") -> None:
        self._tag = tag
        self._entries: list[LogEntry] = []

    @property
    def tag(self) -> str:
        return self._tag

    def set_tag(self, tag: str) -> None:
        self._tag = tag

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    def info(self, message: str, params: Any = None) -> None:
        """Log ``message`` at INFO level; printed after the run."""

        self._log(LogLevel.INFO, message, params)

    def warn(self, message: str, params: Any = None) -> None:
        """Log ``message`` at WARN level; printed after the run."""

        self._log(LogLevel.WARN, message, params)

    def error(self, message: str, params: Any = None) -> None:
        """Log ``message`` at ERROR level; printed after the run."""

        self._log(LogLevel.ERROR, message, params)

    def render_lines(self, *, color: bool = True) -> list[str]:
        return [_render_entry(entry, color=color) for entry in self._entries]

    def _log(self, level: LogLevel, message: str, params: Any) -> None:
        self._entries.append(LogEntry(level=level, message=f"[{self._tag}] {message}", params=params))

    def __len__(self) -> int:
        return len(self._entries)


class LogAggregator:
    """Collects finished loggers in completion order.

    Appends happen on the event loop thread only, so completion order is the
    order of ``append`` calls.
    """

    def __init__(self) -> None:
        self._loggers: list[DeferredLogger] = []

    def append(self, task_logger: DeferredLogger) -> None:
        self._loggers.append(task_logger)

    @property
    def loggers(self) -> tuple[DeferredLogger, ...]:
        return tuple(self._loggers)

    def entries(self) -> list[LogEntry]:
        return [entry for task_logger in self._loggers for entry in task_logger.entries]

    def render_lines(self, *, color: bool = True) -> list[str]:
        lines: list[str] = []
        for task_logger in self._loggers:
            lines.extend(task_logger.render_lines(color=color))
        return lines

    def flush(self, emit: Callable[[str], None]) -> None:
        for line in self.render_lines():
            emit(line)


def _render_entry(entry: LogEntry, *, color: bool) -> str:
    label, fg = _LEVEL_STYLES[entry.level]
    level = click.style(label, fg=fg) if color else label
    line = f"{level}\t{entry.message}"
    if entry.params is not None:
        line = f"{line} {pformat(entry.params)}"
    return line
