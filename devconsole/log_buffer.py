"""Bounded console transcript and a logging handler that feeds it."""

from __future__ import annotations

import logging
import threading
import traceback
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, Iterator, List, Optional


class LogKind(Enum):
    MESSAGE = "message"
    WARNING = "warning"
    ERROR = "error"
    SHELL_MESSAGE = "shell"
    INPUT = "input"


@dataclass(frozen=True)
class LogEntry:
    message: str
    kind: LogKind = LogKind.MESSAGE
    stack_trace: Optional[str] = None


class LogBuffer:
    """Ring buffer of :class:`LogEntry` values; the oldest entry is evicted first."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("LogBuffer capacity must be positive")
        self._capacity = capacity
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._appended = 0
        self._lock = threading.RLock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def appended(self) -> int:
        """Total number of entries ever appended, including evicted ones."""

        return self._appended

    @property
    def entries(self) -> List[LogEntry]:
        with self._lock:
            return list(self._entries)

    def append(
        self,
        message: str,
        kind: LogKind = LogKind.MESSAGE,
        stack_trace: Optional[str] = None,
    ) -> LogEntry:
        entry = LogEntry(message=message, kind=kind, stack_trace=stack_trace)
        with self._lock:
            self._entries.append(entry)
            self._appended += 1
        return entry

    def since(self, mark: int) -> List[LogEntry]:
        """Return the retained entries appended after ``appended`` was *mark*."""

        with self._lock:
            newer = self._appended - mark
            if newer <= 0:
                return []
            entries = list(self._entries)
            return entries[-newer:] if newer < len(entries) else entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self.entries)


def kind_for_level(levelno: int) -> LogKind:
    if levelno >= logging.ERROR:
        return LogKind.ERROR
    if levelno >= logging.WARNING:
        return LogKind.WARNING
    return LogKind.MESSAGE


class ConsoleLogHandler(logging.Handler):
    """Mirror host log records into a :class:`LogBuffer`.

    *enabled* is consulted on every record so the console can switch
    capture on and off at runtime.
    """

    def __init__(
        self,
        buffer: LogBuffer,
        enabled: Optional[Callable[[], bool]] = None,
        level: int = logging.NOTSET,
    ) -> None:
        super().__init__(level)
        self._buffer = buffer
        self._enabled = enabled

    def emit(self, record: logging.LogRecord) -> None:
        if self._enabled is not None and not self._enabled():
            return
        try:
            message = record.getMessage()
            stack_trace: Optional[str] = None
            if record.exc_info:
                stack_trace = "".join(traceback.format_exception(*record.exc_info))
            elif record.stack_info:
                stack_trace = record.stack_info
            self._buffer.append(message, kind_for_level(record.levelno), stack_trace)
        except Exception:
            self.handleError(record)


__all__ = ["ConsoleLogHandler", "LogBuffer", "LogEntry", "LogKind", "kind_for_level"]
