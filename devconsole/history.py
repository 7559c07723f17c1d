"""Navigable history of submitted console lines."""

from __future__ import annotations

from collections import deque
from typing import Deque, List


class CommandHistory:
    """Most-recent-last list of submitted lines with an up/down cursor.

    The cursor sits in ``[0, len(self)]``; ``len(self)`` means "past the
    newest line". :meth:`previous` clamps at the oldest line and keeps
    returning it, :meth:`next` returns ``""`` once it moves past the newest.
    Consecutive duplicates are kept; empty lines are ignored.
    """

    def __init__(self, capacity: int = 256) -> None:
        if capacity <= 0:
            raise ValueError("CommandHistory capacity must be positive")
        self._lines: Deque[str] = deque(maxlen=capacity)
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def push(self, line: str) -> None:
        if not line:
            return
        self._lines.append(line)
        self._position = len(self._lines)

    def previous(self) -> str:
        if not self._lines:
            return ""
        self._position = max(self._position - 1, 0)
        return self._lines[self._position]

    def next(self) -> str:
        self._position += 1
        if self._position >= len(self._lines):
            self._position = len(self._lines)
            return ""
        return self._lines[self._position]

    def clear(self) -> None:
        self._lines.clear()
        self._position = 0

    def __len__(self) -> int:
        return len(self._lines)


__all__ = ["CommandHistory"]
