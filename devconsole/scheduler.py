"""Frame-driven queue for commands that run after a delay."""

from __future__ import annotations

import heapq
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, List, Tuple

logger = logging.getLogger("devconsole.scheduler")


class SchedulerError(ValueError):
    """Raised for invalid scheduler settings."""


class FrameClock:
    """Clock that only moves when the host advances it."""

    def __init__(self, scale: float = 1.0) -> None:
        self.now = 0.0
        self.scale = scale

    def advance(self, delta: float) -> float:
        self.now += delta * self.scale
        return self.now


@dataclass
class ScheduledCommand:
    task_id: int
    line: str
    fire_at: float
    scaled: bool
    cancelled: bool = field(default=False)
    fired: bool = field(default=False)

    def cancel(self) -> bool:
        """Prevent the command from firing; returns ``False`` if it already ran."""

        if self.fired:
            return False
        self.cancelled = True
        return True


_Queue = List[Tuple[float, int, ScheduledCommand]]


class CommandScheduler:
    """Run command lines once a real or scaled delay has elapsed.

    Delays are measured against two :class:`FrameClock` instances that
    :meth:`tick` advances. Commands that come due in the same tick fire
    ordered by fire time and then by scheduling order, whichever clock
    they were queued on.
    """

    def __init__(self, run: Callable[[str], object]) -> None:
        self._run = run
        self.real_clock = FrameClock()
        self.scaled_clock = FrameClock()
        self._counter = 0
        self._scaled: _Queue = []
        self._real: _Queue = []

    @property
    def time_scale(self) -> float:
        return self.scaled_clock.scale

    @time_scale.setter
    def time_scale(self, value: float) -> None:
        value = float(value)
        if not math.isfinite(value) or value < 0:
            raise SchedulerError(f"time scale must be a finite, non-negative number, got {value}")
        self.scaled_clock.scale = value

    def schedule(self, delay: float, line: str, *, scaled: bool = True) -> ScheduledCommand:
        delay = float(delay)
        if not math.isfinite(delay):
            raise SchedulerError(f"delay must be a finite number, got {delay}")
        clock = self.scaled_clock if scaled else self.real_clock
        self._counter += 1
        task = ScheduledCommand(
            task_id=self._counter,
            line=line,
            fire_at=clock.now + max(delay, 0.0),
            scaled=scaled,
        )
        queue = self._scaled if scaled else self._real
        heapq.heappush(queue, (task.fire_at, task.task_id, task))
        return task

    def pending(self) -> List[ScheduledCommand]:
        self._discard_cancelled()
        tasks = [entry[2] for entry in self._scaled + self._real]
        return sorted(tasks, key=lambda task: task.task_id)

    def tick(self, delta: float) -> List[ScheduledCommand]:
        """Advance both clocks by *delta* real seconds and fire due commands."""

        self.real_clock.advance(delta)
        self.scaled_clock.advance(delta)
        self._discard_cancelled()
        due = self._pop_due(self._scaled, self.scaled_clock.now)
        due.extend(self._pop_due(self._real, self.real_clock.now))
        due.sort(key=lambda task: (task.fire_at, task.task_id))
        fired: List[ScheduledCommand] = []
        for task in due:
            # a command fired earlier in this tick may cancel a later one
            if task.cancelled:
                continue
            task.fired = True
            logger.debug("Firing scheduled command %d: %s", task.task_id, task.line)
            self._run(task.line)
            fired.append(task)
        return fired

    def _discard_cancelled(self) -> None:
        for queue in (self._scaled, self._real):
            if any(entry[2].cancelled for entry in queue):
                queue[:] = [entry for entry in queue if not entry[2].cancelled]
                heapq.heapify(queue)

    @staticmethod
    def _pop_due(queue: _Queue, now: float) -> List[ScheduledCommand]:
        due: List[ScheduledCommand] = []
        while queue and queue[0][0] <= now:
            due.append(heapq.heappop(queue)[2])
        return due

    def __len__(self) -> int:
        return len(self.pending())


__all__ = ["CommandScheduler", "FrameClock", "ScheduledCommand", "SchedulerError"]
