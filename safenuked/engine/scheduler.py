"""Delayed actions on a single cooperative clock.

Every automatic action (AI moves, the turn countdown, round-reset pacing)
is a task in this queue. A task remembers the game state it was scheduled
for and is dropped if the game has moved on by the time it comes due.
"""

import heapq
import inspect
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

TaskCallback = Callable[[], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class StateSnapshot:
    """The bits of game state a scheduled task depends on."""
    epoch: int
    round_number: int
    status: Any
    turn_serial: int
    placements: int


@dataclass(order=True)
class ScheduledTask:
    """A pending action."""
    due: float
    seq: int
    name: str = field(compare=False)
    callback: TaskCallback = field(compare=False)
    guard: StateSnapshot = field(compare=False)


class Scheduler:
    """Priority queue of delayed actions, advanced by ``advance()``.

    The clock only moves when advanced, so a front end can drive it in real
    time while tests drive it instantly.
    """

    def __init__(self, snapshot: Callable[[], StateSnapshot]):
        """Initialize the scheduler.

        Args:
            snapshot: Returns the current game state snapshot.
        """
        self._snapshot = snapshot
        self._queue: list[ScheduledTask] = []
        self._seq = itertools.count()
        self.now: float = 0.0

    def schedule(self, delay: float, name: str, callback: TaskCallback) -> ScheduledTask:
        """Schedule ``callback`` to run ``delay`` seconds from now."""
        task = ScheduledTask(
            due=self.now + max(0.0, delay),
            seq=next(self._seq),
            name=name,
            callback=callback,
            guard=self._snapshot(),
        )
        heapq.heappush(self._queue, task)
        return task

    async def advance(
        self,
        seconds: float,
        until: Optional[Callable[[], bool]] = None,
    ) -> int:
        """Move the clock forward, running every task that comes due.

        Tasks scheduled by other tasks run too if they fall inside the window.

        Args:
            seconds: How far to move the clock.
            until: Checked after each task. Once it returns True the clock
                stops at that task's due time and the rest of the window is
                dropped.

        Returns:
            Number of tasks that actually ran.
        """
        target = self.now + max(0.0, seconds)
        ran = 0
        while self._queue and self._queue[0].due <= target:
            task = heapq.heappop(self._queue)
            self.now = task.due
            if task.guard != self._snapshot():
                logger.debug("Dropping stale task %s", task.name)
                continue
            result = task.callback()
            if inspect.isawaitable(result):
                await result
            ran += 1
            if until is not None and until():
                return ran
        self.now = target
        return ran

    def clear(self) -> None:
        """Forget every pending task."""
        self._queue.clear()

    @property
    def pending(self) -> list[str]:
        """Names of pending tasks, soonest first."""
        return [task.name for task in sorted(self._queue)]

    @property
    def next_due(self) -> Optional[float]:
        return self._queue[0].due if self._queue else None
