"""
Cooperative task scheduler.

Everything time-based in the dialog layer (typewriter reveal, cutscene
playback, lock release, presenter retries) runs as a task on a single
scheduler that is ticked once per frame. There are no threads: a task
advances only inside TaskScheduler.update().

Task rules:
- A task fires its completion callback at most once
- cancel() is synchronous and idempotent
- A cancelled task never fires its completion, even if it was due

Usage:
    scheduler = TaskScheduler()
    scheduler.delay(0.5, lambda: print("half a second later"))

    # In the frame loop
    scheduler.update(dt)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)


class TaskState(Enum):
    """Lifecycle of a scheduled task."""
    RUNNING = auto()
    COMPLETED = auto()
    CANCELLED = auto()


class ScheduledTask:
    """
    Base class for frame-driven tasks.

    Subclasses override update() and call complete() when finished.
    """

    def __init__(self, on_complete: Optional[Callable[[], None]] = None, name: str = ""):
        self.name = name or self.__class__.__name__
        self.state = TaskState.RUNNING
        self._on_complete = on_complete

    @property
    def running(self) -> bool:
        return self.state == TaskState.RUNNING

    @property
    def completed(self) -> bool:
        return self.state == TaskState.COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.state == TaskState.CANCELLED

    def update(self, dt: float) -> None:
        """Advance the task by dt seconds."""
        pass

    def complete(self) -> None:
        """Finish the task and fire its completion callback once."""
        if not self.running:
            return

        self.state = TaskState.COMPLETED
        callback, self._on_complete = self._on_complete, None
        if callback:
            callback()

    def cancel(self) -> None:
        """Stop the task without firing its completion."""
        if not self.running:
            return

        self.state = TaskState.CANCELLED
        self._on_complete = None
        self.on_cancel()

    def on_cancel(self) -> None:
        """Hook for subclasses to release what they hold."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, state={self.state.name})"


class DelayTask(ScheduledTask):
    """Completes after a fixed amount of scheduler time."""

    def __init__(
        self,
        duration: float,
        on_complete: Optional[Callable[[], None]] = None,
        name: str = "",
    ):
        super().__init__(on_complete, name)
        self.duration = max(0.0, duration)
        self.elapsed = 0.0

    @property
    def progress(self) -> float:
        """Completion fraction in [0, 1]."""
        if self.duration <= 0:
            return 1.0
        return min(1.0, self.elapsed / self.duration)

    def update(self, dt: float) -> None:
        if not self.running:
            return

        self.elapsed += dt
        if self.elapsed >= self.duration:
            self.complete()


@dataclass
class DeferredCall:
    """A presenter call waiting for its target to become available."""
    key: str
    lookup: Callable[[], Any]
    action: Callable[[Any], None]
    window: float
    waited: float = 0.0

    def attempt(self) -> bool:
        """Run the action if the target exists. Returns True when done."""
        target = self.lookup()
        if target is None:
            return False
        self.action(target)
        return True


class TaskScheduler:
    """
    Ticks tasks and deferred calls once per frame.

    Attributes:
        time: Scheduler clock in seconds (sum of all dt)
        frame: Number of update() calls so far
    """

    def __init__(self):
        self.time = 0.0
        self.frame = 0
        self._tasks: list[ScheduledTask] = []
        self._deferred: dict[str, DeferredCall] = {}

    # Tasks

    def add(self, task: ScheduledTask) -> ScheduledTask:
        """Schedule a task. It first advances on the next update()."""
        self._tasks.append(task)
        return task

    def delay(
        self,
        seconds: float,
        callback: Callable[[], None],
        name: str = "",
    ) -> DelayTask:
        """Call callback after seconds of scheduler time."""
        task = DelayTask(seconds, callback, name)
        self.add(task)
        return task

    @property
    def active_tasks(self) -> list[ScheduledTask]:
        return [task for task in self._tasks if task.running]

    # Deferred presenter calls

    def defer(
        self,
        key: str,
        lookup: Callable[[], Any],
        action: Callable[[Any], None],
        window: float,
    ) -> bool:
        """
        Run action(target) as soon as lookup() returns a target.

        The call is attempted immediately. If the target is missing it
        is retried every frame until window seconds have passed, then
        dropped with a warning. A newer call with the same key replaces
        a pending one.

        Returns:
            True if the action ran immediately
        """
        call = DeferredCall(key=key, lookup=lookup, action=action, window=window)

        # Newest wins even when it runs immediately
        self._deferred.pop(key, None)

        if call.attempt():
            return True

        self._deferred[key] = call
        return False

    def has_pending(self, key: Optional[str] = None) -> bool:
        """Check for deferred calls still waiting on their target."""
        if key is None:
            return bool(self._deferred)
        return key in self._deferred

    def cancel_deferred(self, key: str) -> None:
        self._deferred.pop(key, None)

    # Frame update

    def update(self, dt: float) -> None:
        """Advance the clock, retry deferred calls, then tick tasks."""
        self.frame += 1
        self.time += dt

        for key, call in list(self._deferred.items()):
            if self._deferred.get(key) is not call:
                continue

            if call.attempt():
                if self._deferred.get(key) is call:
                    del self._deferred[key]
                continue

            call.waited += dt
            if call.waited >= call.window:
                del self._deferred[key]
                logger.warning(
                    f"Presenter for '{key}' unavailable after {call.window:.2f}s, call dropped"
                )

        for task in list(self._tasks):
            if task.running:
                task.update(dt)

        self._tasks = [task for task in self._tasks if task.running]

    def clear(self) -> None:
        """Cancel every task and drop every deferred call."""
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()
        self._deferred.clear()
