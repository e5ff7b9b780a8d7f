"""
Typewriter text reveal.

A reveal runs as a task on the shared scheduler. Each tick it emits a
longer prefix of the text to the TextPresenter; the presenter is only
called when the visible prefix actually changes.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional

from dialog_engine.core.tasks import ScheduledTask, TaskScheduler
from dialog_flow.dialog.config import DialogConfig
from dialog_flow.dialog.presenters import PresenterSlot, TextPresenter


logger = logging.getLogger(__name__)


class RevealTask(ScheduledTask):
    """
    Emits growing prefixes of a text until its duration elapses.

    Args:
        text: Fully resolved text to reveal
        duration: Seconds until the whole text is visible
        emit: Called with each new visible prefix
        on_complete: Called once when the full text is visible
    """

    def __init__(
        self,
        text: str,
        duration: float,
        emit: Callable[[str], None],
        on_complete: Optional[Callable[[], None]] = None,
    ):
        super().__init__(on_complete, name="reveal")
        self.text = text
        self.duration = duration
        self.elapsed = 0.0
        self.visible_length = -1
        self._emit = emit

    def start(self) -> None:
        self._show(0)

    def update(self, dt: float) -> None:
        if not self.running:
            return

        self.elapsed += dt
        if self.elapsed >= self.duration:
            self.finish()
            return

        self._show(math.floor(len(self.text) * self.elapsed / self.duration))

    def finish(self) -> None:
        """Show the whole text and complete."""
        if not self.running:
            return
        self._show(len(self.text))
        self.complete()

    def _show(self, length: int) -> None:
        if length == self.visible_length:
            return
        self.visible_length = length
        self._emit(self.text[:length])


class TextRevealController:
    """
    Owns the single active reveal.

    Starting a new reveal cancels the previous one without firing its
    completion. While a reveal runs, is_busy is True and progression
    input should be turned into skip().
    """

    def __init__(
        self,
        scheduler: TaskScheduler,
        presenter: Optional[PresenterSlot[TextPresenter]] = None,
        config: Optional[DialogConfig] = None,
    ):
        self.scheduler = scheduler
        self.presenter = presenter or PresenterSlot()
        self.config = config or DialogConfig()
        self._task: Optional[RevealTask] = None
        self._text = ""

    @property
    def is_busy(self) -> bool:
        return self._task is not None and self._task.running

    @property
    def text(self) -> str:
        """Full text of the current (or last) reveal."""
        return self._text

    def reveal_duration(self, text: str, chars_per_second: Optional[float] = None) -> float:
        """Seconds a reveal of text takes; never below min_reveal_duration."""
        cps = chars_per_second if chars_per_second is not None else self.config.chars_per_second
        if cps <= 0:
            raise ValueError(f"chars_per_second must be positive, got {cps}")
        if not text:
            return 0.0
        return max(len(text) / cps, self.config.min_reveal_duration)

    def reveal(
        self,
        text: str,
        chars_per_second: Optional[float] = None,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> Optional[RevealTask]:
        """
        Start revealing text.

        Args:
            text: Directive-free text to show
            chars_per_second: Reveal speed (config default when None)
            on_complete: Called once when the full text is visible

        Returns:
            The running task, or None if the text completed immediately
        """
        duration = self.reveal_duration(text, chars_per_second)
        self.cancel()
        self._text = text

        if not text:
            self._show("")
            if on_complete:
                on_complete()
            return None

        task = RevealTask(text, duration, self._show, on_complete)
        self._task = task
        self.scheduler.add(task)
        task.start()
        return task

    def skip(self) -> bool:
        """
        Show the full text now and fire completion.

        Returns:
            True if a running reveal was skipped
        """
        task = self._task
        if task is None or not task.running:
            return False

        logger.debug(f"Reveal skipped at {task.elapsed:.2f}/{task.duration:.2f}s")
        task.finish()
        return True

    def cancel(self) -> None:
        """Stop the current reveal without completion."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def clear(self) -> None:
        """Cancel and blank the presenter."""
        self.cancel()
        self._text = ""
        self.scheduler.defer(
            "text",
            self.presenter.get,
            lambda presenter: presenter.clear(),
            self.config.presenter_retry_window,
        )

    def _show(self, text: str) -> None:
        self.scheduler.defer(
            "text",
            self.presenter.get,
            lambda presenter: presenter.show(text),
            self.config.presenter_retry_window,
        )
