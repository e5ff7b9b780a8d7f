"""
Input arbitration.

Filters the three player signals before they reach the sequencer:

- progress(): needs the transition lock clear, the cooldown elapsed
  since the last accepted progress, and no other transition accepted
  this frame
- select_option(n): needs an offered ChoiceSet, the lock clear and a
  free frame; n indexes the offered set, not the authored list
- skip_cutscene(): needs a skippable cutscene, the lock clear and a
  free frame

Accepting a signal sets the lock. It is released lock_release_delay
seconds later, or later still while presenter calls are pending.
"""

from __future__ import annotations

import logging
from typing import Optional

from dialog_engine.core.tasks import DelayTask, TaskScheduler
from dialog_flow.dialog.config import DialogConfig
from dialog_flow.dialog.sequencer import DialogSequencer


class InputArbiter:
    """Debounces and serialises player signals for a DialogSequencer."""

    def __init__(
        self,
        sequencer: DialogSequencer,
        scheduler: TaskScheduler,
        config: Optional[DialogConfig] = None,
    ):
        self.sequencer = sequencer
        self.scheduler = scheduler
        self.config = config or sequencer.config
        self.logger = logging.getLogger(__name__)

        self._last_progress_time: Optional[float] = None
        self._last_transition_frame: Optional[int] = None
        self._release_task: Optional[DelayTask] = None

        # Presenter clicks are arbitrated like key presses
        sequencer.selection_callback = self.select_option

    @property
    def locked(self) -> bool:
        return self.sequencer.playback.transition_locked

    def progress(self) -> bool:
        """
        Progress signal (confirm key, click on the text box).

        Returns:
            True if accepted
        """
        if not self.sequencer.can_progress:
            return self._reject("progress", f"nothing to progress in {self.sequencer.state.name}")
        if not self._transition_allowed("progress"):
            return False

        now = self.scheduler.time
        if (
            self._last_progress_time is not None
            and now - self._last_progress_time < self.config.progress_cooldown
        ):
            return self._reject("progress", "cooldown")

        self._last_progress_time = now
        self._accept()
        self.sequencer.advance()
        return True

    def select_option(self, index: int) -> bool:
        """
        Choice signal for the offered set.

        Args:
            index: Index into the currently offered (filtered) choices

        Returns:
            True if accepted
        """
        offered = self.sequencer.offered_choices
        if offered is None:
            return self._reject("select", "no choices offered")
        if offered.get(index) is None:
            return self._reject("select", f"index {index} outside {len(offered)} offered choices")
        if not self._transition_allowed("select"):
            return False

        self._accept()
        self.sequencer.select_choice(index)
        return True

    def skip_cutscene(self) -> bool:
        """
        Skip signal.

        Returns:
            True if accepted
        """
        if not self.sequencer.can_skip_cutscene:
            return self._reject("skip", "no skippable cutscene")
        if not self._transition_allowed("skip"):
            return False

        self._accept()
        self.sequencer.skip_cutscene()
        return True

    def reset(self) -> None:
        """Forget timing history and release the lock."""
        if self._release_task is not None:
            self._release_task.cancel()
            self._release_task = None
        self._last_progress_time = None
        self._last_transition_frame = None
        self.sequencer.playback.transition_locked = False

    def _transition_allowed(self, signal: str) -> bool:
        if self.locked:
            return self._reject(signal, "transition locked")
        if self._last_transition_frame == self.scheduler.frame:
            return self._reject(signal, "transition already accepted this frame")
        return True

    def _reject(self, signal: str, reason: str) -> bool:
        self.logger.debug(f"Rejected {signal}: {reason}")
        return False

    def _accept(self) -> None:
        self.sequencer.playback.transition_locked = True
        self._last_transition_frame = self.scheduler.frame
        self._schedule_release()

    def _schedule_release(self) -> None:
        if self._release_task is not None:
            self._release_task.cancel()
        self._release_task = self.scheduler.delay(
            self.config.lock_release_delay,
            self._try_release,
            name="lock_release",
        )

    def _try_release(self) -> None:
        self._release_task = None
        if self.sequencer.has_pending_presentation:
            self._schedule_release()
            return
        self.sequencer.playback.transition_locked = False
