"""
Cutscene playback task and play-once tracking.
"""

from __future__ import annotations

from typing import Callable, Optional

from dialog_engine.core.tasks import DelayTask
from dialog_flow.components.dialog import CutsceneSpec


class CutsceneTask(DelayTask):
    """
    Runs for the cutscene's duration.

    on_stop is called when the task is cancelled (skip or teardown) so
    the presenter can be stopped; natural completion does not call it.
    """

    def __init__(
        self,
        cutscene: CutsceneSpec,
        on_complete: Optional[Callable[[], None]] = None,
        on_stop: Optional[Callable[[], None]] = None,
    ):
        super().__init__(cutscene.duration, on_complete, name=f"cutscene:{cutscene.name}")
        self.cutscene = cutscene
        self._on_stop = on_stop

    def on_cancel(self) -> None:
        callback, self._on_stop = self._on_stop, None
        if callback:
            callback()


class CutsceneTracker:
    """Remembers which cutscenes have played this session."""

    def __init__(self):
        self._played: set[str] = set()

    def has_played(self, name: str) -> bool:
        return name in self._played

    def mark_played(self, name: str) -> None:
        self._played.add(name)

    def should_play(self, cutscene: CutsceneSpec) -> bool:
        """play_once cutscenes only play the first time."""
        return not (cutscene.play_once and self.has_played(cutscene.name))

    def clear(self) -> None:
        self._played.clear()

    @property
    def played(self) -> frozenset[str]:
        return frozenset(self._played)
