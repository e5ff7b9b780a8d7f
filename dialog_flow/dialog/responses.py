"""
Response playback for a selected choice.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Callable, Optional

from dialog_flow.components.dialog import Choice, Response


logger = logging.getLogger(__name__)


class ResponseStep(Enum):
    """Result of stepping through responses."""
    CONTINUING = auto()
    EXHAUSTED = auto()


class ResponseSequencer:
    """
    Steps through the responses of one selected choice.

    Voice audio plays at most once per selection: the choice's own
    handle, or failing that the first response handle reached. Every
    start() is a new selection and re-arms the gate.

    Args:
        show: Called with each response to display and its index
        play_audio: Called with the audio handle to play once
    """

    def __init__(
        self,
        show: Callable[[Response, int], None],
        play_audio: Callable[[str], None],
    ):
        self._show = show
        self._play_audio = play_audio
        self._choice: Optional[Choice] = None
        self._index = 0
        self._audio_armed = False

    @property
    def choice(self) -> Optional[Choice]:
        return self._choice

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> Optional[Response]:
        if self._choice is None or self._index >= len(self._choice.responses):
            return None
        return self._choice.responses[self._index]

    @property
    def is_active(self) -> bool:
        return self.current is not None

    def start(self, choice: Choice) -> ResponseStep:
        """Begin a new selection and show its first response."""
        self._choice = choice
        self._index = 0
        self._audio_armed = True

        if not choice.has_responses:
            self._audio_armed = False
            return ResponseStep.EXHAUSTED

        if choice.audio:
            self._play_once(choice.audio)

        self._present()
        return ResponseStep.CONTINUING

    def advance(self) -> ResponseStep:
        """Show the next response, or report that none are left."""
        if self._choice is None:
            return ResponseStep.EXHAUSTED

        if self._index + 1 >= len(self._choice.responses):
            return ResponseStep.EXHAUSTED

        self._index += 1
        self._present()
        return ResponseStep.CONTINUING

    def reset(self) -> None:
        self._choice = None
        self._index = 0
        self._audio_armed = False

    def _present(self) -> None:
        response = self._choice.responses[self._index]
        if response.audio:
            self._play_once(response.audio)
        self._show(response, self._index)

    def _play_once(self, handle: str) -> None:
        if not self._audio_armed:
            logger.debug(f"Audio '{handle}' suppressed, selection already voiced")
            return
        self._audio_armed = False
        self._play_audio(handle)
