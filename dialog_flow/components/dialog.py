"""
Dialog components - authored sequence data.

Everything here is immutable authoring data, loaded once per session.
Runtime state lives in PlaybackState.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


PLACEHOLDER_LABEL = "Choice {n}"


class CutsceneFade(Enum):
    """Background fade directive attached to a dialog node."""
    NONE = "none"
    FADE_IN = "fade_in"
    FADE_OUT = "fade_out"
    STAY_IN = "stay_in"
    STAY_OUT = "stay_out"


class DisplayLocation(Enum):
    """Where a node's text is displayed: the 2D panel or a 3D anchor."""
    PANEL = "panel"
    REY = "rey"
    MOTHER = "mother"
    FATHER = "father"

    @property
    def is_anchor(self) -> bool:
        return self is not DisplayLocation.PANEL


@dataclass(frozen=True)
class Response:
    """One line of reactive dialog played after a choice."""
    text: str
    speaker: Optional[str] = None  # None = no name shown
    audio: Optional[str] = None


@dataclass(frozen=True)
class Choice:
    """A single selectable option."""
    label: str
    is_correct: bool = False
    responses: tuple[Response, ...] = ()
    audio: Optional[str] = None

    def display_label(self, original_index: int, placeholder: str = PLACEHOLDER_LABEL) -> str:
        """Label shown to the player; empty labels get a numbered placeholder."""
        if self.label and self.label.strip():
            return self.label
        return placeholder.format(n=original_index + 1)

    @property
    def has_responses(self) -> bool:
        return len(self.responses) > 0


@dataclass(frozen=True)
class DialogNode:
    """A single dialog message, optionally with choices."""
    text: str
    speaker: Optional[str] = None
    choices: tuple[Choice, ...] = ()
    fade: CutsceneFade = CutsceneFade.NONE
    location: DisplayLocation = DisplayLocation.PANEL
    audio: Optional[str] = None
    camera: Optional[str] = None

    @property
    def has_choices(self) -> bool:
        return len(self.choices) > 0

    @property
    def has_correct_choice(self) -> bool:
        return any(choice.is_correct for choice in self.choices)


@dataclass(frozen=True)
class CutsceneSpec:
    """
    A timed cutscene block.

    Attributes:
        name: Timeline/cutscene identifier passed to the presenter
        duration: Playback length in seconds
        skippable: Whether the skip signal may interrupt it
        play_once: Skip it if it already played this session
    """
    name: str
    duration: float
    skippable: bool = True
    play_once: bool = False


@dataclass(frozen=True)
class DialogBlock:
    """Block variant carrying a dialog node."""
    node: DialogNode


@dataclass(frozen=True)
class CutsceneBlock:
    """Block variant carrying a cutscene."""
    cutscene: CutsceneSpec


Block = Union[DialogBlock, CutsceneBlock]


@dataclass(frozen=True)
class DialogSequence:
    """An ordered list of blocks played front to back."""
    id: str
    blocks: tuple[Block, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.blocks)

    def get_block(self, index: int) -> Optional[Block]:
        """Get a block by index, or None when out of range."""
        if 0 <= index < len(self.blocks):
            return self.blocks[index]
        return None
