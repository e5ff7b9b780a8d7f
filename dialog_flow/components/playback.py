"""
Playback state - the single mutable cursor of a running sequence.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DialogState(Enum):
    """State of the dialog sequencer."""
    IDLE = auto()
    SHOWING_NODE = auto()
    AWAITING_CHOICE = auto()
    AWAITING_PROGRESSION = auto()
    SHOWING_RESPONSE = auto()
    FILTERING_CHOICES = auto()
    ADVANCE_BLOCK = auto()
    CUTSCENE = auto()
    FINISHED = auto()
    FAILED = auto()


class PlaybackState(BaseModel):
    """
    Runtime cursor owned by DialogSequencer.

    Attributes:
        state: Current sequencer state
        block_index: Index of the block being played
        response_index: Response being shown for the selected choice
        selected_index: Original (authoring) index of the selected choice
        selection_serial: Increments on every accepted selection
        revealing: Text is mid-reveal
        transition_locked: Input arbiter holds the transition lock
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid',
    )

    state: DialogState = DialogState.IDLE
    block_index: int = Field(default=0, ge=0)
    response_index: int = Field(default=0, ge=0)
    selected_index: Optional[int] = Field(default=None, ge=0)
    selection_serial: int = Field(default=0, ge=0)
    revealing: bool = False
    transition_locked: bool = False

    @property
    def is_active(self) -> bool:
        """Check if a sequence is running."""
        return self.state not in (DialogState.IDLE, DialogState.FINISHED, DialogState.FAILED)

    @property
    def has_selection(self) -> bool:
        return self.selected_index is not None

    def clear_selection(self) -> None:
        """Drop per-node transient selection state."""
        self.selected_index = None
        self.response_index = 0

    def reset(self) -> None:
        """Return to a fresh cursor."""
        self.state = DialogState.IDLE
        self.block_index = 0
        self.clear_selection()
        self.selection_serial = 0
        self.revealing = False
        self.transition_locked = False
