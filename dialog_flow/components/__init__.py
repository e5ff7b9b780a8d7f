"""
Dialog data components.

Authoring data (immutable) and the runtime playback cursor.
"""

from dialog_flow.components.dialog import (
    Block,
    Choice,
    CutsceneBlock,
    CutsceneFade,
    CutsceneSpec,
    DialogBlock,
    DialogNode,
    DialogSequence,
    DisplayLocation,
    PLACEHOLDER_LABEL,
    Response,
)
from dialog_flow.components.playback import DialogState, PlaybackState

__all__ = [
    "Block",
    "Choice",
    "CutsceneBlock",
    "CutsceneFade",
    "CutsceneSpec",
    "DialogBlock",
    "DialogNode",
    "DialogSequence",
    "DisplayLocation",
    "PLACEHOLDER_LABEL",
    "Response",
    "DialogState",
    "PlaybackState",
]
