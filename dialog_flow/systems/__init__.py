"""
Dialog systems - frame-loop processors.
"""

from dialog_flow.systems.dialog import DialogSystem
from dialog_flow.dialog.sequencer import DialogEvent

__all__ = [
    "DialogSystem",
    "DialogEvent",
]
