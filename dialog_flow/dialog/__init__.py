"""
Dialog core.

Sequencing, text reveal, choice filtering and input arbitration for
branching dialog sequences.
"""

from dialog_flow.dialog.arbiter import InputArbiter
from dialog_flow.dialog.choices import (
    ChoiceFilterEngine,
    ChoiceHistory,
    ChoiceSet,
    ChoiceTracker,
    OfferedChoice,
)
from dialog_flow.dialog.config import DialogConfig
from dialog_flow.dialog.cutscene import CutsceneTask, CutsceneTracker
from dialog_flow.dialog.directives import (
    Directive,
    DirectiveEvent,
    DirectiveKind,
    DirectiveSink,
    EventBusDirectiveSink,
    ParsedText,
    apply_directives,
    parse_text,
    resolve_text,
)
from dialog_flow.dialog.errors import (
    AuthoringError,
    DialogError,
    DuplicateChoiceLabelError,
    EmptyChoiceSetError,
    MissingCorrectChoiceError,
    SequenceLoadError,
    UnknownBlockError,
)
from dialog_flow.dialog.loader import load_sequence, sequence_from_dict, validate_sequence
from dialog_flow.dialog.parser import SequenceParser, compile_sequence_file
from dialog_flow.dialog.presenters import (
    AudioPlayer,
    ChoicePresenter,
    CutscenePresenter,
    PresenterSlot,
    SequenceCompletionSink,
    TextPresenter,
)
from dialog_flow.dialog.responses import ResponseSequencer, ResponseStep
from dialog_flow.dialog.sequencer import DialogEvent, DialogSequencer
from dialog_flow.dialog.text_reveal import RevealTask, TextRevealController

__all__ = [
    # State machine
    "DialogSequencer",
    "DialogEvent",
    "InputArbiter",
    "DialogConfig",
    # Text
    "TextRevealController",
    "RevealTask",
    "Directive",
    "DirectiveEvent",
    "DirectiveKind",
    "DirectiveSink",
    "EventBusDirectiveSink",
    "ParsedText",
    "apply_directives",
    "parse_text",
    "resolve_text",
    # Choices
    "ChoiceFilterEngine",
    "ChoiceHistory",
    "ChoiceSet",
    "ChoiceTracker",
    "OfferedChoice",
    "ResponseSequencer",
    "ResponseStep",
    # Cutscenes
    "CutsceneTask",
    "CutsceneTracker",
    # Presenters
    "AudioPlayer",
    "ChoicePresenter",
    "CutscenePresenter",
    "PresenterSlot",
    "SequenceCompletionSink",
    "TextPresenter",
    # Loading
    "SequenceParser",
    "compile_sequence_file",
    "load_sequence",
    "sequence_from_dict",
    "validate_sequence",
    # Errors
    "DialogError",
    "AuthoringError",
    "DuplicateChoiceLabelError",
    "EmptyChoiceSetError",
    "MissingCorrectChoiceError",
    "SequenceLoadError",
    "UnknownBlockError",
]
