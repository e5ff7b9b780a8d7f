"""Dialog-layer exceptions."""


class DialogError(Exception):
    """Base class for dialog errors."""


class AuthoringError(DialogError):
    """Raised when authored sequence data cannot be played as written."""


class MissingCorrectChoiceError(AuthoringError):
    """Raised when a node offers choices but none of them is correct."""


class EmptyChoiceSetError(AuthoringError):
    """Raised when filtering leaves nothing to offer while a selection is still required."""


class DuplicateChoiceLabelError(AuthoringError):
    """Raised when two choices in one node share a display label."""


class UnknownBlockError(AuthoringError):
    """Raised when a block is neither a dialog node nor a cutscene."""


class SequenceLoadError(DialogError):
    """Raised when a sequence file cannot be read or parsed."""
