"""
Presentation interfaces consumed by the dialog core.

The core never builds widgets, cameras or mixers itself. It talks to
whatever the game binds into these slots. A slot may be empty (the
widget is not constructed yet); the core then defers the call instead
of failing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, Optional, Protocol, TypeVar

if TYPE_CHECKING:
    from dialog_flow.components.dialog import CutsceneSpec
    from dialog_flow.dialog.choices import ChoiceSet


class TextPresenter(Protocol):
    """Receives resolved, directive-free text during reveal."""

    def show(self, text: str) -> None: ...

    def clear(self) -> None: ...

    def set_speaker(self, speaker: Optional[str]) -> None: ...


class ChoicePresenter(Protocol):
    """Renders an offered choice set and reports clicks by current-set index."""

    def present(self, choice_set: ChoiceSet, on_selected: Callable[[int], None]) -> None: ...

    def dismiss(self) -> None: ...


class AudioPlayer(Protocol):
    """One-shot voice playback."""

    def play_once(self, handle: str) -> object: ...

    def stop(self) -> None: ...


class CutscenePresenter(Protocol):
    """Plays the visual side of a cutscene block."""

    def play(self, cutscene: CutsceneSpec) -> None: ...

    def stop(self) -> None: ...


class SequenceCompletionSink(Protocol):
    """Notified once when a sequence runs past its last block."""

    def on_finished(self) -> None: ...


T = TypeVar("T")


class PresenterSlot(Generic[T]):
    """
    Optional holder for a presenter.

    get() returns None while nothing is bound, so callers check for
    None instead of catching lookup errors.
    """

    def __init__(self, presenter: Optional[T] = None):
        self._presenter = presenter

    def bind(self, presenter: T) -> None:
        self._presenter = presenter

    def unbind(self) -> None:
        self._presenter = None

    def get(self) -> Optional[T]:
        return self._presenter

    @property
    def is_bound(self) -> bool:
        return self._presenter is not None
