"""
Dialog sequencer - the playback state machine.

Walks a DialogSequence block by block:

    IDLE -> SHOWING_NODE -> AWAITING_CHOICE | AWAITING_PROGRESSION
    AWAITING_CHOICE -> SHOWING_RESPONSE -> AWAITING_PROGRESSION
    AWAITING_PROGRESSION -> FILTERING_CHOICES -> AWAITING_CHOICE  (wrong pick)
                         -> ADVANCE_BLOCK -> next block           (right pick / no choices)
    CUTSCENE -> ADVANCE_BLOCK
    past the last block -> FINISHED

Authoring errors move to FAILED and stop the sequence. Bookkeeping
mismatches are logged and recovered from instead.

The sequencer never reads input devices. Player signals reach it via
advance(), select_choice() and skip_cutscene(), normally filtered by
InputArbiter.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Any, Callable, Optional

from dialog_engine.core.events import EventBus, UIEvent
from dialog_engine.core.tasks import DelayTask, TaskScheduler
from dialog_flow.components.dialog import (
    Block,
    CutsceneBlock,
    CutsceneSpec,
    DialogBlock,
    DialogNode,
    DialogSequence,
    Response,
)
from dialog_flow.components.playback import DialogState, PlaybackState
from dialog_flow.dialog.choices import ChoiceFilterEngine, ChoiceHistory, ChoiceSet, OfferedChoice
from dialog_flow.dialog.config import DialogConfig
from dialog_flow.dialog.cutscene import CutsceneTask, CutsceneTracker
from dialog_flow.dialog.directives import DirectiveSink, resolve_text
from dialog_flow.dialog.errors import AuthoringError, UnknownBlockError
from dialog_flow.dialog.presenters import (
    AudioPlayer,
    ChoicePresenter,
    CutscenePresenter,
    PresenterSlot,
    SequenceCompletionSink,
    TextPresenter,
)
from dialog_flow.dialog.responses import ResponseSequencer, ResponseStep
from dialog_flow.dialog.text_reveal import TextRevealController


class DialogEvent(Enum):
    """Dialog-specific events."""
    NODE_ENTERED = auto()       # Entered a dialog node
    CHOICE_SELECTED = auto()    # Player selected a choice
    CHOICES_FILTERED = auto()   # Narrower set re-offered after a wrong pick
    RESPONSE_SHOWN = auto()     # A response line started revealing
    TEXT_COMPLETED = auto()     # Reveal finished (naturally or skipped)
    CUTSCENE_STARTED = auto()
    CUTSCENE_ENDED = auto()
    SEQUENCE_FINISHED = auto()
    SEQUENCE_FAILED = auto()


class DialogSequencer:
    """
    Plays one DialogSequence at a time.

    Owns the PlaybackState, the ChoiceHistory and every task the
    sequence starts. Presenters are reached through PresenterSlots and
    called through the scheduler's deferred calls, so a presenter that
    is not bound yet delays output instead of breaking playback.

    Usage:
        sequencer = DialogSequencer(scheduler, config, event_bus)
        sequencer.text_presenter.bind(dialog_box)
        sequencer.choice_presenter.bind(choice_menu)
        sequencer.start(sequence, on_finished=lambda: print("done"))
    """

    def __init__(
        self,
        scheduler: TaskScheduler,
        config: Optional[DialogConfig] = None,
        event_bus: Optional[EventBus] = None,
        directive_sink: Optional[DirectiveSink] = None,
    ):
        self.scheduler = scheduler
        self.config = config or DialogConfig()
        self.event_bus = event_bus
        self.directive_sink = directive_sink
        self.logger = logging.getLogger(__name__)

        # Presenters
        self.text_presenter: PresenterSlot[TextPresenter] = PresenterSlot()
        self.choice_presenter: PresenterSlot[ChoicePresenter] = PresenterSlot()
        self.audio_player: PresenterSlot[AudioPlayer] = PresenterSlot()
        self.cutscene_presenter: PresenterSlot[CutscenePresenter] = PresenterSlot()
        self.completion_sinks: list[SequenceCompletionSink] = []

        # Collaborators
        self.playback = PlaybackState()
        self.history = ChoiceHistory()
        self.filter = ChoiceFilterEngine(self.config.placeholder_label)
        self.reveal = TextRevealController(scheduler, self.text_presenter, self.config)
        self.responses = ResponseSequencer(self._show_response, self._play_audio)
        self.cutscenes = CutsceneTracker()

        # Choice clicks from the presenter go through here; InputArbiter
        # replaces it with its own select_option
        self.selection_callback: Callable[[int], Any] = self.select_choice

        # Callbacks for the running sequence
        self.on_finished: Optional[Callable[[], None]] = None
        self.on_failed: Optional[Callable[[AuthoringError], None]] = None
        self.last_error: Optional[AuthoringError] = None

        self._sequence: Optional[DialogSequence] = None
        self._offered: Optional[ChoiceSet] = None
        self._selected: Optional[OfferedChoice] = None
        self._cutscene_task: Optional[CutsceneTask] = None
        self._auto_task: Optional[DelayTask] = None
        self._finish_notified = False
        self._voice_started = False

        # Bumped by every halt; a transition that sees a different value
        # after calling out to handlers was interrupted and must not continue
        self._generation = 0

    # Properties

    @property
    def state(self) -> DialogState:
        return self.playback.state

    @property
    def sequence(self) -> Optional[DialogSequence]:
        return self._sequence

    @property
    def is_active(self) -> bool:
        return self.playback.is_active

    @property
    def is_revealing(self) -> bool:
        return self.reveal.is_busy

    @property
    def offered_choices(self) -> Optional[ChoiceSet]:
        """The ChoiceSet on offer, or None when no selection is possible."""
        if self.playback.state != DialogState.AWAITING_CHOICE:
            return None
        return self._offered

    @property
    def selected_choice(self) -> Optional[OfferedChoice]:
        return self._selected

    @property
    def current_block(self) -> Optional[Block]:
        if self._sequence is None:
            return None
        return self._sequence.get_block(self.playback.block_index)

    @property
    def current_node(self) -> Optional[DialogNode]:
        block = self.current_block
        if isinstance(block, DialogBlock):
            return block.node
        return None

    @property
    def current_cutscene(self) -> Optional[CutsceneSpec]:
        if self._cutscene_task is None:
            return None
        return self._cutscene_task.cutscene

    @property
    def can_progress(self) -> bool:
        """A progress signal would do something right now."""
        return self.reveal.is_busy or self.playback.state == DialogState.AWAITING_PROGRESSION

    @property
    def can_skip_cutscene(self) -> bool:
        cutscene = self.current_cutscene
        return (
            self.playback.state == DialogState.CUTSCENE
            and cutscene is not None
            and cutscene.skippable
        )

    @property
    def has_pending_presentation(self) -> bool:
        return self.scheduler.has_pending()

    # Lifecycle

    def start(
        self,
        sequence: DialogSequence,
        on_finished: Optional[Callable[[], None]] = None,
        on_failed: Optional[Callable[[AuthoringError], None]] = None,
    ) -> None:
        """
        Play a sequence from its first block with a fresh ChoiceHistory.

        Args:
            sequence: Sequence to play
            on_finished: Called once after the last block
            on_failed: Called with the error if the sequence fails
        """
        self._halt()
        if self._offered is not None:
            self._dismiss_choices()
        self.playback.reset()
        self.history = ChoiceHistory()
        self.responses.reset()
        self._sequence = sequence
        self._finish_notified = False
        self.last_error = None
        self.on_finished = on_finished
        self.on_failed = on_failed

        self.logger.info(f"Starting dialog sequence '{sequence.id}' ({len(sequence)} blocks)")
        self._enter_block(0)

    def replay_block(self, index: int) -> bool:
        """
        Re-enter a block of the current sequence, keeping ChoiceHistory.

        Returns:
            True if the block was entered
        """
        if self._sequence is None or self._sequence.get_block(index) is None:
            self.logger.warning(f"Cannot replay block {index}: no such block")
            return False

        self._halt()
        if self._offered is not None:
            self._dismiss_choices()
        self.responses.reset()
        self._enter_block(index)
        return True

    def stop(self) -> None:
        """Abandon the running sequence without completion."""
        if not self.playback.is_active:
            return

        self.logger.info(f"Stopping dialog sequence '{self._sequence.id}'")
        self._halt()
        self._dismiss_choices()
        self.reveal.clear()
        self.playback.state = DialogState.IDLE
        self.on_finished = None
        self.on_failed = None

    # Player signals

    def advance(self) -> bool:
        """
        Progress signal.

        Skips an in-flight reveal, steps responses, or leaves a
        choiceless node.

        Returns:
            True if the signal caused a transition
        """
        if self.reveal.is_busy:
            return self.reveal.skip()

        state = self.playback.state
        if state != DialogState.AWAITING_PROGRESSION:
            self.logger.debug(f"Progress ignored in state {state.name}")
            return False

        if self._selected is not None:
            if self.responses.advance() == ResponseStep.EXHAUSTED:
                self._after_selection()
            return True

        self._cancel_auto_advance()
        self._advance_block()
        return True

    def select_choice(self, index: int) -> bool:
        """
        Select a choice by its index in the offered (filtered) set.

        Returns:
            True if the selection was applied
        """
        if self.playback.state != DialogState.AWAITING_CHOICE or self._offered is None:
            self.logger.warning(
                f"Choice {index} selected in state {self.playback.state.name}, ignored"
            )
            return False

        entry = self._offered.get(index)
        node = self.current_node
        if entry is None or node is None or not self._entry_matches(entry, node):
            self.logger.warning(
                f"Choice {index} does not match the {len(self._offered)} offered choices "
                f"of block {self.playback.block_index}, re-offering"
            )
            self._offer_choices()
            return False

        self._selected = entry
        self.playback.selected_index = entry.original_index
        self.playback.selection_serial += 1
        self.filter.apply_selection(self.history, entry.choice, entry.original_index, entry.label)
        self._dismiss_choices()

        generation = self._generation
        self._publish(
            DialogEvent.CHOICE_SELECTED,
            index=index,
            original_index=entry.original_index,
            label=entry.label,
            correct=entry.choice.is_correct,
        )
        if self._interrupted(generation, "choice selection"):
            return True

        if entry.choice.has_responses:
            self.playback.state = DialogState.SHOWING_RESPONSE
            self.responses.start(entry.choice)
        else:
            self.responses.reset()
            self._after_selection()
        return True

    def skip_cutscene(self) -> bool:
        """
        Interrupt the running cutscene.

        Returns:
            True if a cutscene was skipped
        """
        task = self._cutscene_task
        if self.playback.state != DialogState.CUTSCENE or task is None:
            self.logger.debug(f"Skip ignored in state {self.playback.state.name}")
            return False

        if not task.cutscene.skippable:
            self.logger.debug(f"Cutscene '{task.cutscene.name}' is not skippable")
            return False

        self._cutscene_task = None
        task.cancel()
        self._publish(DialogEvent.CUTSCENE_ENDED, name=task.cutscene.name, skipped=True)
        self._advance_block()
        return True

    # Blocks

    def _enter_block(self, index: int) -> None:
        self.playback.block_index = index
        self.playback.clear_selection()
        self._selected = None
        self._offered = None

        block = self._sequence.get_block(index)
        if block is None:
            self._finish()
            return

        try:
            if isinstance(block, DialogBlock):
                self._enter_node(block.node)
            elif isinstance(block, CutsceneBlock):
                self._enter_cutscene(block.cutscene)
            else:
                raise UnknownBlockError(
                    f"Block {index} is a {type(block).__name__}, not a dialog or cutscene"
                )
        except AuthoringError as e:
            self._fail(e)

    def _advance_block(self) -> None:
        self.playback.state = DialogState.ADVANCE_BLOCK
        self.responses.reset()
        self._enter_block(self.playback.block_index + 1)

    def _enter_node(self, node: DialogNode) -> None:
        # Reject unplayable choice nodes before any side effect fires
        self.filter.validate_node(node)

        self.playback.state = DialogState.SHOWING_NODE
        generation = self._generation
        text = resolve_text(node.text, self.directive_sink)
        if self._interrupted(generation, "node entry"):
            return

        self._publish(
            DialogEvent.NODE_ENTERED,
            block_index=self.playback.block_index,
            speaker=node.speaker,
            text=text,
            fade=node.fade,
            location=node.location,
            camera=node.camera,
        )
        if self._interrupted(generation, "node entry"):
            return

        self._set_speaker(node.speaker)
        if node.audio:
            self._play_audio(node.audio)

        self._reveal(text, self._on_node_revealed)

    def _on_node_revealed(self) -> None:
        node = self.current_node
        if node is None:
            self.logger.warning(f"Node reveal finished outside a dialog block ({self.state.name})")
            return

        if node.has_choices:
            self._offer_choices()
            return

        self.playback.state = DialogState.AWAITING_PROGRESSION
        if self.config.auto_advance_delay is not None:
            self._auto_task = self.scheduler.delay(
                self.config.auto_advance_delay,
                self._auto_advance,
                name="auto_advance",
            )

    def _auto_advance(self) -> None:
        self._auto_task = None
        if self.playback.state == DialogState.AWAITING_PROGRESSION and self._selected is None:
            self._advance_block()

    def _cancel_auto_advance(self) -> None:
        if self._auto_task is not None:
            self._auto_task.cancel()
            self._auto_task = None

    # Choices

    def _offer_choices(self) -> None:
        node = self.current_node
        if node is None:
            self.logger.warning(
                f"No dialog node at block {self.playback.block_index} to offer choices for"
            )
            self._advance_block()
            return

        try:
            choice_set = self.filter.resolve_offered_set(node, self.playback.block_index, self.history)
        except AuthoringError as e:
            self._fail(e)
            return

        self._offered = choice_set
        self.playback.state = DialogState.AWAITING_CHOICE
        self.scheduler.defer(
            "choices",
            self.choice_presenter.get,
            lambda presenter: presenter.present(choice_set, self._on_choice_clicked),
            self.config.presenter_retry_window,
        )
        self._publish(UIEvent.CHOICES_PRESENTED, labels=choice_set.labels)

    def _on_choice_clicked(self, index: int) -> Any:
        return self.selection_callback(index)

    def _dismiss_choices(self) -> None:
        was_offered = self._offered is not None
        self._offered = None
        self.scheduler.cancel_deferred("choices")
        presenter = self.choice_presenter.get()
        if presenter is not None:
            presenter.dismiss()
        if was_offered:
            self._publish(UIEvent.CHOICES_DISMISSED)

    def _entry_matches(self, entry: OfferedChoice, node: DialogNode) -> bool:
        if not 0 <= entry.original_index < len(node.choices):
            return False
        return node.choices[entry.original_index] == entry.choice

    def _after_selection(self) -> None:
        entry = self._selected
        if entry is None:
            self.logger.warning(
                f"No selection to resolve at block {self.playback.block_index}, advancing"
            )
            self._advance_block()
            return

        if entry.choice.is_correct:
            self._advance_block()
            return

        self.playback.state = DialogState.FILTERING_CHOICES
        self._selected = None
        self.playback.clear_selection()
        self.responses.reset()
        self._offer_choices()

        if self._offered is not None:
            self._publish(
                DialogEvent.CHOICES_FILTERED,
                block_index=self.playback.block_index,
                removed=entry.label,
                remaining=self._offered.labels,
            )

    # Responses

    def _show_response(self, response: Response, index: int) -> None:
        self.playback.state = DialogState.SHOWING_RESPONSE
        self.playback.response_index = index
        generation = self._generation
        text = resolve_text(response.text, self.directive_sink)
        if self._interrupted(generation, "response"):
            return

        self._publish(
            DialogEvent.RESPONSE_SHOWN,
            block_index=self.playback.block_index,
            response_index=index,
            speaker=response.speaker,
            text=text,
        )
        if self._interrupted(generation, "response"):
            return

        self._set_speaker(response.speaker)
        self._reveal(text, self._on_response_revealed)

    def _on_response_revealed(self) -> None:
        self.playback.state = DialogState.AWAITING_PROGRESSION

    # Cutscenes

    def _enter_cutscene(self, cutscene: CutsceneSpec) -> None:
        if not self.cutscenes.should_play(cutscene):
            self.logger.info(f"Cutscene '{cutscene.name}' already played, skipping")
            self._advance_block()
            return

        self.cutscenes.mark_played(cutscene.name)
        self.playback.state = DialogState.CUTSCENE
        self.reveal.clear()

        task = CutsceneTask(cutscene, self._on_cutscene_complete, self._stop_cutscene_presenter)
        self._cutscene_task = task
        self.scheduler.add(task)
        self.scheduler.defer(
            "cutscene",
            self.cutscene_presenter.get,
            lambda presenter: presenter.play(cutscene),
            self.config.presenter_retry_window,
        )
        self._publish(
            DialogEvent.CUTSCENE_STARTED,
            name=cutscene.name,
            duration=cutscene.duration,
            skippable=cutscene.skippable,
        )

    def _on_cutscene_complete(self) -> None:
        task, self._cutscene_task = self._cutscene_task, None
        name = task.cutscene.name if task else ""
        self._publish(DialogEvent.CUTSCENE_ENDED, name=name, skipped=False)
        self._advance_block()

    def _stop_cutscene_presenter(self) -> None:
        self.scheduler.cancel_deferred("cutscene")
        presenter = self.cutscene_presenter.get()
        if presenter is not None:
            presenter.stop()

    # Ending

    def _finish(self) -> None:
        self.playback.state = DialogState.FINISHED
        self._offered = None
        if self._finish_notified:
            return
        self._finish_notified = True

        sequence_id = self._sequence.id if self._sequence else ""
        self.logger.info(f"Dialog sequence '{sequence_id}' finished")
        self._publish(DialogEvent.SEQUENCE_FINISHED, sequence_id=sequence_id)

        callback, self.on_finished = self.on_finished, None
        if callback:
            callback()
        for sink in list(self.completion_sinks):
            sink.on_finished()

    def _fail(self, error: AuthoringError) -> None:
        self._halt()
        self._dismiss_choices()
        self.playback.state = DialogState.FAILED
        self.last_error = error

        sequence_id = self._sequence.id if self._sequence else ""
        self.logger.error(
            f"Dialog sequence '{sequence_id}' failed at block {self.playback.block_index}: {error}"
        )
        self._publish(
            DialogEvent.SEQUENCE_FAILED,
            sequence_id=sequence_id,
            block_index=self.playback.block_index,
            error=error,
        )

        self.on_finished = None
        callback, self.on_failed = self.on_failed, None
        if callback:
            callback(error)

    def _halt(self) -> None:
        """Cancel every task this sequencer started and silence its voice line."""
        self._generation += 1
        self.reveal.cancel()
        self.playback.revealing = False
        self._cancel_auto_advance()
        self.responses.reset()
        if self._cutscene_task is not None:
            task, self._cutscene_task = self._cutscene_task, None
            task.cancel()

        self.scheduler.cancel_deferred("audio")
        if self._voice_started:
            self._voice_started = False
            player = self.audio_player.get()
            if player is not None:
                player.stop()

    def _interrupted(self, generation: int, step: str) -> bool:
        if generation == self._generation:
            return False
        self.logger.debug(f"Sequence halted during {step}, abandoning it")
        return True

    # Helpers

    def _reveal(self, text: str, on_complete: Callable[[], None]) -> None:
        def finished() -> None:
            self.playback.revealing = False
            self._publish(DialogEvent.TEXT_COMPLETED, block_index=self.playback.block_index, text=text)
            on_complete()

        self.playback.revealing = True
        self.reveal.reveal(text, on_complete=finished)

    def _set_speaker(self, speaker: Optional[str]) -> None:
        self.scheduler.defer(
            "speaker",
            self.text_presenter.get,
            lambda presenter: presenter.set_speaker(speaker),
            self.config.presenter_retry_window,
        )

    def _play_audio(self, handle: str) -> None:
        def play(player: AudioPlayer) -> None:
            self._voice_started = True
            player.play_once(handle)

        self.scheduler.defer("audio", self.audio_player.get, play, self.config.presenter_retry_window)

    def _publish(self, event_type: Enum, **data: Any) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event_type, **data)
