"""
Dialog system - connects the dialog core to a frame loop.

Owns the scheduler, the DialogSequencer and its InputArbiter, maps
input actions to the three player signals, resolves sequences from
the SequenceDatabase and publishes DIALOG_STARTED/DIALOG_ENDED.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional, Union

from dialog_engine.core.actions import Action, CHOICE_ACTIONS
from dialog_engine.core.events import EventBus, UIEvent
from dialog_engine.core.tasks import TaskScheduler
from dialog_flow.components.dialog import DialogSequence
from dialog_flow.dialog.arbiter import InputArbiter
from dialog_flow.dialog.config import DialogConfig
from dialog_flow.dialog.directives import DirectiveSink, EventBusDirectiveSink
from dialog_flow.dialog.errors import AuthoringError, DialogError
from dialog_flow.dialog.loader import sequence_from_dict
from dialog_flow.dialog.presenters import (
    AudioPlayer,
    ChoicePresenter,
    CutscenePresenter,
    SequenceCompletionSink,
    TextPresenter,
)
from dialog_flow.dialog.sequencer import DialogSequencer

if TYPE_CHECKING:
    from dialog_engine.input.handler import InputHandler
    from dialog_engine.resources.database import SequenceDatabase


class DialogSystem:
    """
    Runs dialog sequences inside the game loop.

    Usage:
        dialog_system = DialogSystem(event_bus, input_handler, database=database)
        dialog_system.bind_text_presenter(dialog_box)
        dialog_system.bind_choice_presenter(choice_menu)
        dialog_system.bind_audio_player(audio_manager)

        # Start a sequence by id (path under the dialog folder)
        dialog_system.start_sequence("day1/seq1", on_finished=load_next_scene)

        # Each frame, after input_handler.update()
        dialog_system.update(dt)
    """

    def __init__(
        self,
        event_bus: EventBus,
        input_handler: Optional[InputHandler] = None,
        config: Optional[DialogConfig] = None,
        database: Optional[SequenceDatabase] = None,
        directive_sink: Optional[DirectiveSink] = None,
    ):
        self.event_bus = event_bus
        self.input_handler = input_handler
        self.config = config or DialogConfig()
        self.database = database
        self.enabled = True
        self.logger = logging.getLogger(__name__)

        self.scheduler = TaskScheduler()
        self.sequencer = DialogSequencer(
            self.scheduler,
            self.config,
            event_bus,
            directive_sink or EventBusDirectiveSink(event_bus),
        )
        self.arbiter = InputArbiter(self.sequencer, self.scheduler, self.config)

        # Sequences built from database entries: id -> sequence
        self._sequences: dict[str, DialogSequence] = {}

        # Keyboard/gamepad highlight inside the offered choices
        self.highlighted_choice = 0

    # Presenters

    def bind_text_presenter(self, presenter: TextPresenter) -> None:
        self.sequencer.text_presenter.bind(presenter)

    def bind_choice_presenter(self, presenter: ChoicePresenter) -> None:
        self.sequencer.choice_presenter.bind(presenter)

    def bind_audio_player(self, player: AudioPlayer) -> None:
        self.sequencer.audio_player.bind(player)

    def bind_cutscene_presenter(self, presenter: CutscenePresenter) -> None:
        self.sequencer.cutscene_presenter.bind(presenter)

    def add_completion_sink(self, sink: SequenceCompletionSink) -> None:
        self.sequencer.completion_sinks.append(sink)

    # Sequences

    def get_sequence(self, sequence_id: str) -> Optional[DialogSequence]:
        """Get a playable sequence by id from the database."""
        if sequence_id in self._sequences:
            return self._sequences[sequence_id]

        if self.database is None:
            return None

        data = self.database.get_sequence(sequence_id)
        if data is None:
            return None

        try:
            sequence = sequence_from_dict(data, sequence_id=sequence_id, schema=self.database.schema)
        except DialogError as e:
            self.logger.error(f"Dialog sequence '{sequence_id}' cannot be built: {e}")
            return None

        self._sequences[sequence_id] = sequence
        return sequence

    def start_sequence(
        self,
        sequence: Union[DialogSequence, str],
        on_finished: Optional[Callable[[], None]] = None,
        on_failed: Optional[Callable[[AuthoringError], None]] = None,
    ) -> bool:
        """
        Start a dialog sequence.

        Args:
            sequence: Sequence object or database id
            on_finished: Called once when the last block is done
            on_failed: Called with the error if the sequence fails

        Returns:
            True if the sequence started
        """
        if isinstance(sequence, str):
            sequence_id = sequence
            sequence = self.get_sequence(sequence_id)
            if sequence is None:
                self.logger.error(f"Dialog sequence not found: {sequence_id}")
                return False

        if self.sequencer.is_active:
            self.stop_sequence()

        self.arbiter.reset()
        self.highlighted_choice = 0
        self.event_bus.publish(UIEvent.DIALOG_STARTED, sequence_id=sequence.id)

        def finished() -> None:
            self.event_bus.publish(UIEvent.DIALOG_ENDED, sequence_id=sequence.id, finished=True)
            if on_finished:
                on_finished()

        def failed(error: AuthoringError) -> None:
            self.event_bus.publish(UIEvent.DIALOG_ENDED, sequence_id=sequence.id, finished=False)
            if on_failed:
                on_failed(error)

        self.sequencer.start(sequence, on_finished=finished, on_failed=failed)
        return True

    def stop_sequence(self) -> None:
        """Abandon the running sequence."""
        if not self.sequencer.is_active:
            return

        sequence_id = self.sequencer.sequence.id
        self.sequencer.stop()
        self.arbiter.reset()
        self.event_bus.publish(UIEvent.DIALOG_ENDED, sequence_id=sequence_id, finished=False)

    # Input handling

    def handle_input(self) -> bool:
        """
        Map this frame's actions to dialog signals.

        Returns:
            True if input was consumed
        """
        if self.input_handler is None or not self.sequencer.is_active:
            return False

        offered = self.sequencer.offered_choices

        # Direct choice keys (Q/W/E)
        for index, action in enumerate(CHOICE_ACTIONS):
            if self.input_handler.is_action_just_pressed(action):
                self.arbiter.select_option(index)
                return True

        if self.input_handler.is_action_just_pressed(Action.SKIP):
            self.arbiter.skip_cutscene()
            return True

        if offered is not None:
            direction = self.input_handler.get_menu_direction()
            if direction:
                self.highlighted_choice = (self.highlighted_choice + direction) % len(offered)
                self.event_bus.publish(
                    UIEvent.CHOICE_HIGHLIGHTED,
                    index=self.highlighted_choice,
                    label=offered[self.highlighted_choice].label,
                )
                return True

        if self.input_handler.is_action_just_pressed(Action.CONFIRM):
            if offered is not None:
                index = min(self.highlighted_choice, len(offered) - 1)
                self.highlighted_choice = 0
                self.arbiter.select_option(index)
            else:
                self.arbiter.progress()
            return True

        return False

    # System update

    def update(self, dt: float) -> None:
        """Handle input, then advance reveal/cutscene/lock tasks."""
        if not self.enabled:
            return

        self.handle_input()
        self.scheduler.update(dt)

    @property
    def is_dialog_active(self) -> bool:
        """Check if a sequence is currently playing."""
        return self.sequencer.is_active
