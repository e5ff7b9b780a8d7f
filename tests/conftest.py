import os
import sys
from types import SimpleNamespace

import pytest
from unittest.mock import MagicMock, patch

# Ensure dialog modules can be imported
sys.path.append(os.getcwd())


@pytest.fixture(autouse=True)
def mock_pygame():
    """
    Global mock for pygame to allow headless testing.
    Autoused for all tests to prevent device or mixer access.
    """
    with patch('pygame.init'), \
         patch('pygame.display'), \
         patch('pygame.event'), \
         patch('pygame.time'), \
         patch('pygame.mixer'), \
         patch('pygame.joystick'), \
         patch('pygame.key'):

        import pygame
        pygame.time.get_ticks = MagicMock(return_value=0)
        pygame.joystick.get_count.return_value = 0

        yield


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from dialog_engine.core.events import EventBus
    return EventBus()


@pytest.fixture
def scheduler():
    """Fresh TaskScheduler for each test."""
    from dialog_engine.core.tasks import TaskScheduler
    return TaskScheduler()


@pytest.fixture
def config():
    """Dialog timing used across tests: 10 chars/s, short windows."""
    from dialog_flow.dialog.config import DialogConfig
    return DialogConfig(
        chars_per_second=10.0,
        min_reveal_duration=0.1,
        progress_cooldown=0.25,
        lock_release_delay=0.15,
        presenter_retry_window=0.5,
    )


# Recording presenters

class RecordingTextPresenter:
    def __init__(self):
        self.shown = []
        self.speakers = []
        self.cleared = 0

    def show(self, text):
        self.shown.append(text)

    def clear(self):
        self.cleared += 1

    def set_speaker(self, speaker):
        self.speakers.append(speaker)

    @property
    def last(self):
        return self.shown[-1] if self.shown else None


class RecordingChoicePresenter:
    def __init__(self):
        self.presented = []
        self.on_selected = None
        self.dismissed = 0

    def present(self, choice_set, on_selected):
        self.presented.append(choice_set)
        self.on_selected = on_selected

    def dismiss(self):
        self.dismissed += 1

    def click(self, index):
        return self.on_selected(index)

    @property
    def labels(self):
        return self.presented[-1].labels if self.presented else []


class RecordingAudioPlayer:
    def __init__(self):
        self.played = []
        self.stops = 0

    def play_once(self, handle):
        self.played.append(handle)

    def stop(self):
        self.stops += 1


class RecordingCutscenePresenter:
    def __init__(self):
        self.played = []
        self.stopped = 0

    def play(self, cutscene):
        self.played.append(cutscene.name)

    def stop(self):
        self.stopped += 1


class RecordingDirectiveSink:
    def __init__(self):
        self.calls = []

    def navigate(self, location):
        self.calls.append(("navigate", location))

    def exit_application(self):
        self.calls.append(("exit", None))

    def timeline(self, event):
        self.calls.append(("timeline", event))

    def charge_meter(self, argument):
        self.calls.append(("charge", argument))

    def stress_delta(self, delta):
        self.calls.append(("stress", delta))

    def animation_trigger(self, name):
        self.calls.append(("animation", name))

    def scene_change(self, scene):
        self.calls.append(("scene", scene))

    def prefab_spawn(self, prefab):
        self.calls.append(("spawn", prefab))


class RecordingCompletionSink:
    def __init__(self):
        self.finished = 0

    def on_finished(self):
        self.finished += 1


@pytest.fixture
def presenters():
    """One recording presenter of each kind."""
    return SimpleNamespace(
        text=RecordingTextPresenter(),
        choices=RecordingChoicePresenter(),
        audio=RecordingAudioPlayer(),
        cutscene=RecordingCutscenePresenter(),
        directives=RecordingDirectiveSink(),
        completion=RecordingCompletionSink(),
    )


@pytest.fixture
def sequencer(scheduler, config, event_bus, presenters):
    """DialogSequencer with every presenter bound."""
    from dialog_flow.dialog.sequencer import DialogSequencer

    seq = DialogSequencer(scheduler, config, event_bus, presenters.directives)
    seq.text_presenter.bind(presenters.text)
    seq.choice_presenter.bind(presenters.choices)
    seq.audio_player.bind(presenters.audio)
    seq.cutscene_presenter.bind(presenters.cutscene)
    seq.completion_sinks.append(presenters.completion)
    return seq


@pytest.fixture
def arbiter(sequencer, scheduler, config):
    from dialog_flow.dialog.arbiter import InputArbiter
    return InputArbiter(sequencer, scheduler, config)


# Sample authoring data

@pytest.fixture
def lie_truth_sequence():
    """A node with a wrong answer that has one response, then a closing line."""
    from dialog_flow.components.dialog import (
        Choice, DialogBlock, DialogNode, DialogSequence, Response,
    )

    question = DialogNode(
        text="Are you okay?",
        speaker="Mother",
        choices=(
            Choice("Lie", is_correct=False, responses=(Response("I know you're lying.", "Mother"),)),
            Choice("Truth", is_correct=True),
        ),
    )
    closing = DialogNode(text="Thank you for telling me.", speaker="Mother")
    return DialogSequence("kitchen", (DialogBlock(question), DialogBlock(closing)))


@pytest.fixture
def three_choice_node():
    from dialog_flow.components.dialog import Choice, DialogNode, Response

    return DialogNode(
        text="Where were you?",
        speaker="Father",
        choices=(
            Choice("At school", is_correct=False, responses=(Response("No.", "Father"),)),
            Choice("Outside", is_correct=False),
            Choice("With friends", is_correct=True),
        ),
    )
