import pytest
from dialog_flow.components.dialog import (
    CutsceneBlock,
    CutsceneSpec,
    DialogBlock,
    DialogNode,
    DialogSequence,
)
from dialog_flow.components.playback import DialogState


def settle(scheduler):
    scheduler.update(10.0)


@pytest.fixture
def three_lines():
    return DialogSequence("lines", tuple(
        DialogBlock(DialogNode(text=text)) for text in ("One.", "Two.", "Three.")
    ))


def test_progress_debounce(arbiter, sequencer, scheduler, three_lines):
    sequencer.start(three_lines)
    settle(scheduler)

    assert arbiter.progress()
    assert not arbiter.progress()

    # Lock released but still inside the cooldown
    scheduler.update(0.2)
    assert not arbiter.locked
    assert not arbiter.progress()

    assert sequencer.playback.block_index == 1


def test_progress_accepted_after_cooldown(arbiter, sequencer, scheduler, three_lines):
    sequencer.start(three_lines)
    settle(scheduler)
    arbiter.progress()
    settle(scheduler)

    assert arbiter.progress()
    assert sequencer.playback.block_index == 2


def test_lock_set_on_accept_and_released_later(arbiter, sequencer, scheduler, three_lines):
    sequencer.start(three_lines)
    settle(scheduler)

    arbiter.progress()
    assert arbiter.locked

    scheduler.update(0.1)
    assert arbiter.locked
    scheduler.update(0.1)
    assert not arbiter.locked


def test_lock_held_while_presentation_pending(arbiter, sequencer, scheduler, three_lines, presenters):
    sequencer.text_presenter.unbind()
    sequencer.start(three_lines)
    settle(scheduler)

    arbiter.progress()
    scheduler.update(0.2)
    assert sequencer.has_pending_presentation
    assert arbiter.locked

    sequencer.text_presenter.bind(presenters.text)
    scheduler.update(0.1)
    scheduler.update(0.2)
    assert not arbiter.locked


def test_one_transition_per_frame(arbiter, sequencer, scheduler, lie_truth_sequence):
    sequencer.start(lie_truth_sequence)
    settle(scheduler)
    sequencer.playback.transition_locked = False

    assert arbiter.select_option(0)
    # Lock cleared by hand: the frame guard alone must still reject
    sequencer.playback.transition_locked = False
    assert not arbiter.progress()


def test_progress_during_reveal_skips(arbiter, sequencer, scheduler, presenters, lie_truth_sequence):
    sequencer.start(lie_truth_sequence)
    scheduler.update(0.1)

    assert arbiter.progress()
    assert presenters.text.last == "Are you okay?"
    assert sequencer.state == DialogState.AWAITING_CHOICE


def test_progress_rejected_while_choosing(arbiter, sequencer, scheduler, lie_truth_sequence):
    sequencer.start(lie_truth_sequence)
    settle(scheduler)

    assert not arbiter.progress()
    assert not arbiter.locked


def test_select_requires_offered_set(arbiter, sequencer, lie_truth_sequence):
    sequencer.start(lie_truth_sequence)

    assert not arbiter.select_option(0)
    assert sequencer.state == DialogState.SHOWING_NODE


def test_select_out_of_range_rejected(arbiter, sequencer, scheduler, lie_truth_sequence):
    sequencer.start(lie_truth_sequence)
    settle(scheduler)

    assert not arbiter.select_option(2)
    assert not arbiter.locked


def test_select_uses_filtered_indices(arbiter, sequencer, scheduler, presenters, lie_truth_sequence):
    sequencer.start(lie_truth_sequence)
    settle(scheduler)
    arbiter.select_option(0)  # Lie
    settle(scheduler)
    arbiter.progress()

    assert presenters.choices.labels == ["Truth"]
    settle(scheduler)

    # Index 0 of the filtered set is "Truth" (authored index 1)
    assert arbiter.select_option(0)
    assert sequencer.playback.block_index == 1


def test_select_spam_accepts_one(arbiter, sequencer, scheduler, lie_truth_sequence):
    sequencer.start(lie_truth_sequence)
    settle(scheduler)

    results = [arbiter.select_option(0), arbiter.select_option(1), arbiter.select_option(0)]

    assert results == [True, False, False]
    assert sequencer.playback.selection_serial == 1


def test_presenter_click_goes_through_arbiter(arbiter, sequencer, scheduler, presenters, lie_truth_sequence):
    sequencer.start(lie_truth_sequence)
    settle(scheduler)

    assert presenters.choices.click(0) is True
    assert presenters.choices.click(0) is False


def test_skip_cutscene(arbiter, sequencer, scheduler, presenters):
    sequence = DialogSequence("cs", (
        CutsceneBlock(CutsceneSpec("intro", 5.0)),
        DialogBlock(DialogNode(text="After.")),
    ))
    sequencer.start(sequence)

    assert arbiter.skip_cutscene()
    assert presenters.cutscene.stopped == 1
    assert sequencer.playback.block_index == 1
    assert not arbiter.skip_cutscene()


def test_skip_rejected_for_unskippable(arbiter, sequencer):
    sequencer.start(DialogSequence("cs", (CutsceneBlock(CutsceneSpec("intro", 5.0, skippable=False)),)))

    assert not arbiter.skip_cutscene()
    assert not arbiter.locked


def test_reset(arbiter, sequencer, scheduler, three_lines):
    sequencer.start(three_lines)
    settle(scheduler)
    arbiter.progress()

    arbiter.reset()
    scheduler.update(0.01)

    assert not arbiter.locked
    assert arbiter.progress()
