import pytest
from pydantic import ValidationError
from dialog_flow.components.dialog import (
    Choice,
    DialogBlock,
    DialogNode,
    DialogSequence,
    DisplayLocation,
)
from dialog_flow.components.playback import DialogState, PlaybackState


def test_display_label_placeholder():
    assert Choice("Lie").display_label(0) == "Lie"
    assert Choice("").display_label(2) == "Choice 3"
    assert Choice("   ").display_label(0, placeholder="Option {n}") == "Option 1"


def test_node_properties():
    node = DialogNode(text="Hi", choices=(Choice("A"), Choice("B", is_correct=True)))

    assert node.has_choices
    assert node.has_correct_choice
    assert not DialogNode(text="Hi").has_choices


def test_get_block():
    block = DialogBlock(DialogNode(text="Hi"))
    sequence = DialogSequence("s", (block,))

    assert sequence.get_block(0) is block
    assert sequence.get_block(1) is None
    assert sequence.get_block(-1) is None


def test_display_location_anchor():
    assert not DisplayLocation.PANEL.is_anchor
    assert DisplayLocation.MOTHER.is_anchor


def test_playback_state_validation():
    playback = PlaybackState()

    with pytest.raises(ValidationError):
        playback.block_index = -1
    with pytest.raises(ValidationError):
        PlaybackState(cursor=3)


def test_playback_state_reset():
    playback = PlaybackState(state=DialogState.AWAITING_CHOICE, block_index=4, selected_index=1)
    assert playback.is_active
    assert playback.has_selection

    playback.reset()

    assert playback.state == DialogState.IDLE
    assert playback.block_index == 0
    assert not playback.has_selection
    assert not playback.is_active
