import pytest
import json
from dialog_flow.components.dialog import (
    CutsceneBlock,
    CutsceneFade,
    DialogBlock,
    DisplayLocation,
)
from dialog_flow.dialog.errors import SequenceLoadError
from dialog_flow.dialog.loader import load_sequence, sequence_from_dict, validate_sequence


SEQUENCE_DATA = {
    "id": "day1/kitchen",
    "blocks": [
        {
            "type": "dialog",
            "speaker": "Mother",
            "text": "Did you eat?",
            "location": "mother",
            "fade": "fade_in",
            "camera": "kitchen_cam",
            "audio": "mother_01.ogg",
            "choices": [
                {
                    "label": "Yes",
                    "correct": False,
                    "audio": "rey_yes.ogg",
                    "responses": [{"speaker": "Mother", "text": "Don't lie."}],
                },
                {"label": "No", "correct": True},
            ],
        },
        {"type": "cutscene", "name": "door_slam", "duration": 2, "skippable": False, "play_once": True},
    ],
}


def test_sequence_from_dict():
    sequence = sequence_from_dict(SEQUENCE_DATA)

    assert sequence.id == "day1/kitchen"
    assert len(sequence) == 2

    block = sequence.blocks[0]
    assert isinstance(block, DialogBlock)
    node = block.node
    assert node.speaker == "Mother"
    assert node.location == DisplayLocation.MOTHER
    assert node.fade == CutsceneFade.FADE_IN
    assert node.camera == "kitchen_cam"
    assert node.audio == "mother_01.ogg"
    assert [c.label for c in node.choices] == ["Yes", "No"]
    assert node.choices[0].responses[0].text == "Don't lie."
    assert node.choices[0].audio == "rey_yes.ogg"
    assert node.choices[1].is_correct

    cutscene = sequence.blocks[1]
    assert isinstance(cutscene, CutsceneBlock)
    assert cutscene.cutscene.duration == 2.0
    assert not cutscene.cutscene.skippable
    assert cutscene.cutscene.play_once


def test_defaults():
    sequence = sequence_from_dict({"blocks": [{"type": "dialog", "text": "Hi"}]}, sequence_id="short")

    node = sequence.blocks[0].node
    assert sequence.id == "short"
    assert node.speaker is None
    assert node.location == DisplayLocation.PANEL
    assert node.fade == CutsceneFade.NONE
    assert node.choices == ()


def test_choice_without_label_gets_placeholder_later():
    sequence = sequence_from_dict({
        "blocks": [{"type": "dialog", "text": "?", "choices": [{"correct": True}]}],
    })

    choice = sequence.blocks[0].node.choices[0]
    assert choice.label == ""
    assert choice.display_label(0) == "Choice 1"


@pytest.mark.parametrize("data", [
    {},
    {"blocks": [{"type": "dialog"}]},
    {"blocks": [{"type": "cutscene", "name": "x"}]},
    {"blocks": [{"type": "video", "text": "x"}]},
    {"blocks": [{"type": "dialog", "text": "x", "location": "garden"}]},
    {"blocks": [{"type": "cutscene", "name": "x", "duration": -1}]},
])
def test_invalid_data(data):
    with pytest.raises(SequenceLoadError):
        validate_sequence(data)
    with pytest.raises(SequenceLoadError):
        sequence_from_dict(data)


def test_load_sequence(tmp_path):
    path = tmp_path / "intro.json"
    with open(path, "w") as f:
        json.dump({"blocks": [{"type": "dialog", "text": "Hi"}]}, f)

    sequence = load_sequence(path)

    assert sequence.id == "intro"
    assert sequence.blocks[0].node.text == "Hi"


def test_load_missing_file(tmp_path):
    with pytest.raises(SequenceLoadError):
        load_sequence(tmp_path / "missing.json")


def test_load_bad_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{")

    with pytest.raises(SequenceLoadError):
        load_sequence(path)


def test_custom_schema():
    data = {"blocks": [{"type": "dialog", "text": "Hi", "mood": "calm"}]}

    with pytest.raises(SequenceLoadError):
        sequence_from_dict(data)

    sequence = sequence_from_dict(data, schema={"type": "object", "required": ["blocks"]})
    assert sequence.blocks[0].node.text == "Hi"


def test_loose_schema_still_rejects_unusable_blocks():
    with pytest.raises(SequenceLoadError):
        sequence_from_dict({"blocks": [{"type": "dialog"}]}, schema={"type": "object"})
