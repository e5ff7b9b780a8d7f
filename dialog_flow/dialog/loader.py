"""
Build DialogSequence objects from authoring JSON.

Format (one sequence per file):

```json
{
    "id": "day1/seq1",
    "blocks": [
        {"type": "dialog", "speaker": "Mother", "text": "Did you eat?",
         "location": "mother", "fade": "none",
         "choices": [
            {"label": "Yes", "correct": false,
             "responses": [{"speaker": "Mother", "text": "Liar."}]},
            {"label": "No", "correct": true}
         ]},
        {"type": "cutscene", "name": "door_slam", "duration": 2.5, "skippable": false}
    ]
}
```
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import jsonschema

from dialog_engine.resources.database import SEQUENCE_SCHEMA
from dialog_flow.components.dialog import (
    Block,
    Choice,
    CutsceneBlock,
    CutsceneFade,
    CutsceneSpec,
    DialogBlock,
    DialogNode,
    DialogSequence,
    DisplayLocation,
    Response,
)
from dialog_flow.dialog.errors import SequenceLoadError, UnknownBlockError


def validate_sequence(data: Any, schema: Optional[dict[str, Any]] = None) -> None:
    """
    Validate raw sequence data against the sequence schema.

    Raises:
        SequenceLoadError: If the data does not match
    """
    try:
        jsonschema.validate(instance=data, schema=schema or SEQUENCE_SCHEMA)
    except jsonschema.ValidationError as e:
        location = "/".join(str(part) for part in e.absolute_path) or "<root>"
        raise SequenceLoadError(f"Invalid sequence at {location}: {e.message}") from e


def _response_from_dict(data: dict[str, Any]) -> Response:
    return Response(
        text=data["text"],
        speaker=data.get("speaker"),
        audio=data.get("audio"),
    )


def _choice_from_dict(data: dict[str, Any]) -> Choice:
    return Choice(
        label=data.get("label", ""),
        is_correct=data.get("correct", False),
        responses=tuple(_response_from_dict(r) for r in data.get("responses", [])),
        audio=data.get("audio"),
    )


def _block_from_dict(data: dict[str, Any], index: int) -> Block:
    block_type = data.get("type")

    if block_type == "dialog":
        return DialogBlock(DialogNode(
            text=data["text"],
            speaker=data.get("speaker"),
            choices=tuple(_choice_from_dict(c) for c in data.get("choices", [])),
            fade=CutsceneFade(data.get("fade", CutsceneFade.NONE.value)),
            location=DisplayLocation(data.get("location", DisplayLocation.PANEL.value)),
            audio=data.get("audio"),
            camera=data.get("camera"),
        ))

    if block_type == "cutscene":
        return CutsceneBlock(CutsceneSpec(
            name=data["name"],
            duration=float(data["duration"]),
            skippable=data.get("skippable", True),
            play_once=data.get("play_once", False),
        ))

    raise UnknownBlockError(f"Block {index} has unknown type {block_type!r}")


def sequence_from_dict(
    data: dict[str, Any],
    sequence_id: Optional[str] = None,
    schema: Optional[dict[str, Any]] = None,
) -> DialogSequence:
    """
    Convert validated raw data to a DialogSequence.

    Args:
        data: Raw sequence dict (see module docstring)
        sequence_id: Id to use when data carries none
        schema: Schema to validate against (default: SEQUENCE_SCHEMA)

    Raises:
        SequenceLoadError: Data fails schema validation
    """
    validate_sequence(data, schema)

    # A looser override schema can let through data the builders cannot use
    try:
        blocks = tuple(_block_from_dict(block, i) for i, block in enumerate(data["blocks"]))
    except (KeyError, TypeError, ValueError) as e:
        raise SequenceLoadError(f"Invalid sequence data: {e!r}") from e
    return DialogSequence(
        id=data.get("id") or sequence_id or "",
        blocks=blocks,
    )


def load_sequence(path: Path | str) -> DialogSequence:
    """
    Load one sequence file. The file stem is the default id.

    Raises:
        SequenceLoadError: File missing, unreadable or invalid
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SequenceLoadError(f"Failed to load {path}: {e}") from e

    return sequence_from_dict(data, sequence_id=path.stem)
