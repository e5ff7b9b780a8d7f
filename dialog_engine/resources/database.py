"""
Sequence Database.

Handles loading and validation of authored dialog sequences.
Each JSON file under <data_path>/dialog is one sequence; its id is the
path relative to that folder without the suffix (e.g. "day1/seq1").
"""

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema


# Built-in schema used when <data_path>/schemas/sequence.schema.json is absent
SEQUENCE_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["blocks"],
    "properties": {
        "id": {"type": "string"},
        "blocks": {
            "type": "array",
            "items": {"$ref": "#/definitions/block"},
        },
    },
    "definitions": {
        "response": {
            "type": "object",
            "required": ["text"],
            "properties": {
                "speaker": {"type": ["string", "null"]},
                "text": {"type": "string"},
                "audio": {"type": ["string", "null"]},
            },
            "additionalProperties": False,
        },
        "choice": {
            "type": "object",
            "properties": {
                "label": {"type": "string"},
                "correct": {"type": "boolean"},
                "audio": {"type": ["string", "null"]},
                "responses": {
                    "type": "array",
                    "items": {"$ref": "#/definitions/response"},
                },
            },
            "additionalProperties": False,
        },
        "block": {
            "type": "object",
            "required": ["type"],
            "properties": {
                "type": {"enum": ["dialog", "cutscene"]},
                # dialog fields
                "speaker": {"type": ["string", "null"]},
                "text": {"type": "string"},
                "audio": {"type": ["string", "null"]},
                "camera": {"type": ["string", "null"]},
                "fade": {"enum": ["none", "fade_in", "fade_out", "stay_in", "stay_out"]},
                "location": {"enum": ["panel", "rey", "mother", "father"]},
                "choices": {
                    "type": "array",
                    "items": {"$ref": "#/definitions/choice"},
                },
                # cutscene fields
                "name": {"type": "string"},
                "duration": {"type": "number", "minimum": 0},
                "skippable": {"type": "boolean"},
                "play_once": {"type": "boolean"},
            },
            "additionalProperties": False,
            "allOf": [
                {
                    "if": {"properties": {"type": {"const": "dialog"}}},
                    "then": {"required": ["text"]},
                },
                {
                    "if": {"properties": {"type": {"const": "cutscene"}}},
                    "then": {"required": ["name", "duration"]},
                },
            ],
        },
    },
}


class SequenceDatabase:
    """
    Central storage for authored dialog sequences (raw, validated dicts).
    """

    def __init__(self, data_path: Path | str):
        self._data_path = Path(data_path)
        self._schema: dict[str, Any] = SEQUENCE_SCHEMA

        # Data store: sequence id -> raw sequence dict
        self.sequences: dict[str, dict[str, Any]] = {}

        self.logger = logging.getLogger(__name__)

    def load_all(self) -> int:
        """Load every sequence from disk. Returns the number loaded."""
        self._load_schema()
        self.sequences = self._load_sequences()

        self.logger.info(f"Loaded {len(self.sequences)} dialog sequences.")
        return len(self.sequences)

    def _load_schema(self) -> None:
        """Prefer an on-disk schema over the built-in one."""
        schema_file = self._data_path / "schemas" / "sequence.schema.json"
        if not schema_file.exists():
            return

        try:
            with open(schema_file, 'r', encoding='utf-8') as f:
                self._schema = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Failed to load schema {schema_file}, using built-in: {e}")

    def _load_sequences(self) -> dict[str, dict[str, Any]]:
        """Load all JSON files in the dialog folder."""
        dialog_dir = self._data_path / "dialog"
        data_store: dict[str, dict[str, Any]] = {}

        if not dialog_dir.exists():
            self.logger.warning(f"Data directory not found: {dialog_dir}")
            return data_store

        for file_path in sorted(dialog_dir.rglob("*.json")):
            sequence_id = file_path.relative_to(dialog_dir).with_suffix("").as_posix()
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load {file_path}: {e}")
                continue

            error = self.validate(data)
            if error:
                self.logger.error(f"Validation error in {file_path}: {error}")
                continue

            data.setdefault("id", sequence_id)
            data_store[sequence_id] = data

        return data_store

    @property
    def schema(self) -> dict[str, Any]:
        """Schema in use: the on-disk override if one loaded, else the built-in one."""
        return self._schema

    def validate(self, data: Any) -> str | None:
        """Validate a raw sequence. Returns an error message or None."""
        try:
            jsonschema.validate(instance=data, schema=self._schema)
        except jsonschema.ValidationError as e:
            return e.message
        return None

    def get_sequence(self, sequence_id: str) -> dict[str, Any] | None:
        return self.sequences.get(sequence_id)

    def has_sequence(self, sequence_id: str) -> bool:
        return sequence_id in self.sequences
