"""
Sequence script parser - converts dialog scripts to sequence JSON.

Supports a compact text format for writing sequences by hand:

```
// Day 1, kitchen
=== dialog
@Mother [mother] {fade_in} (kitchen_cam) <mother_01>
Did you eat anything today?
>> Yes, a lot.
- Mother: Don't lie to me.
- Rey: ...
>>* Not really. <rey_02>

=== dialog
@ [panel]
<<timeline:door_slam>> The front door slams. {+20stress}

=== cutscene leave_house 3.5 noskip once
```

- `=== dialog` / `=== cutscene NAME DURATION [noskip] [once]` start blocks
- `@Speaker [location] {fade} (camera) <audio>` sets node metadata (all optional)
- `>> label` is an incorrect choice, `>>* label` the correct one;
  a trailing `<audio>` attaches a voice handle
- `- Speaker: text <audio>` adds a response to the last choice
- anything else is body text; `//` starts a comment line
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dialog_flow.components.dialog import CutsceneFade, DialogSequence, DisplayLocation
from dialog_flow.dialog.errors import SequenceLoadError
from dialog_flow.dialog.loader import sequence_from_dict


logger = logging.getLogger(__name__)


@dataclass
class ParsedResponse:
    """A parsed response line."""
    text: str
    speaker: Optional[str] = None
    audio: Optional[str] = None


@dataclass
class ParsedChoice:
    """A parsed choice option."""
    label: str
    correct: bool = False
    audio: Optional[str] = None
    responses: list[ParsedResponse] = field(default_factory=list)


@dataclass
class ParsedBlock:
    """A parsed dialog or cutscene block."""
    type: str
    # dialog
    speaker: Optional[str] = None
    text: str = ""
    location: Optional[str] = None
    fade: Optional[str] = None
    camera: Optional[str] = None
    audio: Optional[str] = None
    choices: list[ParsedChoice] = field(default_factory=list)
    # cutscene
    name: str = ""
    duration: float = 0.0
    skippable: bool = True
    play_once: bool = False


@dataclass
class ParsedSequence:
    """A complete parsed sequence."""
    id: str
    blocks: list[ParsedBlock] = field(default_factory=list)


class SequenceParser:
    """
    Parses sequence scripts from the text format above.
    """

    # Regex patterns
    DIALOG_PATTERN = re.compile(r'^===\s*dialog\s*$')
    CUTSCENE_PATTERN = re.compile(
        r'^===\s*cutscene\s+(\S+)\s+(\d+(?:\.\d+)?)((?:\s+(?:noskip|once))*)\s*$'
    )
    SPEAKER_PATTERN = re.compile(
        r'^@\s*(?P<speaker>[^\[\]{}()<>]*?)\s*'
        r'(?:\[(?P<location>\w+)\])?\s*'
        r'(?:\{(?P<fade>\w+)\})?\s*'
        r'(?:\((?P<camera>[^()\s]+)\))?\s*'
        r'(?:<(?P<audio>[^<>\s]+)>)?\s*$'
    )
    CHOICE_PATTERN = re.compile(r'^>>(\*)?\s*(.*?)\s*(?:<([^<>\s]+)>)?\s*$')
    RESPONSE_PATTERN = re.compile(
        r'^-\s+(?:(\w[\w ]*?):\s+)?(.+?)(?:\s+<([^<>\s]+)>)?\s*$'
    )

    def parse_file(self, path: str | Path) -> ParsedSequence:
        """Parse a sequence script file."""
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
        except OSError as e:
            raise SequenceLoadError(f"Failed to read {path}: {e}") from e

        sequence = self.parse_string(content)
        sequence.id = path.stem
        return sequence

    def parse_string(self, content: str) -> ParsedSequence:
        """
        Parse a sequence script string.

        Raises:
            SequenceLoadError: A line cannot be placed (line number included)
        """
        sequence = ParsedSequence(id="parsed")
        current: Optional[ParsedBlock] = None
        text_lines: list[str] = []

        def close_block() -> None:
            if current is not None and current.type == "dialog":
                current.text = '\n'.join(text_lines).strip()

        for line_number, line in enumerate(content.split('\n'), start=1):
            line = line.rstrip()

            # Skip empty lines (but preserve in text)
            if not line.strip():
                if current is not None and text_lines:
                    text_lines.append('')
                continue

            # Skip comments
            if line.strip().startswith('//'):
                continue

            # Block headers
            if self.DIALOG_PATTERN.match(line):
                close_block()
                current = ParsedBlock(type="dialog")
                sequence.blocks.append(current)
                text_lines = []
                continue

            match = self.CUTSCENE_PATTERN.match(line)
            if match:
                close_block()
                flags = match.group(3).split()
                current = ParsedBlock(
                    type="cutscene",
                    name=match.group(1),
                    duration=float(match.group(2)),
                    skippable="noskip" not in flags,
                    play_once="once" in flags,
                )
                sequence.blocks.append(current)
                text_lines = []
                continue

            if current is None:
                raise SequenceLoadError(f"Line {line_number}: text before the first block header")
            if current.type == "cutscene":
                raise SequenceLoadError(f"Line {line_number}: cutscene blocks take no body")

            # Speaker / metadata line
            match = self.SPEAKER_PATTERN.match(line)
            if match:
                self._apply_metadata(current, match, line_number)
                continue

            # Choice
            match = self.CHOICE_PATTERN.match(line)
            if match:
                current.choices.append(ParsedChoice(
                    label=match.group(2),
                    correct=match.group(1) is not None,
                    audio=match.group(3),
                ))
                continue

            # Response to the last choice
            match = self.RESPONSE_PATTERN.match(line)
            if match and current.choices:
                current.choices[-1].responses.append(ParsedResponse(
                    text=match.group(2),
                    speaker=match.group(1),
                    audio=match.group(3),
                ))
                continue

            if current.choices:
                raise SequenceLoadError(
                    f"Line {line_number}: body text after the choices of a dialog block"
                )

            # Regular text line
            text_lines.append(line)

        # Don't forget the last block
        close_block()
        return sequence

    def _apply_metadata(self, block: ParsedBlock, match: re.Match, line_number: int) -> None:
        location = match.group('location')
        if location is not None and location not in {loc.value for loc in DisplayLocation}:
            raise SequenceLoadError(f"Line {line_number}: unknown location '{location}'")

        fade = match.group('fade')
        if fade is not None and fade not in {f.value for f in CutsceneFade}:
            raise SequenceLoadError(f"Line {line_number}: unknown fade '{fade}'")

        block.speaker = match.group('speaker') or None
        block.location = location
        block.fade = fade
        block.camera = match.group('camera')
        block.audio = match.group('audio')

    def to_json(self, sequence: ParsedSequence) -> dict[str, Any]:
        """Convert a parsed sequence to the authoring JSON format."""
        return {
            'id': sequence.id,
            'blocks': [self._block_to_json(block) for block in sequence.blocks],
        }

    def _block_to_json(self, block: ParsedBlock) -> dict[str, Any]:
        if block.type == "cutscene":
            return {
                'type': 'cutscene',
                'name': block.name,
                'duration': block.duration,
                'skippable': block.skippable,
                'play_once': block.play_once,
            }

        data: dict[str, Any] = {
            'type': 'dialog',
            'speaker': block.speaker,
            'text': block.text,
        }
        for key in ('location', 'fade', 'camera', 'audio'):
            value = getattr(block, key)
            if value is not None:
                data[key] = value
        if block.choices:
            data['choices'] = [
                {
                    'label': choice.label,
                    'correct': choice.correct,
                    'audio': choice.audio,
                    'responses': [
                        {'speaker': r.speaker, 'text': r.text, 'audio': r.audio}
                        for r in choice.responses
                    ],
                }
                for choice in block.choices
            ]
        return data

    def to_sequence(self, sequence: ParsedSequence) -> DialogSequence:
        """Build a playable DialogSequence from a parsed sequence."""
        return sequence_from_dict(self.to_json(sequence))

    def save_json(self, sequence: ParsedSequence, path: str | Path) -> None:
        """Save a parsed sequence as JSON."""
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_json(sequence), f, indent=2)


def compile_sequence_file(input_path: str | Path, output_path: Optional[str | Path] = None) -> Path:
    """
    Compile a sequence script to JSON.

    Args:
        input_path: Path to the script file
        output_path: Path to output .json file (default: same name with .json)

    Returns:
        The path written
    """
    input_path = Path(input_path)
    if output_path is None:
        output_path = input_path.with_suffix('.json')
    else:
        output_path = Path(output_path)

    parser = SequenceParser()
    sequence = parser.parse_file(input_path)
    parser.save_json(sequence, output_path)
    logger.info(f"Compiled {input_path} -> {output_path}")
    return output_path
