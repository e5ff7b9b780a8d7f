"""
Choice tracking and filtering.

Wrong picks are remembered per node in a ChoiceHistory and removed
from the set offered on the next attempt, so the player is funnelled
towards the correct option one wrong pick at a time.

Labels are the identity of a choice: once a set has been filtered the
positions renumber, so indices alone cannot tell choices apart.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from dialog_flow.components.dialog import Choice, DialogNode, PLACEHOLDER_LABEL
from dialog_flow.dialog.errors import (
    DuplicateChoiceLabelError,
    EmptyChoiceSetError,
    MissingCorrectChoiceError,
)


logger = logging.getLogger(__name__)


class ChoiceTracker:
    """Labels and original indices of choices picked wrongly."""

    def __init__(self):
        self._labels: set[str] = set()
        self._indices: set[int] = set()

    def mark_incorrect(self, original_index: int, label: str) -> None:
        self._labels.add(label)
        self._indices.add(original_index)

    def is_marked(self, label: str) -> bool:
        return label in self._labels

    def clear(self) -> None:
        self._labels.clear()
        self._indices.clear()

    @property
    def marked_labels(self) -> frozenset[str]:
        return frozenset(self._labels)

    @property
    def marked_indices(self) -> frozenset[int]:
        return frozenset(self._indices)

    def __len__(self) -> int:
        return len(self._labels)


def _signature(choices: tuple[Choice, ...]) -> tuple[tuple[str, bool], ...]:
    return tuple((choice.label, choice.is_correct) for choice in choices)


@dataclass
class ChoiceHistory:
    """
    A tracker plus the node key it applies to.

    Attributes:
        tracker: Wrong picks for the keyed node
        block_index: Block the tracker was recorded for (None = never used)
        choices: Choice list of that block when it was recorded
    """
    tracker: ChoiceTracker = field(default_factory=ChoiceTracker)
    block_index: Optional[int] = None
    choices: Optional[tuple[Choice, ...]] = None

    def record(self, block_index: int, choices: tuple[Choice, ...]) -> None:
        self.block_index = block_index
        self.choices = choices

    def matches_content(self, choices: tuple[Choice, ...]) -> bool:
        """Same length and same label/correctness pairwise."""
        if self.choices is None:
            return False
        return _signature(self.choices) == _signature(choices)

    def reset(self, block_index: int, choices: tuple[Choice, ...]) -> None:
        self.tracker.clear()
        self.record(block_index, choices)


@dataclass(frozen=True)
class OfferedChoice:
    """A choice as offered: its authoring position and its display label."""
    choice: Choice
    original_index: int
    label: str


@dataclass(frozen=True)
class ChoiceSet:
    """The currently offered choices; index i is entries[i]."""
    entries: tuple[OfferedChoice, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[OfferedChoice]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> OfferedChoice:
        return self.entries[index]

    def get(self, index: int) -> Optional[OfferedChoice]:
        """Entry at a current-set index, or None when out of range."""
        if 0 <= index < len(self.entries):
            return self.entries[index]
        return None

    @property
    def labels(self) -> list[str]:
        return [entry.label for entry in self.entries]

    @property
    def original_indices(self) -> list[int]:
        return [entry.original_index for entry in self.entries]


class ChoiceFilterEngine:
    """Computes the offered ChoiceSet for a node from its ChoiceHistory."""

    def __init__(self, placeholder_label: str = PLACEHOLDER_LABEL):
        self.placeholder_label = placeholder_label

    def display_labels(self, node: DialogNode) -> list[str]:
        return [
            choice.display_label(index, self.placeholder_label)
            for index, choice in enumerate(node.choices)
        ]

    def validate_node(self, node: DialogNode) -> None:
        """
        Check a choice node can be played.

        Raises:
            MissingCorrectChoiceError: No choice is marked correct
            DuplicateChoiceLabelError: Two choices share a display label
        """
        if not node.has_choices:
            return

        if not node.has_correct_choice:
            raise MissingCorrectChoiceError(
                f"Node '{node.text[:40]}' offers {len(node.choices)} choices but none is correct"
            )

        seen: set[str] = set()
        for label in self.display_labels(node):
            if label in seen:
                raise DuplicateChoiceLabelError(
                    f"Node '{node.text[:40]}' has more than one choice labelled '{label}'"
                )
            seen.add(label)

    def resolve_offered_set(
        self,
        node: DialogNode,
        block_index: int,
        history: ChoiceHistory,
    ) -> ChoiceSet:
        """
        Decide whether the history still applies to this node and filter.

        A different block index, or the same index with different choice
        content, clears the tracker. The same index with identical
        content keeps it, so wrong picks stay removed on re-entry.

        Raises:
            MissingCorrectChoiceError, DuplicateChoiceLabelError: Bad node
            EmptyChoiceSetError: Nothing left to offer
        """
        if history.block_index != block_index:
            history.reset(block_index, node.choices)
        elif not history.matches_content(node.choices):
            logger.warning(
                f"Choices of block {block_index} changed since last shown, clearing history"
            )
            history.reset(block_index, node.choices)

        self.validate_node(node)

        entries = tuple(
            OfferedChoice(choice, index, label)
            for index, (choice, label) in enumerate(zip(node.choices, self.display_labels(node)))
            if not history.tracker.is_marked(label)
        )
        if not entries:
            raise EmptyChoiceSetError(
                f"Every choice of block {block_index} has been filtered out"
            )

        return ChoiceSet(entries)

    def apply_selection(
        self,
        history: ChoiceHistory,
        choice: Choice,
        original_index: int,
        label: Optional[str] = None,
    ) -> None:
        """Remember an incorrect pick; correct picks leave the history alone."""
        if choice.is_correct:
            return
        if label is None:
            label = choice.display_label(original_index, self.placeholder_label)
        history.tracker.mark_incorrect(original_index, label)
