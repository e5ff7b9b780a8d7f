"""
Directive and modifier tokens embedded in dialog text.

Two kinds of markup are resolved before text is revealed:

Prefix directives, only at the very start of the text (several may
follow each other):

```
<<goto:Kitchen>>        navigate to a location
<<exit>>                exit the application
<<timeline:door_slam>>  fire a timeline event
<<charge>>              fire the charge-meter event (optional :argument)
```

In-line modifiers, anywhere in the text:

```
{+50stress} {-20stress}  stress delta
{animation:wave}          animation trigger
{scene:Day2}              scene change
{spawn:crib}              prefab spawn
```

Every token fires its side effect once and is removed from the text
that reaches the presenter.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional, Protocol

from dialog_engine.core.events import EventBus


class DirectiveKind(Enum):
    """Recognised directive and modifier kinds."""
    # Prefix directives
    NAVIGATE = auto()
    EXIT = auto()
    TIMELINE = auto()
    CHARGE_METER = auto()
    # In-line modifiers
    STRESS_DELTA = auto()
    ANIMATION = auto()
    SCENE_CHANGE = auto()
    PREFAB_SPAWN = auto()


class DirectiveEvent(Enum):
    """Events published by EventBusDirectiveSink."""
    NAVIGATE = auto()
    EXIT_APPLICATION = auto()
    TIMELINE = auto()
    CHARGE_METER = auto()
    STRESS_DELTA = auto()
    ANIMATION_TRIGGER = auto()
    SCENE_CHANGE = auto()
    PREFAB_SPAWN = auto()


@dataclass(frozen=True)
class Directive:
    """A parsed token and its payload."""
    kind: DirectiveKind
    payload: Any = None


@dataclass(frozen=True)
class ParsedText:
    """Display text with the tokens that were stripped from it."""
    text: str
    directives: tuple[Directive, ...] = ()


class DirectiveSink(Protocol):
    """Receives one call per directive/modifier occurrence."""

    def navigate(self, location: str) -> None: ...

    def exit_application(self) -> None: ...

    def timeline(self, event: str) -> None: ...

    def charge_meter(self, argument: Optional[str]) -> None: ...

    def stress_delta(self, delta: int) -> None: ...

    def animation_trigger(self, name: str) -> None: ...

    def scene_change(self, scene: str) -> None: ...

    def prefab_spawn(self, prefab: str) -> None: ...


# Prefix directives, checked in this order at the head of the text
PREFIX_PATTERNS: tuple[tuple[DirectiveKind, re.Pattern], ...] = (
    (DirectiveKind.NAVIGATE, re.compile(r'^<<\s*goto\s*:\s*([^<>]+?)\s*>>\s*', re.IGNORECASE)),
    (DirectiveKind.EXIT, re.compile(r'^<<\s*exit\s*>>\s*', re.IGNORECASE)),
    (DirectiveKind.TIMELINE, re.compile(r'^<<\s*timeline\s*:\s*([^<>]+?)\s*>>\s*', re.IGNORECASE)),
    (DirectiveKind.CHARGE_METER, re.compile(r'^<<\s*charge\s*(?::\s*([^<>]*?)\s*)?>>\s*', re.IGNORECASE)),
)

MODIFIER_PATTERN = re.compile(
    r'\{\s*(?:'
    r'(?P<stress>[+-]?\d+)\s*stress'
    r'|animation\s*:\s*(?P<animation>[^{}]+?)'
    r'|scene\s*:\s*(?P<scene>[^{}]+?)'
    r'|spawn\s*:\s*(?P<spawn>[^{}]+?)'
    r')\s*\}',
    re.IGNORECASE,
)

_MODIFIER_KINDS = {
    "stress": DirectiveKind.STRESS_DELTA,
    "animation": DirectiveKind.ANIMATION,
    "scene": DirectiveKind.SCENE_CHANGE,
    "spawn": DirectiveKind.PREFAB_SPAWN,
}

_SPACE_RUNS = re.compile(r'[ \t]{2,}')
_SPACE_AROUND_NEWLINE = re.compile(r'[ \t]*\n[ \t]*')


def _strip_prefix_directives(text: str) -> tuple[str, list[Directive]]:
    directives: list[Directive] = []

    matched = True
    while matched:
        matched = False
        for kind, pattern in PREFIX_PATTERNS:
            match = pattern.match(text)
            if not match:
                continue

            payload = match.group(1) if pattern.groups else None
            if kind == DirectiveKind.CHARGE_METER and payload == "":
                payload = None
            directives.append(Directive(kind, payload))
            text = text[match.end():]
            matched = True
            break

    return text, directives


def _strip_modifiers(text: str) -> tuple[str, list[Directive]]:
    directives: list[Directive] = []

    def collect(match: re.Match) -> str:
        for group, kind in _MODIFIER_KINDS.items():
            value = match.group(group)
            if value is None:
                continue
            payload = int(value) if kind == DirectiveKind.STRESS_DELTA else value
            directives.append(Directive(kind, payload))
            break
        return ""

    stripped = MODIFIER_PATTERN.sub(collect, text)
    if directives:
        stripped = _SPACE_RUNS.sub(" ", stripped)
        stripped = _SPACE_AROUND_NEWLINE.sub("\n", stripped)
        stripped = stripped.strip()
    return stripped, directives


def parse_text(raw: str) -> ParsedText:
    """Split raw authored text into display text and its tokens, without side effects."""
    text, prefix = _strip_prefix_directives(raw or "")
    text, modifiers = _strip_modifiers(text)
    return ParsedText(text=text, directives=tuple(prefix + modifiers))


def apply_directives(directives: tuple[Directive, ...], sink: Optional[DirectiveSink]) -> None:
    """Invoke the sink once per directive, in order."""
    if sink is None:
        return

    for directive in directives:
        kind = directive.kind
        if kind == DirectiveKind.NAVIGATE:
            sink.navigate(directive.payload)
        elif kind == DirectiveKind.EXIT:
            sink.exit_application()
        elif kind == DirectiveKind.TIMELINE:
            sink.timeline(directive.payload)
        elif kind == DirectiveKind.CHARGE_METER:
            sink.charge_meter(directive.payload)
        elif kind == DirectiveKind.STRESS_DELTA:
            sink.stress_delta(directive.payload)
        elif kind == DirectiveKind.ANIMATION:
            sink.animation_trigger(directive.payload)
        elif kind == DirectiveKind.SCENE_CHANGE:
            sink.scene_change(directive.payload)
        elif kind == DirectiveKind.PREFAB_SPAWN:
            sink.prefab_spawn(directive.payload)


def resolve_text(raw: str, sink: Optional[DirectiveSink]) -> str:
    """Fire every token in raw once and return the text to reveal."""
    parsed = parse_text(raw)
    apply_directives(parsed.directives, sink)
    return parsed.text


class EventBusDirectiveSink:
    """
    DirectiveSink that publishes each token as a DirectiveEvent.

    Game systems (stress meter, scene loader, animator...) subscribe to
    the events they care about.
    """

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus

    def navigate(self, location: str) -> None:
        self.event_bus.publish(DirectiveEvent.NAVIGATE, location=location)

    def exit_application(self) -> None:
        self.event_bus.publish(DirectiveEvent.EXIT_APPLICATION)

    def timeline(self, event: str) -> None:
        self.event_bus.publish(DirectiveEvent.TIMELINE, event=event)

    def charge_meter(self, argument: Optional[str]) -> None:
        self.event_bus.publish(DirectiveEvent.CHARGE_METER, argument=argument)

    def stress_delta(self, delta: int) -> None:
        self.event_bus.publish(DirectiveEvent.STRESS_DELTA, delta=delta)

    def animation_trigger(self, name: str) -> None:
        self.event_bus.publish(DirectiveEvent.ANIMATION_TRIGGER, name=name)

    def scene_change(self, scene: str) -> None:
        self.event_bus.publish(DirectiveEvent.SCENE_CHANGE, scene=scene)

    def prefab_spawn(self, prefab: str) -> None:
        self.event_bus.publish(DirectiveEvent.PREFAB_SPAWN, prefab=prefab)
