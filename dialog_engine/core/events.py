"""
Typed event bus for decoupled communication.

Uses Enums for event types so listeners and publishers agree on
names without magic strings.

Usage:
    # Define events
    class StoryEvents(Enum):
        NODE_ENTERED = auto()
        CHOICE_SELECTED = auto()

    # Subscribe
    event_bus.subscribe(StoryEvents.NODE_ENTERED, on_node_entered)

    # Publish
    event_bus.publish(StoryEvents.NODE_ENTERED, block_index=3, speaker="Ibu")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref


logger = logging.getLogger(__name__)


class EngineEvent(Enum):
    """Built-in engine events."""
    # Lifecycle
    GAME_START = auto()
    GAME_PAUSE = auto()
    GAME_RESUME = auto()
    GAME_QUIT = auto()

    # Scene
    SCENE_REQUESTED = auto()


class AudioEvent(Enum):
    """Audio system events."""
    VOICE_STARTED = auto()
    VOICE_STOPPED = auto()
    SFX_PLAYED = auto()


class UIEvent(Enum):
    """UI events raised by the dialog layer."""
    DIALOG_STARTED = auto()
    DIALOG_ENDED = auto()
    CHOICES_PRESENTED = auto()
    CHOICES_DISMISSED = auto()
    CHOICE_HIGHLIGHTED = auto()  # Keyboard/gamepad cursor moved inside the offered set


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
        consumed: Whether the event has been handled
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        """Mark event as consumed (stops propagation)."""
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        """Get event data by key."""
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Get event data by key (dict-style)."""
        return self.data[key]


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """
    Central event bus for publish/subscribe messaging.

    Features:
    - Typed events (Enum-based)
    - Priority ordering
    - Weak references (auto-cleanup when handlers are deleted)
    - One-shot handlers
    - Event consumption (stops propagation)
    - Events published from inside a handler are queued, so delivery
      order always matches publish order
    """

    def __init__(self):
        # Map of event type -> list of (priority, handler, one_shot)
        self._handlers: dict[Enum, list[tuple[int, Any, bool]]] = {}
        # Queue for events published during handling
        self._event_queue: list[Event] = []
        self._is_publishing = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            priority: Higher priority handlers are called first (default 0)
            one_shot: If True, handler is removed after first call
            weak: If True, use weak reference (handler auto-removed if deleted)
        """
        if event_type not in self._handlers:
            self._handlers[event_type] = []

        if weak:
            if hasattr(handler, '__self__'):
                handler_ref = WeakMethod(handler)
            else:
                handler_ref = ref(handler)
        else:
            handler_ref = handler

        # Insert sorted by priority (highest first), stable for equal priority
        handlers = self._handlers[event_type]
        entry = (priority, handler_ref, one_shot)

        insert_idx = len(handlers)
        for i, (p, _, _) in enumerate(handlers):
            if priority > p:
                insert_idx = i
                break

        handlers.insert(insert_idx, entry)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """
        Unsubscribe from an event type.

        Args:
            event_type: The event type
            handler: The handler to remove
        """
        if event_type not in self._handlers:
            return

        handlers = self._handlers[event_type]
        self._handlers[event_type] = [
            (p, h, o) for p, h, o in handlers
            if self._get_handler(h) != handler
        ]

    def has_subscribers(self, event_type: Enum) -> bool:
        """Check if anything listens for an event type."""
        return bool(self._handlers.get(event_type))

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Args:
            event_type: The event type
            **data: Event data as keyword arguments

        Returns:
            The Event object (check .consumed to see if it was handled)
        """
        event = Event(type=event_type, data=data)

        if self._is_publishing:
            self._event_queue.append(event)
        else:
            self._dispatch(event)

        return event

    def clear(self, event_type: Enum | None = None) -> None:
        """
        Clear handlers.

        Args:
            event_type: If specified, only clear handlers for this type.
                       If None, clear all handlers.
        """
        if event_type is None:
            self._handlers.clear()
        elif event_type in self._handlers:
            del self._handlers[event_type]

    def _dispatch(self, event: Event) -> None:
        """Dispatch event to handlers, then drain anything queued meanwhile."""
        self._is_publishing = True
        try:
            self._deliver(event)
            while self._event_queue:
                self._deliver(self._event_queue.pop(0))
        finally:
            self._is_publishing = False

    def _deliver(self, event: Event) -> None:
        handlers = self._handlers.get(event.type)
        if not handlers:
            return

        to_remove = []

        # Iterate over a snapshot; handlers may subscribe/unsubscribe
        for entry in list(handlers):
            priority, handler_ref, one_shot = entry
            handler = self._get_handler(handler_ref)

            if handler is None:
                # Weak reference was garbage collected
                to_remove.append(entry)
                continue

            try:
                handler(event)
            except Exception:
                # Log but don't crash
                logger.exception(f"Error in event handler for {event.type}")

            if one_shot:
                to_remove.append(entry)

            if event.consumed:
                break

        for entry in to_remove:
            if entry in handlers:
                handlers.remove(entry)

    def _get_handler(self, handler_ref: Any) -> EventHandler | None:
        """Resolve handler from reference."""
        if isinstance(handler_ref, (ref, WeakMethod)):
            return handler_ref()
        return handler_ref
