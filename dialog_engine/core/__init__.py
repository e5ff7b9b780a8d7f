"""
Core engine module.

Exports:
- EventBus, Event, EngineEvent, AudioEvent, UIEvent: Event system
- Action: Input actions
- TaskScheduler, ScheduledTask, DelayTask: Frame-driven tasks
"""

from dialog_engine.core.events import EventBus, Event, EngineEvent, UIEvent, AudioEvent
from dialog_engine.core.actions import Action, CHOICE_ACTIONS
from dialog_engine.core.tasks import TaskScheduler, ScheduledTask, DelayTask, TaskState

__all__ = [
    # Events
    "EventBus",
    "Event",
    "EngineEvent",
    "UIEvent",
    "AudioEvent",
    # Input
    "Action",
    "CHOICE_ACTIONS",
    # Tasks
    "TaskScheduler",
    "ScheduledTask",
    "DelayTask",
    "TaskState",
]
