"""
Dialog Engine

Frame-driven runtime pieces shared by the dialog layer: typed events,
input actions, a cooperative task scheduler, voice playback and
authoring-data loading.

Quick Start:
    from dialog_engine import EventBus, TaskScheduler, InputHandler

    bus = EventBus()
    scheduler = TaskScheduler()
    input_handler = InputHandler(bus)

    # Each frame
    input_handler.update()
    scheduler.update(dt)
"""

__version__ = "0.1.0"
__author__ = "Developer"

from dialog_engine.core import (
    EventBus,
    Event,
    EngineEvent,
    UIEvent,
    AudioEvent,
    Action,
    TaskScheduler,
    ScheduledTask,
    DelayTask,
)

from dialog_engine.input import InputHandler

__all__ = [
    # Events
    "EventBus",
    "Event",
    "EngineEvent",
    "UIEvent",
    "AudioEvent",
    # Tasks
    "TaskScheduler",
    "ScheduledTask",
    "DelayTask",
    # Input
    "InputHandler",
    "Action",
]
