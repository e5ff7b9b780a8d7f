"""
Dialog Flow module.

Branching dialog built on top of dialog_engine:
- Components (authoring data, playback state)
- Dialog (sequencer, text reveal, choice filtering, input arbitration)
- Systems (frame-loop wiring)
"""
