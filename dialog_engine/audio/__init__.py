"""Audio playback module."""

from dialog_engine.audio.manager import AudioManager

__all__ = ["AudioManager"]
