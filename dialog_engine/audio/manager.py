"""
Core Audio Manager.

Plays dialog voice clips through pygame.mixer. The dialog layer only
needs one-shot playback and a stop, so this manager keeps a single
voice channel and a sound cache.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pygame

from dialog_engine.core.events import EventBus, AudioEvent


class AudioManager:
    """
    Central audio manager for dialog playback.

    Handles:
    - Voice clip caching and one-shot playback
    - Volume categories (Master, voice, sfx, ui)

    Implements the AudioPlayer interface expected by the dialog core
    (play_once / stop).
    """

    def __init__(self, event_bus: EventBus | None = None, base_path: str | Path = ""):
        self.event_bus = event_bus
        self._base_path = Path(base_path) if base_path else None

        # Configuration
        self._master_volume: float = 1.0
        self._category_volumes: dict[str, float] = {
            "voice": 1.0,
            "sfx": 1.0,
            "ui": 1.0,
        }

        # Resources
        self._sound_cache: dict[str, pygame.mixer.Sound] = {}

        # State
        self._voice_channel: pygame.mixer.Channel | None = None
        self._current_handle: str | None = None
        self._initialized: bool = False

    def init(self, frequency: int = 44100, size: int = -16, channels: int = 2, buffer: int = 512) -> None:
        """Initialize the audio system."""
        if pygame.mixer.get_init():
            self._initialized = True
            return

        try:
            pygame.mixer.init(frequency=frequency, size=size, channels=channels, buffer=buffer)
            self._initialized = True
            logging.info("Audio system initialized.")
        except pygame.error as e:
            logging.error(f"Failed to initialize audio system: {e}")

    def quit(self) -> None:
        """Shutdown audio system."""
        self.stop()
        pygame.mixer.quit()
        self._initialized = False

    # --- Volume Control ---

    def set_master_volume(self, volume: float) -> None:
        """Set master volume (0.0 to 1.0)."""
        self._master_volume = max(0.0, min(1.0, volume))

    def set_category_volume(self, category: str, volume: float) -> None:
        """Set volume for a specific category."""
        if category in self._category_volumes:
            self._category_volumes[category] = max(0.0, min(1.0, volume))

    def get_settings(self) -> dict:
        """Get all volume settings."""
        return {
            "master": self._master_volume,
            "categories": self._category_volumes.copy()
        }

    def apply_settings(self, settings: dict) -> None:
        """Apply volume settings."""
        self.set_master_volume(settings.get("master", 1.0))
        for cat, vol in settings.get("categories", {}).items():
            self.set_category_volume(cat, vol)

    # --- Playback ---

    def _resolve_path(self, handle: str) -> Path:
        path = Path(handle)
        if self._base_path and not path.is_absolute():
            path = self._base_path / path
        return path

    def _get_sound(self, handle: str) -> pygame.mixer.Sound | None:
        """Load or retrieve sound from cache."""
        if not self._initialized:
            return None

        if handle not in self._sound_cache:
            path = self._resolve_path(handle)
            try:
                if not path.exists():
                    logging.warning(f"Audio file not found: {path}")
                    return None
                self._sound_cache[handle] = pygame.mixer.Sound(str(path))
            except pygame.error as e:
                logging.error(f"Failed to load sound {path}: {e}")
                return None

        return self._sound_cache[handle]

    def play_once(self, handle: str, category: str = "voice") -> pygame.mixer.Channel | None:
        """
        Play a clip once, replacing whatever voice clip is playing.

        Args:
            handle: Sound file path (relative to base_path if set)
            category: Volume category

        Returns:
            The channel used, or None if playback failed.
        """
        sound = self._get_sound(handle)
        if not sound:
            return None

        self.stop()

        channel = pygame.mixer.find_channel(True)
        if not channel:
            return None

        channel.set_volume(self._master_volume * self._category_volumes.get(category, 1.0))
        channel.play(sound)

        self._voice_channel = channel
        self._current_handle = handle

        if self.event_bus:
            self.event_bus.publish(AudioEvent.VOICE_STARTED, handle=handle)

        return channel

    def stop(self) -> None:
        """Stop the current voice clip, if any."""
        if self._voice_channel is None:
            return

        self._voice_channel.stop()
        handle = self._current_handle
        self._voice_channel = None
        self._current_handle = None

        if self.event_bus:
            self.event_bus.publish(AudioEvent.VOICE_STOPPED, handle=handle)

    @property
    def current_handle(self) -> str | None:
        """Handle of the clip started last, until stopped."""
        return self._current_handle
