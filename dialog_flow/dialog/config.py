"""
Dialog configuration.
"""

from __future__ import annotations

from typing import Any, Optional

from dialog_flow.components.dialog import PLACEHOLDER_LABEL


class DialogConfig:
    """Configuration for dialog playback and input arbitration."""

    def __init__(
        self,
        chars_per_second: float = 30.0,
        min_reveal_duration: float = 0.25,
        progress_cooldown: float = 0.25,
        lock_release_delay: float = 0.15,
        presenter_retry_window: float = 0.5,
        auto_advance_delay: Optional[float] = None,
        placeholder_label: str = PLACEHOLDER_LABEL,
    ):
        if chars_per_second <= 0:
            raise ValueError(f"chars_per_second must be positive, got {chars_per_second}")
        for name, value in (
            ("min_reveal_duration", min_reveal_duration),
            ("progress_cooldown", progress_cooldown),
            ("lock_release_delay", lock_release_delay),
            ("presenter_retry_window", presenter_retry_window),
        ):
            if value < 0:
                raise ValueError(f"{name} must not be negative, got {value}")
        if auto_advance_delay is not None and auto_advance_delay < 0:
            raise ValueError(f"auto_advance_delay must not be negative, got {auto_advance_delay}")
        if "{n}" not in placeholder_label:
            raise ValueError("placeholder_label must contain '{n}'")

        self.chars_per_second = chars_per_second
        self.min_reveal_duration = min_reveal_duration
        self.progress_cooldown = progress_cooldown
        self.lock_release_delay = lock_release_delay
        self.presenter_retry_window = presenter_retry_window
        self.auto_advance_delay = auto_advance_delay
        self.placeholder_label = placeholder_label

    @property
    def seconds_per_char(self) -> float:
        return 1.0 / self.chars_per_second

    def to_dict(self) -> dict[str, Any]:
        """Get all settings."""
        return {
            "chars_per_second": self.chars_per_second,
            "min_reveal_duration": self.min_reveal_duration,
            "progress_cooldown": self.progress_cooldown,
            "lock_release_delay": self.lock_release_delay,
            "presenter_retry_window": self.presenter_retry_window,
            "auto_advance_delay": self.auto_advance_delay,
            "placeholder_label": self.placeholder_label,
        }

    @classmethod
    def from_dict(cls, settings: dict[str, Any]) -> DialogConfig:
        """Build a config from settings; unknown keys raise ValueError."""
        unknown = set(settings) - set(cls().to_dict())
        if unknown:
            raise ValueError(f"Unknown dialog settings: {', '.join(sorted(unknown))}")
        return cls(**settings)
