"""
Input action definitions.

Actions abstract raw input (keys, buttons) into semantic actions.
Dialog logic should use Actions, not raw keys. This enables:
- Key rebinding
- Multiple input methods (keyboard, gamepad)
- Cleaner dialog code

Usage:
    # Check if action was just pressed this frame
    if input.is_action_just_pressed(Action.CONFIRM):
        arbiter.progress()

    if input.is_action_just_pressed(Action.CHOICE_2):
        arbiter.select_option(1)
"""

from enum import Enum, auto

import pygame


class Action(Enum):
    """
    Semantic input actions.

    Each action can be mapped to multiple input sources
    (keyboard, gamepad, etc.).
    """

    # Dialog progression
    CONFIRM = auto()
    SKIP = auto()

    # Choice selectors, in on-screen order
    CHOICE_1 = auto()
    CHOICE_2 = auto()
    CHOICE_3 = auto()

    # Menu navigation
    MENU_UP = auto()
    MENU_DOWN = auto()

    # System
    PAUSE = auto()


# Choice actions in selector order; index in this tuple is the option index
CHOICE_ACTIONS: tuple[Action, ...] = (Action.CHOICE_1, Action.CHOICE_2, Action.CHOICE_3)


# Default key bindings (can be customized)
DEFAULT_KEY_BINDINGS: dict[Action, list[int]] = {
    Action.CONFIRM: [pygame.K_SPACE, pygame.K_RETURN],
    Action.SKIP: [pygame.K_ESCAPE],

    Action.CHOICE_1: [pygame.K_q, pygame.K_1],
    Action.CHOICE_2: [pygame.K_w, pygame.K_2],
    Action.CHOICE_3: [pygame.K_e, pygame.K_3],

    Action.MENU_UP: [pygame.K_UP],
    Action.MENU_DOWN: [pygame.K_DOWN],

    Action.PAUSE: [pygame.K_p],
}

# Gamepad button bindings (SDL controller layout)
DEFAULT_GAMEPAD_BINDINGS: dict[Action, list[int]] = {
    Action.CONFIRM: [0],   # A button
    Action.CHOICE_1: [2],  # X button
    Action.CHOICE_2: [3],  # Y button
    Action.CHOICE_3: [1],  # B button
    Action.SKIP: [6],      # Back
    Action.PAUSE: [7],     # Start
}

# D-pad bindings (hat)
DEFAULT_GAMEPAD_HAT_BINDINGS: dict[tuple[int, int], Action] = {
    (0, 1): Action.MENU_UP,
    (0, -1): Action.MENU_DOWN,
}
