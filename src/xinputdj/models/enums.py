"""Enumerations for the XInputDJ mapping engine."""

from enum import Enum


class Deck(str, Enum):
    """Logical output target bound to a fixed MIDI channel."""

    LEFT = "left"      # Left stick, channel 1
    RIGHT = "right"    # Right stick, channel 2
    COMMON = "common"  # Auxiliary messages only, channel 16

    @property
    def channel(self) -> int:
        """Zero-based MIDI channel for this deck."""
        return DECK_CHANNELS[self]

    @property
    def has_stick(self) -> bool:
        """Whether this deck owns an analog stick and a reassignable controller."""
        return self is not Deck.COMMON


DECK_CHANNELS = {
    Deck.LEFT: 0,
    Deck.RIGHT: 1,
    Deck.COMMON: 15,
}

STICK_DECKS = (Deck.LEFT, Deck.RIGHT)


class Layer(str, Enum):
    """Mutually exclusive mapping tables selected by modifier buttons."""

    PRIMARY = "primary"
    SECONDARY = "secondary"  # Active while start or select is held


class Behavior(str, Enum):
    """Transform policy attached to a mapping entry."""

    CONTROLLER_ABSOLUTE = "controller_absolute"  # Stick angle -> 0-127
    CONTROLLER_RELATIVE = "controller_relative"  # Angular delta -> signed step
    NOTE = "note"                                # Edge-triggered note on/off

    @property
    def is_controller(self) -> bool:
        """Whether this behavior selects a controller number."""
        return self is not Behavior.NOTE


class ButtonId(str, Enum):
    """Buttons tracked in a controller snapshot."""

    DPAD_UP = "dpad_up"
    DPAD_DOWN = "dpad_down"
    DPAD_LEFT = "dpad_left"
    DPAD_RIGHT = "dpad_right"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_TRIGGER = "left_trigger"
    RIGHT_TRIGGER = "right_trigger"
    LEFT_THUMB = "left_thumb"
    RIGHT_THUMB = "right_thumb"
    SOUTH = "south"  # A / cross
    EAST = "east"    # B / circle
    WEST = "west"    # X / square
    NORTH = "north"  # Y / triangle
    START = "start"
    SELECT = "select"
