"""Data models for the XInputDJ mapping engine."""

from .config import AppConfig, EngineSettings
from .enums import DECK_CHANNELS, STICK_DECKS, Behavior, ButtonId, Deck, Layer
from .mapping import MappingEntry, MappingTable, default_mapping, load_mapping, save_mapping
from .snapshot import (
    NO_BUTTONS,
    ORIGIN,
    ButtonState,
    ControllerSnapshot,
    StickPosition,
    get_button,
)

__all__ = [
    "AppConfig",
    # Enums
    "Behavior",
    "ButtonId",
    "ButtonState",
    "ControllerSnapshot",
    "DECK_CHANNELS",
    "Deck",
    "EngineSettings",
    "Layer",
    # Mapping
    "MappingEntry",
    "MappingTable",
    "NO_BUTTONS",
    "ORIGIN",
    "STICK_DECKS",
    "StickPosition",
    "default_mapping",
    "load_mapping",
    "save_mapping",
    "get_button",
]
