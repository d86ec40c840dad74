"""Mapping engine core: transforms, layer selection, state and dispatch."""

from .engine import EngineStatus, ExitReason, MappingEngine, SnapshotChannel
from .layers import active_layer
from .processor import SnapshotProcessor
from .state import DeckState, DispatcherState
from .transforms import absolute, decode_relative, encode_relative, relative, touch_state

__all__ = [
    "DeckState",
    "DispatcherState",
    "EngineStatus",
    "ExitReason",
    "MappingEngine",
    "SnapshotChannel",
    "SnapshotProcessor",
    "absolute",
    "active_layer",
    "decode_relative",
    "encode_relative",
    "relative",
    "touch_state",
]
