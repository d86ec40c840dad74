"""MIDI output for the mapping engine."""

from .output_manager import MidiOutputManager

__all__ = ["MidiOutputManager"]
