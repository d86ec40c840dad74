"""XInputDJ - gamepad to MIDI mapping engine for DJ software."""

__version__ = "0.1.0"
