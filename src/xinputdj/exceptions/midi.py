"""MIDI output exceptions.

This module defines exceptions for the MIDI sink:
- MidiError: Base class for MIDI errors
- MidiPortNotFoundError: Requested output port does not exist
- MidiNotConnectedError: No output port is open
- MidiSendError: The transport rejected a message
"""

from typing import Optional

from .base import XInputDJError


class MidiError(XInputDJError):
    """MIDI output failed."""
    pass


class MidiPortNotFoundError(MidiError):
    """Requested MIDI output port is not available."""

    def __init__(self, port_name: str, available: Optional[list[str]] = None):
        """
        Initialize port not found error.

        Args:
            port_name: Name of the requested port
            available: Port names that were available at the time
        """
        available = available or []
        technical = f"MIDI port {port_name!r} not found (available: {available})"
        if available:
            hint = "Available ports:\n" + "\n".join(f"  - {p}" for p in available)
        else:
            hint = "No MIDI output ports found. Connect a device or start a virtual MIDI port."
        hint += "\nRun 'xinputdj midi list' to see valid port names"

        super().__init__(
            user_message=f"MIDI port {port_name} not found",
            technical_message=technical,
            recoverable=True,
            recovery_hint=hint,
        )
        self.port_name = port_name
        self.available = available


class MidiNotConnectedError(MidiError):
    """No MIDI output connection is available."""

    def __init__(self):
        super().__init__(
            user_message="No MIDI connection available",
            recoverable=True,
            recovery_hint="Open a MIDI output port before starting the engine",
        )


class MidiSendError(MidiError):
    """Transport error while sending a MIDI message."""

    def __init__(self, message: str, original_error: str):
        """
        Initialize send error.

        Args:
            message: Description of the message that failed
            original_error: Error reported by the transport
        """
        super().__init__(
            user_message=f"Failed to send MIDI {message}",
            technical_message=f"Failed to send MIDI {message}: {original_error}",
            recoverable=True,
        )
        self.original_error = original_error
