"""Protocol definitions for the engine's collaborators.

- MidiSink: accepts outbound messages (MIDI output port or a test double)
- SnapshotSink: accepts controller snapshots (the engine's input handle)
"""

from typing import Protocol, runtime_checkable

from xinputdj.models import ControllerSnapshot


@runtime_checkable
class MidiSink(Protocol):
    """
    Output boundary of the mapping engine.

    Implementations raise a MidiError subclass when a message cannot be
    delivered. The engine logs and drops failed messages, it never retries.
    """

    def send_controller_change(self, channel: int, controller: int, value: int) -> None:
        """
        Send a control change.

        Args:
            channel: MIDI channel (0-15)
            controller: Controller number (0-127)
            value: Controller value (0-127)
        """
        ...

    def send_note_on(self, channel: int, note: int, velocity: int) -> None:
        """Send a note-on (channel 0-15, note and velocity 0-127)."""
        ...

    def send_note_off(self, channel: int, note: int) -> None:
        """Send a note-off (channel 0-15, note 0-127)."""
        ...


@runtime_checkable
class SnapshotSink(Protocol):
    """Input boundary of the mapping engine, used by the gamepad poller."""

    def send(self, snapshot: ControllerSnapshot) -> bool:
        """
        Queue a snapshot for processing.

        Returns:
            False if the channel is closed and the snapshot was dropped
        """
        ...

    def close(self) -> None:
        """Signal that no more snapshots will be sent."""
        ...
