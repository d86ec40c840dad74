"""MIDI output port with hot-plug reconnection."""

import logging
import threading
import time
from typing import Optional

import mido

from xinputdj.exceptions import (
    MidiError,
    MidiNotConnectedError,
    MidiPortNotFoundError,
    MidiSendError,
)

logger = logging.getLogger(__name__)


class MidiOutputManager:
    """
    MIDI output sink for the mapping engine.

    Opens a named output port and, once started, monitors it: when the port
    disappears the connection is dropped and re-opened as soon as the port
    comes back. Sends made while disconnected raise MidiNotConnectedError.
    """

    def __init__(self, poll_interval: float = 2.0):
        """
        Initialize MIDI output manager.

        Args:
            poll_interval: How often to check for the port coming and going (seconds)
        """
        self._poll_interval = poll_interval
        self._port_name: Optional[str] = None
        self._port: Optional[mido.ports.BaseOutput] = None
        self._port_lock = threading.Lock()
        self._running = False
        self._monitor_thread: Optional[threading.Thread] = None

    @staticmethod
    def list_ports() -> list[str]:
        """Names of the available MIDI output ports."""
        return mido.get_output_names()

    def open(self, port_name: str) -> str:
        """
        Open an output port by exact name, replacing any open port.

        Args:
            port_name: Name as listed by list_ports()

        Returns:
            The name of the opened port

        Raises:
            MidiPortNotFoundError: If no port with that name exists
            MidiError: If the backend fails to open the port
        """
        available = self.list_ports()
        if port_name not in available:
            raise MidiPortNotFoundError(port_name, available)

        with self._port_lock:
            self._close_port()
            self._port_name = port_name
            self._connect_to_port(port_name, raise_errors=True)

        logger.info(f"Connected to MIDI output: {port_name}")
        return port_name

    def close(self) -> None:
        """Close the port and forget its name."""
        with self._port_lock:
            self._close_port()
            self._port_name = None

    def start(self) -> None:
        """Start monitoring the selected port for disconnects."""
        if self._running:
            logger.warning("MidiOutputManager is already running")
            return

        self._running = True
        self._monitor_thread = threading.Thread(target=self._monitor_port, daemon=True)
        self._monitor_thread.start()
        logger.debug("MidiOutputManager started")

    def stop(self) -> None:
        """Stop monitoring and close the port."""
        self._running = False
        self.close()

        if self._monitor_thread and self._monitor_thread.is_alive():
            self._monitor_thread.join(timeout=1.0)

        logger.debug("MidiOutputManager stopped")

    def send(self, message: mido.Message) -> None:
        """
        Send a MIDI message.

        Raises:
            MidiNotConnectedError: If no port is open
            MidiSendError: If the backend rejects the message
        """
        with self._port_lock:
            if self._port is None:
                raise MidiNotConnectedError()
            try:
                self._port.send(message)
            except Exception as e:
                raise MidiSendError(message.type, str(e)) from e

    def send_controller_change(self, channel: int, controller: int, value: int) -> None:
        """Send a control change (channel 0-15, controller and value 0-127)."""
        self.send(mido.Message(
            "control_change", channel=channel & 0x0F, control=controller & 0x7F, value=value & 0x7F
        ))

    def send_note_on(self, channel: int, note: int, velocity: int) -> None:
        """Send a note-on (channel 0-15, note and velocity 0-127)."""
        self.send(mido.Message(
            "note_on", channel=channel & 0x0F, note=note & 0x7F, velocity=velocity & 0x7F
        ))

    def send_note_off(self, channel: int, note: int) -> None:
        """Send a note-off (channel 0-15, note 0-127)."""
        self.send(mido.Message("note_off", channel=channel & 0x0F, note=note & 0x7F, velocity=0))

    def _monitor_port(self) -> None:
        """Drop the port when it vanishes and reopen it when it returns."""
        logger.debug("Starting MIDI output port monitoring")

        while self._running:
            try:
                available_ports = set(self.list_ports())

                with self._port_lock:
                    if self._port and self._port.name not in available_ports:
                        logger.warning(f"MIDI output disconnected: {self._port.name}")
                        self._close_port()

                    if not self._port and self._port_name in available_ports:
                        logger.info(f"MIDI output detected: {self._port_name}")
                        self._connect_to_port(self._port_name)

                time.sleep(self._poll_interval)

            except Exception as e:
                logger.error(f"Error in MIDI output monitoring: {e}")
                time.sleep(self._poll_interval)

    def _connect_to_port(self, port_name: str, raise_errors: bool = False) -> None:
        """
        Open a MIDI output port.

        Note: Should be called with _port_lock held.
        """
        try:
            self._port = mido.open_output(port_name)
        except Exception as e:
            self._port = None
            logger.error(f"Failed to connect to {port_name}: {e}")
            if raise_errors:
                raise MidiError(
                    user_message=f"Could not open MIDI port {port_name}",
                    technical_message=f"mido.open_output({port_name!r}) failed: {e}",
                    recoverable=True,
                    recovery_hint="Close other applications using the port and try again",
                ) from e

    def _close_port(self) -> None:
        """
        Close the current port, if any.

        Note: Should be called with _port_lock held.
        """
        if self._port:
            try:
                self._port.close()
            except Exception as e:
                logger.error(f"Error closing MIDI output port: {e}")
            self._port = None

    @property
    def is_connected(self) -> bool:
        """Check if a MIDI output port is currently open."""
        with self._port_lock:
            return self._port is not None

    @property
    def current_port(self) -> Optional[str]:
        """Name of the open port, if any."""
        with self._port_lock:
            return self._port.name if self._port else None

    @property
    def selected_port(self) -> Optional[str]:
        """Name of the port to keep connected, even while it is unplugged."""
        return self._port_name

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.stop()
