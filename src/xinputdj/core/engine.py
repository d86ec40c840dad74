"""Mapping engine lifecycle and dispatch loop."""

import logging
import threading
from enum import Enum
from queue import Empty, Queue
from typing import Optional

import mido

from xinputdj.exceptions import MidiError
from xinputdj.models import (
    DECK_CHANNELS,
    ControllerSnapshot,
    EngineSettings,
    MappingTable,
    default_mapping,
)
from xinputdj.protocols import MidiSink

from .processor import SnapshotProcessor
from .state import DispatcherState

logger = logging.getLogger(__name__)


class EngineStatus(str, Enum):
    """Lifecycle states of the mapping engine."""

    STOPPED = "stopped"
    RUNNING = "running"


class ExitReason(str, Enum):
    """Why the dispatch loop last ended."""

    STOPPED = "stopped"  # stop() was called
    INPUT_CLOSED = "input_closed"  # producer closed the channel
    FAILED = "failed"  # processing raised


class _ChannelClosed:
    """Queue marker sent when the producer closes its handle."""


_CLOSED = _ChannelClosed()


class SnapshotChannel:
    """
    Producer handle returned by MappingEngine.start().

    Unbounded FIFO: if the producer outpaces the dispatch loop the queue grows.
    Closing the channel makes the dispatch loop exit once it has processed
    every snapshot queued before the close.
    """

    def __init__(self) -> None:
        self._queue: Queue = Queue()
        self._closed = False
        self._lock = threading.Lock()

    def send(self, snapshot: ControllerSnapshot) -> bool:
        """
        Queue a snapshot for processing.

        Returns:
            False if the channel is closed and the snapshot was dropped
        """
        with self._lock:
            if self._closed:
                return False
            self._queue.put(snapshot)
            return True

    def close(self) -> None:
        """Close the channel (idempotent)."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_CLOSED)

    @property
    def closed(self) -> bool:
        """Whether the producer side has been closed."""
        with self._lock:
            return self._closed

    @property
    def pending(self) -> int:
        """Approximate number of queued snapshots."""
        return self._queue.qsize()

    def receive(self, timeout: float):
        """
        Take the next queued item, blocking for at most `timeout` seconds.

        Raises:
            queue.Empty: If nothing arrived in time
        """
        return self._queue.get(timeout=timeout)


class MappingEngine:
    """
    Runs the dispatch loop that maps controller snapshots to MIDI messages.

    One consumer thread takes snapshots off a SnapshotChannel, processes each
    to completion and forwards the resulting messages to the MIDI sink. The
    dispatcher state is touched only by that thread; the running flag is the
    only state shared with callers of start()/stop().
    """

    def __init__(
        self,
        sink: MidiSink,
        table: Optional[MappingTable] = None,
        receive_timeout: float = 0.1,
    ):
        """
        Initialize the engine (stopped).

        Args:
            sink: Destination for outbound MIDI messages
            table: Mapping table (default: built-in two-deck table)
            receive_timeout: How long the loop blocks on the channel before
                             re-checking the running flag (seconds)
        """
        self._sink = sink
        self._table = table or default_mapping()
        self._receive_timeout = receive_timeout

        self._lock = threading.Lock()
        self._running = False
        self._generation = 0
        self._thread: Optional[threading.Thread] = None
        self._channel: Optional[SnapshotChannel] = None
        self._state: Optional[DispatcherState] = None
        self._exit_reason: Optional[ExitReason] = None
        self._failure: Optional[Exception] = None

    @property
    def table(self) -> MappingTable:
        """Mapping table the engine runs with."""
        return self._table

    @property
    def status(self) -> EngineStatus:
        """Current lifecycle state."""
        with self._lock:
            return EngineStatus.RUNNING if self._running else EngineStatus.STOPPED

    @property
    def is_running(self) -> bool:
        """Check if the dispatch loop is running."""
        return self.status is EngineStatus.RUNNING

    @property
    def exit_reason(self) -> Optional[ExitReason]:
        """Why the last dispatch loop ended (None while running or before the first start)."""
        with self._lock:
            return self._exit_reason

    @property
    def failure(self) -> Optional[Exception]:
        """Exception that ended the last dispatch loop, if it failed."""
        with self._lock:
            return self._failure

    def start(self, settings: Optional[EngineSettings] = None) -> SnapshotChannel:
        """
        Start the dispatch loop.

        Idempotent: if already running, the existing channel is returned.

        Args:
            settings: Deadzones, steps and initial controller numbers
                      (default: EngineSettings())

        Returns:
            Channel the poller pushes snapshots into

        Raises:
            MappingError: If an initial controller number is not mapped
        """
        with self._lock:
            if self._running and self._channel is not None:
                logger.warning("MappingEngine is already running")
                return self._channel

            settings = settings or EngineSettings()
            controllers = self._table.resolve_initial_controllers(settings.initial_controllers)
            processor = SnapshotProcessor(self._table, settings)
            state = DispatcherState.initial(controllers)
            channel = SnapshotChannel()

            self._generation += 1
            self._running = True
            self._exit_reason = None
            self._failure = None
            self._state = state
            self._channel = channel
            self._thread = threading.Thread(
                target=self._dispatch_loop,
                args=(self._generation, channel, processor, state),
                name="xinputdj-dispatch",
                daemon=True,
            )
            self._thread.start()

        assigned = ", ".join(f"{deck.value}={c}" for deck, c in controllers.items())
        logger.info(f"MappingEngine started (table={self._table.name}, controllers: {assigned or 'none'})")
        return channel

    def stop(self, timeout: float = 1.0) -> None:
        """
        Stop the dispatch loop (idempotent).

        Takes effect at the top of the loop's next iteration: a snapshot
        being processed is always finished first. The channel handed out by
        start() is closed, so later sends return False.

        Args:
            timeout: How long to wait for the loop thread to exit (seconds)
        """
        with self._lock:
            was_running = self._running
            self._running = False
            if was_running:
                self._exit_reason = ExitReason.STOPPED
            thread = self._thread
            channel = self._channel

        if channel is not None:
            channel.close()

        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)

        if was_running:
            logger.info("MappingEngine stopped")

    def state_snapshot(self) -> Optional[DispatcherState]:
        """Copy of the dispatcher state for diagnostics (None before first start)."""
        state = self._state
        return state.copy() if state is not None else None

    def _should_run(self, generation: int) -> bool:
        with self._lock:
            return self._running and self._generation == generation

    def _dispatch_loop(
        self,
        generation: int,
        channel: SnapshotChannel,
        processor: SnapshotProcessor,
        state: DispatcherState,
    ) -> None:
        logger.debug("Dispatch loop started")
        try:
            while self._should_run(generation):
                try:
                    item = channel.receive(self._receive_timeout)
                except Empty:
                    continue

                if item is _CLOSED:
                    logger.info("Snapshot channel closed, stopping dispatch loop")
                    self._record_exit(generation, ExitReason.INPUT_CLOSED)
                    break

                for message in processor.process(item, state):
                    self._dispatch(message)
        except Exception as e:
            logger.exception("Dispatch loop stopped by an unexpected error")
            self._record_exit(generation, ExitReason.FAILED, e)
            raise
        finally:
            channel.close()
            # pending counts the close marker unless the loop consumed it
            unprocessed = max(channel.pending - 1, 0)
            if unprocessed:
                logger.warning(f"Discarded {unprocessed} unprocessed snapshot(s)")
            with self._lock:
                if self._generation == generation:
                    self._running = False
            logger.debug("Dispatch loop exited")

    def _record_exit(
        self, generation: int, reason: ExitReason, failure: Optional[Exception] = None
    ) -> None:
        with self._lock:
            if self._generation != generation:
                return
            # stop() records its reason first
            if self._exit_reason is None:
                self._exit_reason = reason
            if failure is not None:
                self._failure = failure

    def _dispatch(self, message: mido.Message) -> None:
        """Forward one message to the sink; failures are logged and dropped."""
        try:
            if message.type == "control_change":
                self._sink.send_controller_change(message.channel, message.control, message.value)
            elif message.type == "note_on":
                self._sink.send_note_on(message.channel, message.note, message.velocity)
            elif message.type == "note_off":
                self._sink.send_note_off(message.channel, message.note)
            else:
                logger.warning(f"Unsupported message type: {message.type}")
                return
            logger.debug(f"Sent {message}")
        except MidiError as e:
            logger.error(f"Dropped {_describe(message)}: {e.technical_message}")
        except Exception as e:
            logger.exception(f"Unexpected error sending {_describe(message)}: {e}")


def _describe(message: mido.Message) -> str:
    deck = next((d.value for d, ch in DECK_CHANNELS.items() if ch == message.channel), "?")
    return f"{message.type} to {deck} deck (channel {message.channel}): {message}"
