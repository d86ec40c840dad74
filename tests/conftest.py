"""Pytest fixtures for tests."""

import threading
import time

import pytest

from xinputdj.core import DispatcherState, SnapshotProcessor
from xinputdj.models import EngineSettings, default_mapping


class RecordingSink:
    """MidiSink double that records every call as a tuple."""

    def __init__(self):
        self.sent = []
        self._lock = threading.Lock()

    def send_controller_change(self, channel, controller, value):
        self._record(("cc", channel, controller, value))

    def send_note_on(self, channel, note, velocity):
        self._record(("note_on", channel, note, velocity))

    def send_note_off(self, channel, note):
        self._record(("note_off", channel, note))

    def _record(self, item):
        with self._lock:
            self.sent.append(item)

    def wait_for(self, count, timeout=2.0):
        """Block until at least ``count`` calls were recorded."""
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            with self._lock:
                if len(self.sent) >= count:
                    return True
            time.sleep(0.01)
        return False


@pytest.fixture
def sink():
    """Create a recording MIDI sink."""
    return RecordingSink()


@pytest.fixture
def table():
    """Built-in mapping table."""
    return default_mapping()


@pytest.fixture
def settings():
    """Default engine settings (deadzone 0.75, both decks on controller 28)."""
    return EngineSettings()


@pytest.fixture
def processor(table, settings):
    """Snapshot processor over the default table."""
    return SnapshotProcessor(table, settings)


@pytest.fixture
def state(table, settings):
    """Fresh dispatcher state with both decks on their initial controllers."""
    return DispatcherState.initial(table.resolve_initial_controllers(settings.initial_controllers))
