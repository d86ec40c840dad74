"""Tests for layer selection and per-snapshot processing."""

import mido
import pytest

from xinputdj.core import DispatcherState, SnapshotProcessor, active_layer
from xinputdj.models import (
    ORIGIN,
    Behavior,
    ButtonId,
    ControllerSnapshot,
    Deck,
    EngineSettings,
    Layer,
    MappingEntry,
    MappingTable,
)

SIX_OCLOCK = (0.0, -1.0)
TWELVE_OCLOCK = (0.0, 1.0)
THREE_OCLOCK = (1.0, 0.0)

# Outside the 0.75 deadzone but short of the 0.9 touch-note radius
SIX_OCLOCK_LIGHT = (0.0, -0.8)
TWELVE_OCLOCK_LIGHT = (0.0, 0.8)


def cc(channel, control, value):
    return mido.Message("control_change", channel=channel, control=control, value=value)


def on(channel, note):
    return mido.Message("note_on", channel=channel, note=note, velocity=127)


def off(channel, note):
    return mido.Message("note_off", channel=channel, note=note, velocity=0)


def snap(*buttons, left=ORIGIN, right=ORIGIN):
    return ControllerSnapshot.create(buttons, left=left, right=right)


@pytest.mark.unit
class TestActiveLayer:
    """Test modifier-based layer selection."""

    def test_primary_by_default(self):
        """No modifier means the primary layer."""
        assert active_layer(snap()) is Layer.PRIMARY
        assert active_layer(snap(ButtonId.SOUTH)) is Layer.PRIMARY

    @pytest.mark.parametrize("modifier", [ButtonId.START, ButtonId.SELECT])
    def test_modifier_selects_secondary(self, modifier):
        """Start or select switches to the secondary layer."""
        assert active_layer(snap(modifier)) is Layer.SECONDARY
        assert active_layer(snap(ButtonId.START, ButtonId.SELECT)) is Layer.SECONDARY


@pytest.mark.unit
class TestDispatcherState:
    """Test DispatcherState."""

    def test_initial(self):
        """Fresh state holds the initial controllers and no history."""
        state = DispatcherState.initial({Deck.LEFT: 28, Deck.RIGHT: 24})
        assert state.current_controller(Deck.LEFT) == 28
        assert state.current_controller(Deck.RIGHT) == 24
        assert state.deck(Deck.LEFT).last_position == ORIGIN
        assert state.layer is Layer.PRIMARY

    def test_common_has_no_state(self, state):
        """The common deck has no stick memory."""
        with pytest.raises(ValueError):
            state.deck(Deck.COMMON)

    def test_copy_is_independent(self, state):
        """Copies do not share deck memory."""
        copy = state.copy()
        copy.deck(Deck.LEFT).controller = 24
        assert state.current_controller(Deck.LEFT) == 28


@pytest.mark.unit
class TestButtonNotes:
    """Test edge-triggered button notes."""

    def test_press_hold_release(self, processor, state):
        """released, pressed, pressed, released gives exactly one on and one off."""
        frames = [snap(), snap(ButtonId.LEFT_TRIGGER), snap(ButtonId.LEFT_TRIGGER), snap()]

        results = [processor.process(frame, state) for frame in frames]

        assert results == [[], [on(0, 1)], [], [off(0, 1)]]

    def test_decks_use_their_channels(self, processor, state):
        """Right deck notes go to channel 1."""
        assert processor.process(snap(ButtonId.RIGHT_TRIGGER), state) == [on(1, 1)]

    def test_common_notes_on_channel_16(self, processor, state):
        """Common deck notes use channel 15 in the secondary layer."""
        messages = processor.process(snap(ButtonId.START, ButtonId.LEFT_THUMB), state)
        assert messages == [on(15, 20)]

        messages = processor.process(snap(ButtonId.START), state)
        assert messages == [off(15, 20)]

    def test_layer_switch_while_held(self, processor, state):
        """A layer switch releases the old binding and fires the new one for held buttons."""
        frames = [
            snap(ButtonId.LEFT_TRIGGER),
            snap(ButtonId.START, ButtonId.LEFT_TRIGGER),
            snap(ButtonId.START),
            snap(),
        ]

        results = [processor.process(frame, state) for frame in frames]

        assert results == [
            [on(0, 1)],
            [off(0, 1), on(0, 13)],
            [off(0, 13)],
            [],
        ]

    def test_layer_switch_releases_common_notes(self, processor, state):
        """Common notes held across a switch are released when the secondary layer is left."""
        processor.process(snap(ButtonId.START, ButtonId.LEFT_THUMB), state)

        assert processor.process(snap(ButtonId.LEFT_THUMB), state) == [off(15, 20)]

    def test_secondary_notes(self, processor, state):
        """Secondary layer notes fire on their own identifiers."""
        messages = processor.process(snap(ButtonId.SELECT, ButtonId.NORTH), state)
        assert messages == [on(1, 10)]


@pytest.mark.unit
class TestControllerReassignment:
    """Test controller selection by buttons."""

    def test_held_button_reassigns_once(self, processor, state):
        """Holding up moves the left deck to controller 24 and it stays there."""
        frames = [
            snap(ButtonId.DPAD_UP, left=SIX_OCLOCK_LIGHT),
            snap(ButtonId.DPAD_UP, left=SIX_OCLOCK_LIGHT),
            snap(ButtonId.DPAD_UP, left=SIX_OCLOCK_LIGHT),
            snap(left=SIX_OCLOCK_LIGHT),
        ]

        for frame in frames:
            assert processor.process(frame, state) == [cc(0, 24, 127)]

        assert state.current_controller(Deck.LEFT) == 24
        assert state.current_controller(Deck.RIGHT) == 28

    def test_first_pressed_entry_wins(self, processor, state):
        """With several selectors pressed, the earliest table entry wins."""
        processor.process(snap(ButtonId.DPAD_DOWN, ButtonId.DPAD_RIGHT), state)
        assert state.current_controller(Deck.LEFT) == 25

    def test_not_applied_in_secondary_layer(self, processor, state):
        """Secondary layer buttons do not select controllers."""
        processor.process(snap(ButtonId.START, ButtonId.DPAD_UP), state)
        assert state.current_controller(Deck.LEFT) == 28

    def test_unmapped_current_controller(self, table, settings):
        """A deck on an unmapped controller is a contract violation."""
        state = DispatcherState.initial({Deck.LEFT: 99, Deck.RIGHT: 28})
        with pytest.raises(ValueError):
            SnapshotProcessor(table, settings).process(snap(left=SIX_OCLOCK), state)


@pytest.mark.unit
class TestStickOutput:
    """Test stick processing in both layers."""

    def test_six_oclock_volume(self, processor, state):
        """Full deflection at 6 o'clock on controller 28 sends 127 on channel 0."""
        messages = processor.process(snap(left=SIX_OCLOCK), state)
        assert messages[-1] == cc(0, 28, 127)

        assert processor.process(snap(left=SIX_OCLOCK_LIGHT), state) == [cc(0, 28, 127)]

    def test_centered_sticks_are_silent(self, processor, state):
        """No stick output inside the deadzone."""
        assert processor.process(snap(left=(0.2, 0.2), right=(0.0, -0.5)), state) == []

    def test_both_decks(self, processor, state):
        """Left deck messages come before right deck messages."""
        messages = processor.process(snap(left=TWELVE_OCLOCK_LIGHT, right=SIX_OCLOCK_LIGHT), state)
        assert messages == [cc(0, 28, 63), cc(1, 28, 127)]

    def test_absolute_resets_relative_reference(self, processor, state):
        """Absolute output leaves no relative reference behind."""
        state.deck(Deck.LEFT).last_position = THREE_OCLOCK
        processor.process(snap(left=TWELVE_OCLOCK), state)
        assert state.deck(Deck.LEFT).last_position == ORIGIN

    def test_relative_jog_wheel(self, processor, state):
        """Thumb selects the relative jog wheel at 720 steps per turn."""
        processor.process(snap(ButtonId.LEFT_THUMB), state)
        assert state.current_controller(Deck.LEFT) == 29

        assert processor.process(snap(left=TWELVE_OCLOCK_LIGHT), state) == []
        assert processor.process(snap(left=(0.01, 0.8)), state) == [cc(0, 29, 1)]
        assert state.deck(Deck.LEFT).last_position == (0.01, 0.8)

    def test_secondary_layer_jog(self, processor, state):
        """Holding start turns the stick into a 12-step library jog."""
        assert processor.process(snap(ButtonId.START, right=TWELVE_OCLOCK), state) == []
        assert processor.process(snap(ButtonId.START, right=THREE_OCLOCK), state) == [cc(1, 30, 3)]
        assert processor.process(snap(ButtonId.START, right=TWELVE_OCLOCK), state) == [cc(1, 30, 125)]

    def test_secondary_jog_ignores_assigned_controller(self, processor, state):
        """The jog uses its own identifier regardless of the deck's controller."""
        processor.process(snap(ButtonId.DPAD_UP), state)
        processor.process(snap(ButtonId.SELECT, left=TWELVE_OCLOCK), state)
        assert processor.process(snap(ButtonId.SELECT, left=THREE_OCLOCK), state) == [cc(0, 30, 3)]
        assert state.current_controller(Deck.LEFT) == 24

    def test_entry_steps_override(self):
        """A per-entry step count replaces the configured resolution."""
        table = MappingTable(layers={Layer.PRIMARY: [
            MappingEntry(identifier=50, deck=Deck.LEFT, behavior=Behavior.CONTROLLER_RELATIVE, steps=4),
        ]})
        state = DispatcherState.initial({Deck.LEFT: 50})
        processor = SnapshotProcessor(table, EngineSettings(initial_controllers={Deck.LEFT: 50}))

        processor.process(snap(left=TWELVE_OCLOCK), state)
        assert processor.process(snap(left=THREE_OCLOCK), state) == [cc(0, 50, 1)]

    def test_deck_without_controllers_is_skipped(self):
        """A deck with no controller sends no stick output."""
        table = MappingTable(layers={Layer.PRIMARY: [
            MappingEntry(identifier=11, deck=Deck.LEFT, behavior=Behavior.CONTROLLER_ABSOLUTE),
        ]})
        state = DispatcherState.initial({Deck.LEFT: 11})
        processor = SnapshotProcessor(table, EngineSettings(initial_controllers={Deck.LEFT: 11}))

        assert processor.process(snap(left=SIX_OCLOCK, right=SIX_OCLOCK), state) == [cc(0, 11, 127)]


@pytest.mark.unit
class TestTouchNote:
    """Test the stick touch note gate."""

    def test_touch_and_release(self, processor, state):
        """Pushing the stick out sends the touch note, pulling back releases it."""
        first = processor.process(snap(left=SIX_OCLOCK), state)
        assert first == [on(0, 2), cc(0, 28, 127)]

        # Between the off and on radii the note stays on
        assert processor.process(snap(left=(0.0, -0.85)), state) == [cc(0, 28, 127)]

        assert processor.process(snap(left=(0.0, -0.5)), state) == [off(0, 2)]

    def test_not_evaluated_in_secondary(self, processor, state):
        """The touch gate is not evaluated while the secondary layer is active."""
        processor.process(snap(ButtonId.START, left=SIX_OCLOCK), state)
        assert state.deck(Deck.LEFT).note_sustained is False

    def test_released_when_secondary_layer_engages(self, processor, state):
        """Entering the secondary layer releases a sustained touch note."""
        processor.process(snap(left=SIX_OCLOCK), state)

        assert processor.process(snap(ButtonId.START, left=SIX_OCLOCK), state) == [off(0, 2)]
        assert state.deck(Deck.LEFT).note_sustained is False

        # Back in the primary layer the gate starts over
        assert processor.process(snap(left=SIX_OCLOCK), state) == [on(0, 2), cc(0, 28, 127)]
