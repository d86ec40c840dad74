"""Per-snapshot mapping: layer selection, button processing, stick processing."""

import logging

import mido

from xinputdj.models import (
    NO_BUTTONS,
    ORIGIN,
    STICK_DECKS,
    Behavior,
    ButtonState,
    ControllerSnapshot,
    Deck,
    EngineSettings,
    Layer,
    MappingEntry,
    MappingTable,
    StickPosition,
)

from .layers import active_layer
from .state import DeckState, DispatcherState
from .transforms import absolute, relative, touch_state

logger = logging.getLogger(__name__)

NOTE_ON_VELOCITY = 127


def control_change(deck: Deck, controller: int, value: int) -> mido.Message:
    """Controller change on the deck's channel."""
    return mido.Message("control_change", channel=deck.channel, control=controller, value=value)


def note_on(deck: Deck, note: int) -> mido.Message:
    """Full-velocity note-on on the deck's channel."""
    return mido.Message("note_on", channel=deck.channel, note=note, velocity=NOTE_ON_VELOCITY)


def note_off(deck: Deck, note: int) -> mido.Message:
    """Note-off on the deck's channel."""
    return mido.Message("note_off", channel=deck.channel, note=note, velocity=0)


class SnapshotProcessor:
    """
    Turns one controller snapshot into the MIDI messages it causes.

    The processor itself is stateless; all cross-snapshot memory lives in the
    DispatcherState passed to process(), which must not be shared between
    threads while processing.
    """

    def __init__(self, table: MappingTable, settings: EngineSettings):
        """
        Initialize processor.

        Args:
            table: Mapping table (read-only for the processor's lifetime)
            settings: Deadzones and relative resolutions
        """
        self._table = table
        self._settings = settings

    @property
    def table(self) -> MappingTable:
        """Mapping table in use."""
        return self._table

    @property
    def settings(self) -> EngineSettings:
        """Engine settings in use."""
        return self._settings

    def process(self, snapshot: ControllerSnapshot, state: DispatcherState) -> list[mido.Message]:
        """
        Process one snapshot.

        Order: layer selection (a switch first releases every note the old
        layer holds), controller reassignment and button notes per deck,
        then stick output per deck. The snapshot's buttons become the
        previous button state for the next call.

        Args:
            snapshot: Current controller state
            state: Dispatcher state, mutated in place

        Returns:
            Messages to send, in order
        """
        messages: list[mido.Message] = []
        previous = state.previous_buttons

        layer = active_layer(snapshot)
        if layer is not state.layer:
            logger.debug(f"Layer switched: {state.layer.value} -> {layer.value}")
            messages.extend(self._release_layer(state))
            state.layer = layer
            # Buttons still held fire their binding in the new layer
            previous = NO_BUTTONS

        for deck in Deck:
            entries = self._table.entries(layer, deck)
            if deck.has_stick:
                self._reassign_controller(deck, entries, snapshot.buttons, state.deck(deck))
            messages.extend(self._button_notes(deck, entries, snapshot.buttons, previous))

        for deck in STICK_DECKS:
            messages.extend(self._stick_messages(deck, layer, snapshot.stick(deck), state.deck(deck)))

        state.previous_buttons = snapshot.buttons
        return messages

    def _release_layer(self, state: DispatcherState) -> list[mido.Message]:
        """Note-off for every note the outgoing layer still holds."""
        messages = []
        for deck in Deck:
            entries = self._table.entries(state.layer, deck)
            for entry in entries:
                if entry.is_stick or entry.behavior is not Behavior.NOTE:
                    continue
                if entry.is_pressed(state.previous_buttons):
                    messages.append(note_off(deck, entry.identifier))

        if state.layer is Layer.PRIMARY:
            for deck in STICK_DECKS:
                deck_state = state.deck(deck)
                entry = self._table.stick_note_entry(deck)
                if deck_state.note_sustained and entry is not None:
                    messages.append(note_off(deck, entry.identifier))
                deck_state.note_sustained = False
        return messages

    def _reassign_controller(
        self,
        deck: Deck,
        entries: list[MappingEntry],
        buttons: ButtonState,
        deck_state: DeckState,
    ) -> None:
        """Apply the first pressed controller-selecting entry, if any."""
        for entry in entries:
            if entry.is_stick or not entry.behavior.is_controller:
                continue
            if not entry.is_pressed(buttons):
                continue
            if entry.identifier != deck_state.controller:
                logger.info(
                    f"{deck.value} deck: controller {deck_state.controller} -> "
                    f"{entry.identifier} ({entry.label})"
                )
                deck_state.controller = entry.identifier
            return

    def _button_notes(
        self,
        deck: Deck,
        entries: list[MappingEntry],
        buttons: ButtonState,
        previous: ButtonState,
    ) -> list[mido.Message]:
        """Edge-triggered note on/off for every button note entry."""
        messages = []
        for entry in entries:
            if entry.is_stick or entry.behavior is not Behavior.NOTE:
                continue
            pressed = entry.is_pressed(buttons)
            was_pressed = entry.is_pressed(previous)
            if pressed and not was_pressed:
                messages.append(note_on(deck, entry.identifier))
            elif was_pressed and not pressed:
                messages.append(note_off(deck, entry.identifier))
        return messages

    def _stick_messages(
        self,
        deck: Deck,
        layer: Layer,
        position: StickPosition,
        deck_state: DeckState,
    ) -> list[mido.Message]:
        if layer is Layer.SECONDARY:
            return self._jog_messages(deck, position, deck_state)

        messages = self._touch_note(deck, position, deck_state)

        if deck_state.controller is None:
            return messages

        entry = self._table.controller_entry(deck, deck_state.controller)
        if entry is None:
            raise ValueError(
                f"{deck.value} deck is on controller {deck_state.controller}, "
                "which the primary layer does not map"
            )

        x, y = position
        if entry.behavior is Behavior.CONTROLLER_ABSOLUTE:
            value = absolute(x, y, self._settings.deadzone)
            deck_state.last_position = ORIGIN
        else:
            steps = entry.steps or self._settings.scratch_steps
            value, deck_state.last_position = relative(
                x, y, self._settings.deadzone, steps, deck_state.last_position
            )

        if value is not None:
            messages.append(control_change(deck, deck_state.controller, value))
        return messages

    def _jog_messages(self, deck: Deck, position: StickPosition, deck_state: DeckState) -> list[mido.Message]:
        """Secondary layer: fixed relative jog, independent of the assigned controller."""
        entry = self._table.stick_entry(Layer.SECONDARY, deck)
        if entry is None:
            return []

        x, y = position
        steps = entry.steps or self._settings.jog_steps
        value, deck_state.last_position = relative(
            x, y, self._settings.deadzone, steps, deck_state.last_position
        )
        if value is None:
            return []
        return [control_change(deck, entry.identifier, value)]

    def _touch_note(self, deck: Deck, position: StickPosition, deck_state: DeckState) -> list[mido.Message]:
        entry = self._table.stick_note_entry(deck)
        if entry is None:
            return []

        x, y = position
        sustained = touch_state(
            x, y,
            self._settings.note_on_deadzone,
            self._settings.note_off_deadzone,
            deck_state.note_sustained,
        )
        if sustained == deck_state.note_sustained:
            return []

        deck_state.note_sustained = sustained
        if sustained:
            return [note_on(deck, entry.identifier)]
        return [note_off(deck, entry.identifier)]
