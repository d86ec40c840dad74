"""Layered mapping table binding buttons and sticks to MIDI identifiers."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from xinputdj.exceptions import MappingError
from xinputdj.utils.persistence import read_model, write_model

from .enums import STICK_DECKS, Behavior, ButtonId, Deck, Layer
from .snapshot import ButtonState, get_button


class MappingEntry(BaseModel):
    """
    One binding in a mapping layer.

    An entry without a button is a stick entry: it is looked up by the deck's
    current controller number (controller behaviors) or acts as the deck's
    stick touch gate (note behavior).
    """

    model_config = ConfigDict(frozen=True)

    button: ButtonId | None = Field(default=None, description="Button predicate (None = stick)")
    identifier: int = Field(ge=0, le=127, description="Controller or note number")
    label: str = Field(default="", description="Human-readable name")
    deck: Deck = Field(description="Target deck")
    behavior: Behavior = Field(description="Transform policy")
    steps: int | None = Field(
        default=None, gt=0, description="Relative resolution override (increments per revolution)"
    )

    @property
    def is_stick(self) -> bool:
        """Whether this entry is driven by the deck's stick rather than a button."""
        return self.button is None

    def is_pressed(self, buttons: ButtonState) -> bool:
        """Evaluate the button predicate against a button state."""
        return self.button is not None and get_button(buttons, self.button)


class MappingTable(BaseModel):
    """
    Named layers of mapping entries.

    The table is read-only for the engine's lifetime. Entry order matters:
    for controller reassignment the earliest matching entry wins.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="default", description="Table name")
    layers: dict[Layer, list[MappingEntry]] = Field(description="Entries per layer")

    _index: dict[tuple[Layer, Deck], list[MappingEntry]] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _check_invariants(self) -> "MappingTable":
        if Layer.PRIMARY not in self.layers:
            raise MappingError("a primary layer is required")

        primary_controllers = {
            deck: {e.identifier for e in self.layers[Layer.PRIMARY]
                   if e.deck is deck and e.behavior.is_controller}
            for deck in STICK_DECKS
        }

        for layer, entries in self.layers.items():
            for entry in entries:
                if entry.deck is Deck.COMMON:
                    if entry.behavior.is_controller or entry.is_stick:
                        raise MappingError(
                            f"'{entry.label}' must be a button note: the common deck "
                            "has no stick and no controller number",
                            layer.value, entry.deck.value,
                        )
                    continue

                if entry.is_stick and entry.behavior is Behavior.NOTE and layer is not Layer.PRIMARY:
                    raise MappingError(
                        f"stick note '{entry.label}' is only supported in the primary layer",
                        layer.value, entry.deck.value,
                    )

                if layer is Layer.SECONDARY and entry.is_stick and entry.behavior.is_controller:
                    if entry.behavior is not Behavior.CONTROLLER_RELATIVE:
                        raise MappingError(
                            f"stick entry '{entry.label}' must be relative in the secondary layer",
                            layer.value, entry.deck.value,
                        )
                    continue

                if entry.behavior.is_controller and not entry.is_stick:
                    if entry.identifier not in primary_controllers[entry.deck]:
                        raise MappingError(
                            f"'{entry.label}' selects controller {entry.identifier}, "
                            "which the primary layer does not map",
                            layer.value, entry.deck.value,
                        )
        return self

    def model_post_init(self, __context) -> None:
        for layer, entries in self.layers.items():
            for entry in entries:
                self._index.setdefault((layer, entry.deck), []).append(entry)

    def entries(self, layer: Layer, deck: Deck) -> list[MappingEntry]:
        """Entries for one (layer, deck) pair, in table order."""
        return self._index.get((layer, deck), [])

    def controller_numbers(self, deck: Deck) -> set[int]:
        """Controller numbers the primary layer maps for a deck."""
        return {e.identifier for e in self.entries(Layer.PRIMARY, deck) if e.behavior.is_controller}

    def controller_entry(self, deck: Deck, controller: int) -> MappingEntry | None:
        """First primary-layer controller entry for a deck with the given number."""
        for entry in self.entries(Layer.PRIMARY, deck):
            if entry.behavior.is_controller and entry.identifier == controller:
                return entry
        return None

    def stick_entry(self, layer: Layer, deck: Deck) -> MappingEntry | None:
        """First stick controller entry for a deck in a layer."""
        for entry in self.entries(layer, deck):
            if entry.is_stick and entry.behavior.is_controller:
                return entry
        return None

    def stick_note_entry(self, deck: Deck) -> MappingEntry | None:
        """Primary-layer stick touch note for a deck, if any."""
        for entry in self.entries(Layer.PRIMARY, deck):
            if entry.is_stick and entry.behavior is Behavior.NOTE:
                return entry
        return None

    def resolve_initial_controllers(self, initial: dict[Deck, int]) -> dict[Deck, int]:
        """
        Check configured start-up controller numbers against the table.

        Decks whose primary layer maps no controllers are left out.

        Raises:
            MappingError: If a deck with controller entries has no valid initial number
        """
        resolved: dict[Deck, int] = {}
        for deck in STICK_DECKS:
            numbers = self.controller_numbers(deck)
            if not numbers:
                continue
            controller = initial.get(deck)
            if controller not in numbers:
                raise MappingError(
                    f"initial controller {controller} is not mapped "
                    f"(mapped: {sorted(numbers)})",
                    Layer.PRIMARY.value, deck.value,
                )
            resolved[deck] = controller
        return resolved


def _deck_entries(
    deck: Deck,
    eq_buttons: tuple[ButtonId, ButtonId, ButtonId, ButtonId],
    shoulder: ButtonId,
    trigger: ButtonId,
    thumb: ButtonId,
) -> tuple[list[MappingEntry], list[MappingEntry]]:
    high, mid, low, effect = eq_buttons
    absolute = Behavior.CONTROLLER_ABSOLUTE
    relative = Behavior.CONTROLLER_RELATIVE
    note = Behavior.NOTE

    primary = [
        MappingEntry(button=high, identifier=24, label="EQ high", deck=deck, behavior=absolute),
        MappingEntry(button=mid, identifier=25, label="EQ mid", deck=deck, behavior=absolute),
        MappingEntry(button=low, identifier=26, label="EQ low", deck=deck, behavior=absolute),
        MappingEntry(button=effect, identifier=27, label="Quick effect", deck=deck, behavior=absolute),
        MappingEntry(button=shoulder, identifier=28, label="Volume", deck=deck, behavior=absolute),
        MappingEntry(button=thumb, identifier=29, label="Jog wheel", deck=deck, behavior=relative),
        MappingEntry(identifier=28, label="Volume", deck=deck, behavior=absolute),
        MappingEntry(identifier=2, label="Scratch touch", deck=deck, behavior=note),
        MappingEntry(button=trigger, identifier=1, label="Play", deck=deck, behavior=note),
    ]
    secondary = [
        MappingEntry(identifier=30, label="Library scroll", deck=deck, behavior=relative),
        MappingEntry(button=high, identifier=10, label="Sync", deck=deck, behavior=note),
        MappingEntry(button=low, identifier=11, label="Cue", deck=deck, behavior=note),
        MappingEntry(button=shoulder, identifier=12, label="Load track", deck=deck, behavior=note),
        MappingEntry(button=trigger, identifier=13, label="Headphone cue", deck=deck, behavior=note),
    ]
    return primary, secondary


def default_mapping() -> MappingTable:
    """
    Built-in two-deck DJ mapping.

    Left deck uses the d-pad and left shoulder/trigger/thumb, right deck the
    face buttons and right shoulder/trigger/thumb. Both sticks start on
    controller 28 (volume, absolute).
    """
    left_primary, left_secondary = _deck_entries(
        Deck.LEFT,
        (ButtonId.DPAD_UP, ButtonId.DPAD_RIGHT, ButtonId.DPAD_DOWN, ButtonId.DPAD_LEFT),
        ButtonId.LEFT_SHOULDER, ButtonId.LEFT_TRIGGER, ButtonId.LEFT_THUMB,
    )
    right_primary, right_secondary = _deck_entries(
        Deck.RIGHT,
        (ButtonId.NORTH, ButtonId.EAST, ButtonId.SOUTH, ButtonId.WEST),
        ButtonId.RIGHT_SHOULDER, ButtonId.RIGHT_TRIGGER, ButtonId.RIGHT_THUMB,
    )
    common = [
        MappingEntry(button=ButtonId.LEFT_THUMB, identifier=20, label="Library back",
                     deck=Deck.COMMON, behavior=Behavior.NOTE),
        MappingEntry(button=ButtonId.RIGHT_THUMB, identifier=21, label="Library go to item",
                     deck=Deck.COMMON, behavior=Behavior.NOTE),
    ]
    return MappingTable(
        name="default",
        layers={
            Layer.PRIMARY: left_primary + right_primary,
            Layer.SECONDARY: left_secondary + right_secondary + common,
        },
    )


def load_mapping(path: Path) -> MappingTable:
    """
    Load a mapping table from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the file is invalid or breaks the table rules
    """
    return read_model(path, MappingTable)


def save_mapping(table: MappingTable, path: Path) -> None:
    """Write a mapping table to a JSON file."""
    write_model(table, path)
