"""Cross-snapshot memory owned by the dispatch loop."""

import copy
from dataclasses import dataclass, field

from xinputdj.models import NO_BUTTONS, ORIGIN, STICK_DECKS, ButtonState, Deck, Layer, StickPosition


@dataclass(slots=True)
class DeckState:
    """Per-deck memory for a deck that owns a stick."""

    controller: int | None = None          # Currently assigned controller number
    last_position: StickPosition = ORIGIN  # Reference point for relative steps
    note_sustained: bool = False           # Stick touch note currently on


@dataclass(slots=True)
class DispatcherState:
    """
    Mutable state of the mapping engine.

    Only the dispatch loop mutates this; other threads may read a copy
    through MappingEngine.state_snapshot() for diagnostics.
    """

    decks: dict[Deck, DeckState] = field(
        default_factory=lambda: {deck: DeckState() for deck in STICK_DECKS}
    )
    previous_buttons: ButtonState = NO_BUTTONS
    layer: Layer = Layer.PRIMARY

    @classmethod
    def initial(cls, controllers: dict[Deck, int]) -> "DispatcherState":
        """Fresh state with each deck on its configured start-up controller."""
        return cls(decks={deck: DeckState(controller=controllers.get(deck)) for deck in STICK_DECKS})

    def deck(self, deck: Deck) -> DeckState:
        """
        Get the memory of a stick-owning deck.

        Raises:
            ValueError: For Deck.COMMON, which has no stick or controller number
        """
        if not deck.has_stick:
            raise ValueError(f"Deck {deck.value} has no stick state")
        return self.decks[deck]

    def current_controller(self, deck: Deck) -> int | None:
        """Controller number currently assigned to a deck."""
        return self.deck(deck).controller

    def copy(self) -> "DispatcherState":
        """Independent copy for diagnostics."""
        return copy.deepcopy(self)
