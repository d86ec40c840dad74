"""Controller snapshot value passed from the poller to the mapping engine.

Snapshots are plain frozen dataclasses rather than Pydantic models: one is
produced every polling tick and consumed once by the dispatch loop.
"""

from dataclasses import dataclass
from typing import Iterable

from .enums import ButtonId, Deck

StickPosition = tuple[float, float]
ButtonState = frozenset[ButtonId]

ORIGIN: StickPosition = (0.0, 0.0)
NO_BUTTONS: ButtonState = frozenset()


def get_button(state: ButtonState, button: ButtonId) -> bool:
    """Return True if ``button`` is pressed in ``state``."""
    return button in state


@dataclass(frozen=True, slots=True)
class ControllerSnapshot:
    """
    State of the gamepad at one polling instant.

    Stick coordinates are in [-1, 1] with y pointing up, so (0, 1) is
    12 o'clock. Values outside that range are accepted as-is.
    """

    left: StickPosition = ORIGIN
    right: StickPosition = ORIGIN
    buttons: ButtonState = NO_BUTTONS

    @classmethod
    def create(
        cls,
        buttons: Iterable[ButtonId] = (),
        left: StickPosition = ORIGIN,
        right: StickPosition = ORIGIN,
    ) -> "ControllerSnapshot":
        """Build a snapshot from any iterable of pressed buttons."""
        return cls(left=left, right=right, buttons=frozenset(buttons))

    def is_pressed(self, button: ButtonId) -> bool:
        """Check whether a button is held in this snapshot."""
        return get_button(self.buttons, button)

    def stick(self, deck: Deck) -> StickPosition:
        """
        Get the stick owned by a deck.

        Raises:
            ValueError: If the deck has no stick (Deck.COMMON)
        """
        if deck is Deck.LEFT:
            return self.left
        if deck is Deck.RIGHT:
            return self.right
        raise ValueError(f"Deck {deck.value} has no stick")
