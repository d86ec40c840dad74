"""Layer selection from modifier buttons."""

from xinputdj.models import ButtonId, ControllerSnapshot, Layer

MODIFIER_BUTTONS = (ButtonId.START, ButtonId.SELECT)


def active_layer(snapshot: ControllerSnapshot) -> Layer:
    """Secondary while start or select is held, primary otherwise."""
    if any(snapshot.is_pressed(button) for button in MODIFIER_BUTTONS):
        return Layer.SECONDARY
    return Layer.PRIMARY
