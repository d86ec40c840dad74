"""Gamepad poller producing controller snapshots with pygame."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional, Protocol

import pygame

from xinputdj.models import ButtonId, ControllerSnapshot
from xinputdj.protocols import SnapshotSink

logger = logging.getLogger(__name__)


class JoystickLike(Protocol):
    """The subset of pygame.joystick.JoystickType the conversion reads."""

    def get_axis(self, axis: int) -> float: ...
    def get_button(self, button: int) -> bool: ...
    def get_hat(self, hat: int) -> tuple[int, int]: ...
    def get_numaxes(self) -> int: ...
    def get_numbuttons(self) -> int: ...
    def get_numhats(self) -> int: ...


@dataclass(frozen=True, slots=True)
class GamepadLayout:
    """Axis and button indices of a gamepad as reported by pygame."""

    left_x: int
    left_y: int
    right_x: int
    right_y: int
    left_trigger: int
    right_trigger: int
    buttons: dict[ButtonId, int]


_XBOX_BUTTONS = {
    ButtonId.SOUTH: 0,
    ButtonId.EAST: 1,
    ButtonId.WEST: 2,
    ButtonId.NORTH: 3,
    ButtonId.LEFT_SHOULDER: 4,
    ButtonId.RIGHT_SHOULDER: 5,
    ButtonId.SELECT: 6,
    ButtonId.START: 7,
    ButtonId.LEFT_THUMB: 8,
    ButtonId.RIGHT_THUMB: 9,
}

LAYOUTS = {
    # Xbox One / Series controllers
    "xbox": GamepadLayout(
        left_x=0, left_y=1, right_x=2, right_y=3, left_trigger=4, right_trigger=5,
        buttons=_XBOX_BUTTONS,
    ),
    # Xbox 360 controllers (triggers sit between the sticks)
    "xbox360": GamepadLayout(
        left_x=0, left_y=1, left_trigger=2, right_x=3, right_y=4, right_trigger=5,
        buttons=_XBOX_BUTTONS,
    ),
}


def _axis(joystick: JoystickLike, index: int) -> float:
    if index >= joystick.get_numaxes():
        return 0.0
    return joystick.get_axis(index)


def _trigger_pressed(joystick: JoystickLike, index: int, threshold: float) -> bool:
    # Triggers rest at -1.0 and reach 1.0 fully pulled
    if index >= joystick.get_numaxes():
        return False
    return (joystick.get_axis(index) + 1.0) / 2.0 >= threshold


def snapshot_from_joystick(
    joystick: JoystickLike,
    layout: GamepadLayout,
    trigger_threshold: float = 0.5,
) -> ControllerSnapshot:
    """
    Read one snapshot from a joystick.

    pygame reports stick y pointing down; snapshots use y pointing up.
    The first hat becomes the d-pad buttons.
    """
    pressed = set()
    num_buttons = joystick.get_numbuttons()
    for button, index in layout.buttons.items():
        if index < num_buttons and joystick.get_button(index):
            pressed.add(button)

    if _trigger_pressed(joystick, layout.left_trigger, trigger_threshold):
        pressed.add(ButtonId.LEFT_TRIGGER)
    if _trigger_pressed(joystick, layout.right_trigger, trigger_threshold):
        pressed.add(ButtonId.RIGHT_TRIGGER)

    if joystick.get_numhats() > 0:
        hat_x, hat_y = joystick.get_hat(0)
        if hat_x < 0:
            pressed.add(ButtonId.DPAD_LEFT)
        elif hat_x > 0:
            pressed.add(ButtonId.DPAD_RIGHT)
        if hat_y > 0:
            pressed.add(ButtonId.DPAD_UP)
        elif hat_y < 0:
            pressed.add(ButtonId.DPAD_DOWN)

    return ControllerSnapshot(
        left=(_axis(joystick, layout.left_x), -_axis(joystick, layout.left_y)),
        right=(_axis(joystick, layout.right_x), -_axis(joystick, layout.right_y)),
        buttons=frozenset(pressed),
    )


class GamepadPoller:
    """
    Samples a gamepad at a fixed interval and pushes snapshots to a sink.

    When the poller stops for any reason (stop(), device removed, pygame
    error, sink closed) it closes the sink, which the mapping engine treats
    as a normal end of input.
    """

    def __init__(
        self,
        sink: SnapshotSink,
        joystick_index: int = 0,
        poll_interval: float = 0.016,
        trigger_threshold: float = 0.5,
        layout: str = "xbox",
    ):
        """
        Initialize the poller.

        Args:
            sink: Where snapshots go (usually the engine's SnapshotChannel)
            joystick_index: pygame joystick index to read
            poll_interval: Seconds between snapshots (~60 Hz by default)
            trigger_threshold: Trigger travel (0-1) that counts as pressed
            layout: Key into LAYOUTS

        Raises:
            ValueError: If the layout name is unknown
        """
        if layout not in LAYOUTS:
            raise ValueError(f"Unknown gamepad layout: {layout}")

        self._sink = sink
        self._joystick_index = joystick_index
        self._poll_interval = poll_interval
        self._trigger_threshold = trigger_threshold
        self._layout = LAYOUTS[layout]
        self._running = False
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        """Check if the polling thread is active."""
        return self._running

    def start(self) -> None:
        """Start polling in a background thread."""
        if self._running:
            logger.warning("GamepadPoller is already running")
            return

        self._running = True
        self._thread = threading.Thread(target=self._poll_loop, name="xinputdj-poller", daemon=True)
        self._thread.start()
        logger.debug("GamepadPoller started")

    def stop(self) -> None:
        """Stop polling and close the sink."""
        self._running = False
        if self._thread and self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=1.0)
        logger.debug("GamepadPoller stopped")

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the polling thread exits."""
        if self._thread:
            self._thread.join(timeout=timeout)

    def _open_joystick(self) -> Optional["pygame.joystick.JoystickType"]:
        pygame.init()
        pygame.joystick.init()

        count = pygame.joystick.get_count()
        if count <= self._joystick_index:
            logger.error(f"No gamepad at index {self._joystick_index} ({count} detected)")
            return None

        joystick = pygame.joystick.Joystick(self._joystick_index)
        joystick.init()
        logger.info(f"Connected gamepad: {joystick.get_name()}")
        return joystick

    def _poll_loop(self) -> None:
        try:
            joystick = self._open_joystick()
            if joystick is None:
                return

            instance_id = joystick.get_instance_id()
            while self._running:
                for event in pygame.event.get(pygame.JOYDEVICEREMOVED):
                    if event.instance_id == instance_id:
                        logger.warning(f"Gamepad disconnected: {joystick.get_name()}")
                        return

                snapshot = snapshot_from_joystick(joystick, self._layout, self._trigger_threshold)
                if not self._sink.send(snapshot):
                    logger.info("Snapshot channel closed, stopping poller")
                    return

                time.sleep(self._poll_interval)

        except pygame.error as e:
            logger.error(f"Gamepad polling failed: {e}")
        finally:
            self._running = False
            self._sink.close()
            pygame.joystick.quit()
