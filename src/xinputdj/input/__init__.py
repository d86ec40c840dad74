"""Gamepad input."""

from .poller import LAYOUTS, GamepadLayout, GamepadPoller, snapshot_from_joystick

__all__ = ["GamepadLayout", "GamepadPoller", "LAYOUTS", "snapshot_from_joystick"]
