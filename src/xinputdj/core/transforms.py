"""Stick-to-value transforms.

Pure functions converting a stick coordinate into a 7-bit MIDI value.

Angles use a bearing convention: ``atan2(x, y)`` is 0 at 12 o'clock,
grows clockwise to pi at 6 o'clock and shrinks counter-clockwise to -pi.
6 o'clock is the discontinuity; ``stick_angle`` always reports it as +pi so
the result does not depend on the sign of a zero x coordinate.
"""

import math

from xinputdj.models.snapshot import ORIGIN, StickPosition

TWO_PI = 2.0 * math.pi

# Fraction of the 0-1 range covered by half a revolution. The output reaches
# 0.0 at 7 o'clock and 1.0 at 5 o'clock and clamps beyond them.
ABSOLUTE_SPAN = 0.6

MIDI_MAX = 127
RELATIVE_LIMIT = 127

# Relative steps are snapped to this many decimals before truncation so an
# exact multiple of the step size is not lost to float error.
_STEP_PRECISION = 9


def stick_distance(x: float, y: float) -> float:
    """Distance of the stick from its center."""
    return math.hypot(x, y)


def stick_angle(x: float, y: float) -> float:
    """Bearing of the stick in (-pi, pi], 12 o'clock = 0, clockwise positive."""
    angle = math.atan2(x, y)
    if angle == -math.pi:
        return math.pi
    return angle


def absolute(x: float, y: float, deadzone: float) -> int | None:
    """
    Map the stick bearing to an absolute 0-127 value.

    Args:
        x: Stick x coordinate
        y: Stick y coordinate (up positive)
        deadzone: Minimum deflection before any output is produced

    Returns:
        Value 0-127, or None while the stick is inside the deadzone

    Example:
        12 o'clock -> 63, 6 o'clock -> 127, just left of 6 o'clock -> 0
    """
    if stick_distance(x, y) < deadzone:
        return None

    value = (stick_angle(x, y) / math.pi) * ABSOLUTE_SPAN + 0.5
    value = max(0.0, min(1.0, value))
    return int(value * MIDI_MAX)


def encode_relative(step: int) -> int:
    """Encode a signed step into a 7-bit slot (negative values wrap by +128)."""
    return step if step >= 0 else step + 128


def decode_relative(value: int) -> int:
    """Recover a signed step from its 7-bit encoding (values >= 64 are negative)."""
    return value if value < 64 else value - 128


def relative(
    x: float,
    y: float,
    deadzone: float,
    steps: int,
    last: StickPosition,
) -> tuple[int | None, StickPosition]:
    """
    Map angular motion since ``last`` to an encoded relative step.

    A full revolution yields ``steps`` increments. Clockwise motion is
    positive; counter-clockwise motion is encoded as ``step + 128``.

    Args:
        x: Stick x coordinate
        y: Stick y coordinate (up positive)
        deadzone: Minimum deflection before any output is produced
        steps: Increments per full revolution (e.g. 720 scratch, 12 jog)
        last: Position the previous step was measured from; ORIGIN means
              there is no valid previous angle

    Returns:
        Tuple of (encoded value or None, position to remember for the next call).
        Inside the deadzone the remembered position resets to ORIGIN. Motion
        below one step keeps ``last`` so small movements accumulate.
    """
    if stick_distance(x, y) < deadzone:
        return None, ORIGIN

    if last == ORIGIN:
        return None, (x, y)

    diff = stick_angle(x, y) - stick_angle(*last)
    if diff > math.pi:
        diff -= TWO_PI
    elif diff <= -math.pi:
        diff += TWO_PI

    step = int(round(diff / TWO_PI * steps, _STEP_PRECISION))
    step = max(-RELATIVE_LIMIT, min(RELATIVE_LIMIT, step))
    if step == 0:
        return None, last

    return encode_relative(step), (x, y)


def touch_state(
    x: float,
    y: float,
    on_radius: float,
    off_radius: float,
    sustained: bool,
) -> bool:
    """
    Hysteresis gate for a stick-driven note.

    Returns the new sustained state: the note turns on once deflection
    reaches ``on_radius`` and turns off only after it drops below the
    smaller ``off_radius``.
    """
    distance = stick_distance(x, y)
    if sustained:
        return distance >= off_radius
    return distance >= on_radius
