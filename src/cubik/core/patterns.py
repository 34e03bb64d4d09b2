"""Generated test patterns for the whole matrix."""

from cubik.core.codec import Color
from cubik.core.frame import Frame

RED: Color = (255, 0, 0)
BLUE: Color = (0, 0, 255)


def solid_color(color: Color, count: int) -> Frame:
    """Every LED set to the same color."""
    return [tuple(color)] * count


def checkerboard(count: int, first: Color = RED, second: Color = BLUE) -> Frame:
    """Alternate two colors by LED index in row-major order."""
    return [first if i % 2 == 0 else second for i in range(count)]


def _rainbow(pos: float) -> Color:
    # Piecewise linear through red, yellow, green, cyan, blue, magenta
    if pos < 0.167:
        return (255, int(pos / 0.167 * 255), 0)
    if pos < 0.333:
        return (int((0.333 - pos) / 0.166 * 255), 255, 0)
    if pos < 0.5:
        return (0, 255, int((pos - 0.333) / 0.167 * 255))
    if pos < 0.667:
        return (0, int((0.667 - pos) / 0.167 * 255), 255)
    if pos < 0.833:
        return (int((pos - 0.667) / 0.166 * 255), 0, 255)
    return (255, 0, int((1.0 - pos) / 0.167 * 255))


def _clamp(color: Color) -> Color:
    return tuple(max(0, min(255, c)) for c in color)


def gradient(count: int) -> Frame:
    """Rainbow gradient across all LEDs in row-major order.

    Args:
        count: Number of LEDs

    Returns:
        One color per LED, starting at red
    """
    return [_clamp(_rainbow(i / count)) for i in range(count)]

