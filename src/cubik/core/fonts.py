"""5x5 digit font and text drawing onto a Framebuffer."""

from enum import Enum
from typing import Union

from cubik.core.codec import Color
from cubik.core.frame import Framebuffer
from cubik.exceptions import OutOfBoundsError, ValidationError

GLYPH_WIDTH = 5
GLYPH_HEIGHT = 5

_DIGIT_ROWS = {
    "0": ("#####", "#...#", "#...#", "#...#", "#####"),
    "1": ("..#..", ".##..", "..#..", "..#..", ".###."),
    "2": ("#####", "....#", "#####", "#....", "#####"),
    "3": ("#####", "....#", "#####", "....#", "#####"),
    "4": ("#...#", "#...#", "#####", "....#", "....#"),
    "5": ("#####", "#....", "#####", "....#", "#####"),
    "6": ("#####", "#....", "#####", "#...#", "#####"),
    "7": ("#####", "....#", "...#.", "..#..", ".#..."),
    "8": ("#####", "#...#", "#####", "#...#", "#####"),
    "9": ("#####", "#...#", "#####", "....#", "#####"),
}

Glyph = tuple[tuple[bool, ...], ...]

DIGIT_GLYPHS: dict[str, Glyph] = {
    char: tuple(tuple(cell == "#" for cell in row) for row in rows)
    for char, rows in _DIGIT_ROWS.items()
}


class Alignment(str, Enum):
    """Horizontal placement of a string within the buffer."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


def _coerce_alignment(alignment: Union[Alignment, str]) -> Alignment:
    try:
        return Alignment(alignment)
    except ValueError as e:
        raise ValidationError(f"Invalid alignment value: {alignment!r}") from e


def _glyph(digit: str) -> Glyph:
    glyph = DIGIT_GLYPHS.get(digit)
    if glyph is None:
        raise ValidationError(f"Invalid digit character: {digit!r}")
    return glyph


def text_width(length: int, spacing: int) -> int:
    """Pixel width of ``length`` glyphs separated by ``spacing`` columns."""
    if length <= 0:
        return 0
    return GLYPH_WIDTH * length + spacing * (length - 1)


def draw_digit(
    buffer: Framebuffer,
    digit: str,
    x: int,
    y: int,
    color: Color,
    background: Color,
) -> None:
    """Draw one digit glyph with its top-left corner at (x, y).

    Every cell of the 5x5 glyph is written, lit cells in ``color`` and the
    rest in ``background``.

    Raises:
        ValidationError: If ``digit`` is not one of '0'-'9'
        OutOfBoundsError: If the glyph would not fit inside the buffer
    """
    glyph = _glyph(digit)

    if x < 0 or y < 0 or x + GLYPH_WIDTH > buffer.width or y + GLYPH_HEIGHT > buffer.height:
        raise OutOfBoundsError(f"Digit at position ({x}, {y}) exceeds bounds")

    for row, cells in enumerate(glyph):
        for col, lit in enumerate(cells):
            buffer.set_pixel(x + col, y + row, color if lit else background)


def draw_string(
    buffer: Framebuffer,
    text: str,
    y: int,
    spacing: int,
    alignment: Union[Alignment, str],
    color: Color,
    background: Color,
) -> None:
    """Draw a string of digits on one line.

    Args:
        buffer: Target framebuffer
        text: Digits to draw
        y: Top row of the glyphs
        spacing: Blank columns between glyphs
        alignment: left, center or right
        color: Foreground color
        background: Color of unlit glyph cells

    Raises:
        ValidationError: Empty text, non-digit characters, negative spacing or unknown alignment
        OutOfBoundsError: If the string is wider than the buffer
    """
    if not text:
        raise ValidationError("Cannot draw empty string")
    if spacing < 0:
        raise ValidationError(f"Spacing must not be negative, got {spacing}")

    align = _coerce_alignment(alignment)

    total_width = text_width(len(text), spacing)
    if total_width > buffer.width:
        raise OutOfBoundsError(f"String {text!r} too wide: needs {total_width} pixels")

    for char in text:
        _glyph(char)

    if align is Alignment.LEFT:
        start_x = 0
    elif align is Alignment.CENTER:
        start_x = (buffer.width - total_width) // 2
    else:
        start_x = buffer.width - total_width

    x = start_x
    for char in text:
        draw_digit(buffer, char, x, y, color, background)
        x += GLYPH_WIDTH + spacing


def draw_number(
    buffer: Framebuffer,
    number: int,
    y: int,
    spacing: int,
    alignment: Union[Alignment, str],
    color: Color,
    background: Color,
) -> None:
    """Draw an integer using :func:`draw_string`."""
    draw_string(buffer, str(number), y, spacing, alignment, color, background)
