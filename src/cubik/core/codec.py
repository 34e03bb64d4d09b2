"""Pixel encoding for the ``update_leds`` command.

The device takes the whole matrix as one base64 string, 4 characters per
pixel. Rows go top to bottom, but the panel's columns are wired right to
left, so each row is emitted from its last column to its first.
"""

import base64
from collections.abc import Sequence
from typing import TYPE_CHECKING

from cubik.exceptions import ValidationError

if TYPE_CHECKING:
    from cubik.core.frame import Framebuffer

Color = tuple[int, int, int]

CHARS_PER_PIXEL = 4


def encode_pixel(r: int, g: int, b: int) -> str:
    """Encode one pixel as 4 base64 characters.

    Args:
        r: Red channel (0-255)
        g: Green channel (0-255)
        b: Blue channel (0-255)

    Returns:
        4-character base64 string of the raw RGB bytes

    Raises:
        ValidationError: If a channel is outside 0-255
    """
    try:
        raw = bytes((r, g, b))
    except (ValueError, TypeError) as e:
        raise ValidationError(f"Invalid color channel in ({r}, {g}, {b}): {e}") from e
    return base64.b64encode(raw).decode("ascii")


def encode_pixels(pixels: Sequence[Color], width: int, height: int) -> str:
    """Encode a row-major pixel sequence in hardware order.

    Args:
        pixels: width*height (R, G, B) tuples, index = y*width + x
        width: Matrix width
        height: Matrix height

    Returns:
        Base64 payload of exactly 4*width*height characters
    """
    if len(pixels) != width * height:
        raise ValidationError(
            f"Expected {width * height} pixels for {width}x{height}, got {len(pixels)}"
        )

    parts = []
    for y in range(height):
        row_start = y * width
        for x in range(width - 1, -1, -1):
            parts.append(encode_pixel(*pixels[row_start + x]))
    return "".join(parts)


def encode_frame(framebuffer: "Framebuffer") -> str:
    """Encode a framebuffer for ``update_leds``."""
    return encode_pixels(framebuffer.pixels, framebuffer.width, framebuffer.height)
