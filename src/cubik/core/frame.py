"""Pixel buffer and frame management."""

from collections.abc import Sequence
from pathlib import Path
from typing import Union

from PIL import Image, ImageSequence

from cubik.core.codec import Color, encode_frame
from cubik.exceptions import OutOfBoundsError, ValidationError

MATRIX_WIDTH = 20
MATRIX_HEIGHT = 5

BLACK: Color = (0, 0, 0)

Frame = list[Color]


def parse_color(color: str) -> Color:
    """Parse a hex color string to RGB tuple.

    Args:
        color: Hex color string (e.g., "#FF0000" or "FF0000")

    Returns:
        (R, G, B) tuple
    """
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValidationError(f"Invalid color: {color}")
    try:
        return (
            int(value[0:2], 16),
            int(value[2:4], 16),
            int(value[4:6], 16),
        )
    except ValueError as e:
        raise ValidationError(f"Invalid color: {color}") from e


class Framebuffer:
    """A width x height pixel grid for an LED matrix."""

    def __init__(
        self,
        width: int = MATRIX_WIDTH,
        height: int = MATRIX_HEIGHT,
        background: Color = BLACK,
    ):
        """Initialize framebuffer filled with a background color.

        Args:
            width: Number of columns
            height: Number of rows
            background: Initial RGB fill
        """
        if width <= 0 or height <= 0:
            raise ValidationError(f"Invalid framebuffer size: {width}x{height}")
        self.width = width
        self.height = height
        self._pixels: list[Color] = [tuple(background)] * (width * height)

    @classmethod
    def from_pixels(cls, width: int, height: int, pixels: Sequence[Color]) -> "Framebuffer":
        """Build a framebuffer from a row-major pixel sequence.

        Args:
            width: Number of columns
            height: Number of rows
            pixels: width*height RGB tuples

        Returns:
            New Framebuffer holding a copy of the pixels
        """
        if len(pixels) != width * height:
            raise ValidationError(
                f"Expected {width * height} pixels for {width}x{height}, got {len(pixels)}"
            )
        fb = cls(width, height)
        fb._pixels = [tuple(p) for p in pixels]
        return fb

    def _index(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfBoundsError(f"Pixel coordinates ({x}, {y}) out of bounds")
        return y * self.width + x

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        """Set a single pixel.

        Args:
            x: X coordinate (0 is the leftmost column)
            y: Y coordinate (0 is the top row)
            color: RGB tuple

        Raises:
            OutOfBoundsError: If (x, y) is outside the buffer
        """
        self._pixels[self._index(x, y)] = tuple(color)

    def get_pixel(self, x: int, y: int) -> Color:
        """Get a single pixel.

        Raises:
            OutOfBoundsError: If (x, y) is outside the buffer
        """
        return self._pixels[self._index(x, y)]

    def clear(self, color: Color = BLACK) -> None:
        """Fill the whole buffer with one color."""
        self._pixels = [tuple(color)] * (self.width * self.height)

    @property
    def pixels(self) -> Frame:
        """Row-major copy of the pixels."""
        return list(self._pixels)

    def encode(self) -> str:
        """Encode the buffer as an ``update_leds`` payload."""
        return encode_frame(self)

    def to_image(self, scale: int = 1) -> Image.Image:
        """Convert buffer to PIL Image.

        Args:
            scale: Integer upscale factor (nearest neighbour)

        Returns:
            RGB PIL Image
        """
        img = Image.new("RGB", (self.width, self.height))
        img.putdata(self._pixels)
        if scale > 1:
            img = img.resize(
                (self.width * scale, self.height * scale),
                Image.Resampling.NEAREST,
            )
        return img

    def save(self, path: Union[str, Path], scale: int = 1) -> None:
        """Save buffer as image file.

        Args:
            path: Output file path (PNG, JPG, etc.)
            scale: Integer upscale factor
        """
        self.to_image(scale).save(path)

    def __repr__(self) -> str:
        return f"Framebuffer(width={self.width}, height={self.height})"


def load_image_frames(
    path: Union[str, Path],
    width: int = MATRIX_WIDTH,
    height: int = MATRIX_HEIGHT,
) -> list[Frame]:
    """Load every frame of a still or animated image as matrix frames.

    Args:
        path: Image file (PNG, GIF, ...)
        width: Target matrix width
        height: Target matrix height

    Returns:
        One row-major pixel list per image frame
    """
    frames: list[Frame] = []
    with Image.open(path) as image:
        for page in ImageSequence.Iterator(image):
            rgb = page.convert("RGB")
            if rgb.size != (width, height):
                rgb = rgb.resize((width, height), Image.Resampling.NEAREST)
            frames.append([tuple(p) for p in rgb.getdata()])
    return frames
