"""Animation models."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class RGBPixel(BaseModel):
    """A single pixel as exchanged with API clients and stored on disk."""

    r: int = Field(ge=0, le=255)
    g: int = Field(ge=0, le=255)
    b: int = Field(ge=0, le=255)

    def to_color(self) -> tuple[int, int, int]:
        """Convert to an (R, G, B) tuple."""
        return (self.r, self.g, self.b)

    @classmethod
    def from_color(cls, color: tuple[int, int, int]) -> "RGBPixel":
        r, g, b = color
        return cls(r=r, g=g, b=b)


AnimationFrame = list[RGBPixel]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SavedAnimation(BaseModel):
    """A named animation stored for a device."""

    id: str
    device_id: str
    name: str
    frames: list[AnimationFrame] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def to_color_frames(self) -> list[list[tuple[int, int, int]]]:
        """Convert the stored frames to lists of (R, G, B) tuples."""
        return frames_to_colors(self.frames)


def frames_to_colors(frames: list[AnimationFrame]) -> list[list[tuple[int, int, int]]]:
    """Convert API frames to the color tuples the scheduler consumes.

    Args:
        frames: Frames of RGBPixel models

    Returns:
        Frames of (R, G, B) tuples
    """
    return [[pixel.to_color() for pixel in frame] for frame in frames]
