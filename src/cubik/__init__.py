"""cubik - discovery, rendering and animation playback for CubeLite LED matrices."""

__version__ = "0.1.0"
