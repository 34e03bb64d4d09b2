"""Data models for cubik."""

from cubik.models.animation import AnimationFrame, RGBPixel, SavedAnimation, frames_to_colors
from cubik.models.config import Settings
from cubik.models.device import DeviceRecord

__all__ = [
    "AnimationFrame",
    "DeviceRecord",
    "RGBPixel",
    "SavedAnimation",
    "Settings",
    "frames_to_colors",
]
