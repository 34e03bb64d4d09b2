"""Core functionality for cubik."""

from cubik.core.codec import encode_frame, encode_pixel, encode_pixels
from cubik.core.device import Device
from cubik.core.discovery import discover_devices, parse_device_info
from cubik.core.fonts import Alignment, draw_digit, draw_number, draw_string
from cubik.core.frame import Framebuffer, load_image_frames, parse_color
from cubik.core.protocol import parse_location, send_command, send_command_no_response
from cubik.core.scheduler import AnimationScheduler, AnimationSession

__all__ = [
    "Alignment",
    "AnimationScheduler",
    "AnimationSession",
    "Device",
    "Framebuffer",
    "discover_devices",
    "draw_digit",
    "draw_number",
    "draw_string",
    "encode_frame",
    "encode_pixel",
    "encode_pixels",
    "load_image_frames",
    "parse_color",
    "parse_device_info",
    "parse_location",
    "send_command",
    "send_command_no_response",
]
