"""Commands for a single CubeLite device."""

import logging
from typing import Any

from cubik.core.frame import Framebuffer
from cubik.core.protocol import (
    DEFAULT_TIMEOUT,
    parse_location,
    send_command,
    send_command_no_response,
)
from cubik.exceptions import (
    DeviceProtocolError,
    TransportError,
    UnexpectedResponseError,
    ValidationError,
)

logger = logging.getLogger(__name__)

DEFAULT_PROPS = ("power", "bright", "name")


class Device:
    """Client for one device, addressed by its discovery location."""

    def __init__(self, location: str, timeout: float = DEFAULT_TIMEOUT):
        """Initialize device client.

        Args:
            location: Device location, e.g. "yeelight://192.168.1.20:55443"
            timeout: Connect and I/O timeout in seconds

        Raises:
            InvalidLocationError: If the location is malformed
        """
        self.host, self.port = parse_location(location)
        self.location = location
        self.timeout = timeout

    def send_command(self, method: str, params: list[Any]) -> list[Any]:
        """Send a command and return the device's ``result`` array."""
        logger.debug(f"{self.location} <- {method} {params}")
        return send_command(self.location, method, params, timeout=self.timeout)

    def _send_ok(self, method: str, params: list[Any]) -> None:
        result = self.send_command(method, params)
        if not result or result[0] != "ok":
            raise UnexpectedResponseError(method, result)

    def get_prop(self, *names: str) -> dict[str, str]:
        """Read device properties.

        Args:
            names: Property names, e.g. "power", "bright"

        Returns:
            Mapping of property name to value ("" where the device sent none)
        """
        names = names or DEFAULT_PROPS
        result = self.send_command("get_prop", list(names))

        props = {}
        for i, name in enumerate(names):
            if i < len(result):
                value = result[i]
                props[name] = value if isinstance(value, str) else str(value)
            else:
                props[name] = ""
        return props

    def toggle(self) -> None:
        """Toggle the power state."""
        self._send_ok("toggle", [])

    def set_power(self, on: bool) -> None:
        """Turn the device on or off."""
        self._send_ok("set_power", ["on" if on else "off", "sudden", 0])

    def set_brightness(self, brightness: int) -> None:
        """Set display brightness.

        Args:
            brightness: Brightness level (1-100)
        """
        if not 1 <= brightness <= 100:
            raise ValidationError(f"Brightness must be between 1 and 100, got {brightness}")
        self._send_ok("set_bright", [brightness, "sudden", 0])

    def activate_fx_mode(self) -> None:
        """Enter direct mode so per-pixel updates are accepted."""
        self._send_ok("activate_fx_mode", [{"mode": "direct"}])

    def update_leds(self, payload: str) -> None:
        """Send an encoded frame without waiting for a reply.

        Direct mode must have been activated first.
        """
        send_command_no_response(self.location, "update_leds", [payload], timeout=self.timeout)

    def show(self, framebuffer: Framebuffer) -> None:
        """Encode a framebuffer and send it to the matrix."""
        self.update_leds(framebuffer.encode())

    def ping(self) -> bool:
        """Check if device is reachable.

        Returns:
            True if device responds, False otherwise
        """
        try:
            self.get_prop("power")
            return True
        except (TransportError, DeviceProtocolError):
            return False

    def __repr__(self) -> str:
        return f"Device(location='{self.location}')"
