"""Exceptions raised by cubik.

Everything the package raises on purpose derives from CubikError so callers
can catch all app-specific failures in one place. The concrete classes also
inherit from the closest builtin (ValueError, ConnectionError, KeyError) so
code written against builtins keeps working.
"""

from typing import Optional


class CubikError(Exception):
    """Base exception for all cubik errors."""


class ValidationError(CubikError, ValueError):
    """Input was malformed and the operation was not attempted."""


class InvalidLocationError(ValidationError):
    """A device location string is not of the form ``yeelight://host:port``."""

    def __init__(self, location: str, reason: Optional[str] = None):
        self.location = location
        message = f"Invalid location format: {location}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class OutOfBoundsError(ValidationError):
    """A coordinate or drawing falls outside the framebuffer."""


class TransportError(CubikError, ConnectionError):
    """Connecting to, writing to or reading from a device failed or timed out."""


class DeviceProtocolError(CubikError):
    """The device answered with an ``error`` object.

    Attributes:
        code: Numeric error code reported by the device
        message: Error message reported by the device
    """

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"Device error: [{code}] {message}")


class UnexpectedResponseError(DeviceProtocolError):
    """The device answered, but not with the acknowledgement a command expects."""

    def __init__(self, method: str, result: list):
        self.method = method
        self.result = result
        super().__init__(-1, f"unexpected response to {method}: {result!r}")


class AnimationNotFoundError(CubikError, KeyError):
    """No saved animation exists with the requested id."""

    def __init__(self, animation_id: str):
        self.animation_id = animation_id
        super().__init__(animation_id)

    def __str__(self) -> str:
        return f"Animation not found: {self.animation_id}"
