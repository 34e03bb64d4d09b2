"""JSON-lines command protocol spoken by the devices over TCP.

Every call opens its own short-lived connection and performs exactly one
exchange. Requests are one JSON object terminated by CRLF; replies are one
JSON object terminated by LF. Retries are left to callers.
"""

import json
import logging
import socket
import time
from typing import Any, Optional

from pydantic import BaseModel, Field

from cubik.exceptions import DeviceProtocolError, InvalidLocationError, TransportError

logger = logging.getLogger(__name__)

LOCATION_SCHEME = "yeelight://"
DEFAULT_TIMEOUT = 3.0
COMMAND_ID = 1
READ_CHUNK = 4096
MAX_LINE = 64 * 1024


class CommandError(BaseModel):
    """Error object returned by a device."""

    code: int
    message: str = ""


class CommandRequest(BaseModel):
    """A command sent to a device."""

    id: int = COMMAND_ID
    method: str
    params: list[Any] = Field(default_factory=list)

    def to_wire(self) -> bytes:
        return self.model_dump_json().encode("utf-8") + b"\r\n"


class CommandResponse(BaseModel):
    """A device's reply to one command."""

    id: Optional[int] = None
    result: Optional[list[Any]] = None
    error: Optional[CommandError] = None


def parse_location(location: str) -> tuple[str, int]:
    """Split a device location into host and port.

    Args:
        location: Location string, e.g. "yeelight://192.168.1.20:55443"

    Returns:
        (host, port) tuple

    Raises:
        InvalidLocationError: If the scheme prefix or host:port part is malformed
    """
    if not isinstance(location, str) or not location.startswith(LOCATION_SCHEME):
        raise InvalidLocationError(location, f"expected '{LOCATION_SCHEME}' prefix")

    address = location[len(LOCATION_SCHEME):]
    host, sep, port_text = address.rpartition(":")
    if not sep or not host:
        raise InvalidLocationError(location, "expected host:port")
    try:
        port = int(port_text)
    except ValueError:
        raise InvalidLocationError(location, f"invalid port {port_text!r}") from None
    if not 0 < port < 65536:
        raise InvalidLocationError(location, f"port {port} out of range")

    host = host.strip("[]")
    try:
        host.encode("idna")
    except UnicodeError:
        raise InvalidLocationError(location, f"invalid host {host!r}") from None

    return host, port


def _connect(location: str, timeout: float) -> socket.socket:
    host, port = parse_location(location)
    try:
        return socket.create_connection((host, port), timeout=timeout)
    except OSError as e:
        raise TransportError(f"Failed to connect to {host}:{port}: {e}") from e


def _is_notification(message: dict[str, Any]) -> bool:
    # Unsolicited state pushes carry a method and no id/result/error
    return "method" in message and not any(key in message for key in ("id", "result", "error"))


class _LineReader:
    """Reads LF-terminated lines from a socket against a fixed deadline."""

    def __init__(self, sock: socket.socket, deadline: float):
        self._sock = sock
        self._deadline = deadline
        self._buffer = b""

    def readline(self) -> bytes:
        while b"\n" not in self._buffer:
            remaining = self._deadline - time.monotonic()
            if remaining <= 0:
                raise TransportError("Timed out waiting for response")
            self._sock.settimeout(remaining)
            try:
                chunk = self._sock.recv(READ_CHUNK)
            except socket.timeout as e:
                raise TransportError("Timed out waiting for response") from e
            except OSError as e:
                raise TransportError(f"Failed to read response: {e}") from e
            if not chunk:
                raise TransportError("Connection closed before a response was received")
            self._buffer += chunk
            if len(self._buffer) > MAX_LINE:
                raise TransportError("Response line too long")

        line, _, self._buffer = self._buffer.partition(b"\n")
        return line


def _write(sock: socket.socket, request: CommandRequest, timeout: float) -> None:
    sock.settimeout(timeout)
    try:
        sock.sendall(request.to_wire())
    except OSError as e:
        raise TransportError(f"Failed to send command {request.method}: {e}") from e


def send_command(
    location: str,
    method: str,
    params: Optional[list[Any]] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[Any]:
    """Send one command and wait for its response.

    Args:
        location: Device location ("yeelight://host:port")
        method: Command method, e.g. "get_prop"
        params: Command parameters
        timeout: Connect timeout, and deadline for the write plus read

    Returns:
        The ``result`` array of the response

    Raises:
        InvalidLocationError: If the location is malformed
        TransportError: On connect, write or read failure, timeout, or an
            unparseable response
        DeviceProtocolError: If the device replied with an error object
    """
    request = CommandRequest(method=method, params=params or [])

    with _connect(location, timeout) as sock:
        deadline = time.monotonic() + timeout
        _write(sock, request, timeout)
        reader = _LineReader(sock, deadline)

        while True:
            line = reader.readline().strip()
            if not line:
                continue
            try:
                message = json.loads(line)
            except ValueError as e:
                raise TransportError(f"Failed to parse response: {e}") from e
            if not isinstance(message, dict):
                raise TransportError(f"Failed to parse response: not an object: {line!r}")
            if _is_notification(message):
                logger.debug(f"Skipping {message.get('method')} notification from {location}")
                continue
            break

    try:
        response = CommandResponse.model_validate(message)
    except ValueError as e:
        raise TransportError(f"Failed to parse response: {e}") from e

    if response.error is not None:
        raise DeviceProtocolError(response.error.code, response.error.message)

    return response.result or []


def send_command_no_response(
    location: str,
    method: str,
    params: Optional[list[Any]] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> None:
    """Send one command without reading any reply.

    Used for high-rate frame updates the device does not answer. Only
    connecting and writing are observed.

    Raises:
        InvalidLocationError: If the location is malformed
        TransportError: If connecting or writing fails
    """
    request = CommandRequest(method=method, params=params or [])

    with _connect(location, timeout) as sock:
        _write(sock, request, timeout)
