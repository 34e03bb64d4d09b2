"""Device discovery over SSDP-style UDP multicast."""

import logging
import socket
from typing import Optional

from cubik.exceptions import TransportError
from cubik.models.device import DeviceRecord

logger = logging.getLogger(__name__)

MULTICAST_GROUP = "239.255.255.250"
DISCOVERY_PORT = 1982
DISCOVERY_TIMEOUT = 3.0
RECV_BUFFER = 2048
TARGET_MODEL = "CubeLite"
SEARCH_MESSAGE = (
    "M-SEARCH * HTTP/1.1\r\n"
    f"HOST: {MULTICAST_GROUP}:{DISCOVERY_PORT}\r\n"
    'MAN: "ssdp:discover"\r\n'
    "ST: wifi_bulb\r\n"
    "\r\n"
).encode("ascii")

_FIELDS = {
    "location",
    "id",
    "model",
    "fw_ver",
    "power",
    "bright",
    "color_mode",
    "ct",
    "rgb",
    "hue",
    "sat",
    "name",
}


def parse_device_info(response: str) -> DeviceRecord:
    """Parse one discovery reply.

    The reply is a block of ``Header: value`` lines. Lines without a colon
    (such as the status line) and unknown headers are ignored.

    Args:
        response: Reply text

    Returns:
        DeviceRecord with whichever fields were present
    """
    fields: dict[str, object] = {}
    for line in response.splitlines():
        header, sep, value = line.partition(":")
        if not sep:
            continue
        header = header.strip().lower()
        value = value.strip()
        if header in _FIELDS:
            fields[header] = value
        elif header == "support":
            fields["support"] = tuple(value.split())

    fields.setdefault("location", "")
    return DeviceRecord(**fields)


def _open_socket(timeout: float) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, 2)
    sock.settimeout(timeout)
    return sock


def _collect(sock: socket.socket) -> dict[str, DeviceRecord]:
    discovered: dict[str, DeviceRecord] = {}

    while True:
        try:
            data, addr = sock.recvfrom(RECV_BUFFER)
        except socket.timeout:
            break
        except OSError as e:
            logger.warning(f"Discovery read failed, stopping collection: {e}")
            break

        try:
            device = parse_device_info(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            logger.debug(f"Dropping malformed discovery reply from {addr[0]}: {e}")
            continue

        if not device.location:
            logger.debug(f"Dropping discovery reply without location from {addr[0]}")
            continue

        if device.location not in discovered:
            logger.debug(f"Discovered {device.model or 'unknown'} device at {device.location}")
            discovered[device.location] = device

    return discovered


def discover_devices(
    timeout: float = DISCOVERY_TIMEOUT,
    model: Optional[str] = TARGET_MODEL,
) -> list[DeviceRecord]:
    """Discover devices on the local network.

    Sends one multicast search and collects replies until no reply has
    arrived for ``timeout`` seconds. Devices answer several times to survive
    packet loss; only the first reply per location is kept.

    Args:
        timeout: Seconds to wait after the last reply
        model: Only return devices of this model (None returns all)

    Returns:
        Discovered devices, in the order they first replied

    Raises:
        TransportError: If the socket cannot be created or the search sent
    """
    try:
        sock = _open_socket(timeout)
    except OSError as e:
        raise TransportError(f"Error creating UDP socket: {e}") from e

    with sock:
        try:
            sock.sendto(SEARCH_MESSAGE, (MULTICAST_GROUP, DISCOVERY_PORT))
        except OSError as e:
            raise TransportError(f"Error sending search request: {e}") from e
        logger.debug(f"Sent discovery search to {MULTICAST_GROUP}:{DISCOVERY_PORT}")

        discovered = _collect(sock)

    devices = [
        device for device in discovered.values()
        if model is None or device.model == model
    ]
    logger.info(f"Discovery found {len(devices)} device(s), {len(discovered)} responded")
    return devices
