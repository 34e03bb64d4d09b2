"""Pytest fixtures for tests."""

import json
import socket
import socketserver
import threading
import time
from typing import Callable, Optional

import pytest

from cubik.exceptions import TransportError

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
BLACK = (0, 0, 0)


def ok_reply(request: dict) -> list[bytes]:
    return [json.dumps({"id": request["id"], "result": ["ok"]}).encode() + b"\r\n"]


class FakeDeviceServer:
    """Local TCP server speaking the device's JSON-lines protocol.

    ``reply`` maps each received request to the raw lines sent back. Returning
    None keeps the connection open without answering for ``hold`` seconds.
    """

    def __init__(self):
        self.requests: list[dict] = []
        self.raw: list[bytes] = []
        self.reply: Callable[[dict], Optional[list[bytes]]] = ok_reply
        self.hold = 1.0
        self._cond = threading.Condition()

        fake = self

        class Handler(socketserver.StreamRequestHandler):
            def handle(self):
                line = self.rfile.readline()
                if not line:
                    return
                request = json.loads(line)
                with fake._cond:
                    fake.raw.append(line)
                    fake.requests.append(request)
                    fake._cond.notify_all()
                lines = fake.reply(request)
                if lines is None:
                    time.sleep(fake.hold)
                    return
                for out in lines:
                    self.wfile.write(out)
                self.wfile.flush()

        class Server(socketserver.ThreadingTCPServer):
            daemon_threads = True
            block_on_close = False
            allow_reuse_address = True

        self._server = Server(("127.0.0.1", 0), Handler)
        self.port = self._server.server_address[1]
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def location(self) -> str:
        return f"yeelight://127.0.0.1:{self.port}"

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()

    def wait_for_requests(self, count: int, timeout: float = 2.0) -> list[dict]:
        with self._cond:
            self._cond.wait_for(lambda: len(self.requests) >= count, timeout=timeout)
            return list(self.requests)


@pytest.fixture
def device_server():
    """A running fake device on localhost."""
    server = FakeDeviceServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def closed_location():
    """Location of a local port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"yeelight://127.0.0.1:{port}"


class FakeDevice:
    """Stand-in for cubik.core.device.Device used by scheduler tests."""

    def __init__(self, registry: "FakeDeviceRegistry", location: str):
        self.registry = registry
        self.location = location

    def activate_fx_mode(self) -> None:
        with self.registry.lock:
            self.registry.activations.append(self.location)
        if self.registry.activate_error is not None:
            raise self.registry.activate_error

    def update_leds(self, payload: str) -> None:
        if self.registry.send_delay:
            time.sleep(self.registry.send_delay)
        with self.registry.lock:
            if self.registry.failures_left > 0:
                self.registry.failures_left -= 1
                raise self.registry.send_error
            self.registry.sent.append((self.location, payload))


class FakeDeviceRegistry:
    """Records everything sent through FakeDevice instances."""

    def __init__(self):
        self.lock = threading.Lock()
        self.sent: list[tuple[str, str]] = []
        self.activations: list[str] = []
        self.activate_error: Optional[Exception] = None
        self.failures_left = 0
        self.send_error: Exception = TransportError("simulated send failure")
        self.send_delay = 0.0

    def factory(self, location: str) -> FakeDevice:
        return FakeDevice(self, location)

    def payloads(self, location: Optional[str] = None) -> list[str]:
        with self.lock:
            return [p for loc, p in self.sent if location is None or loc == location]


@pytest.fixture
def fake_devices():
    """Registry whose ``factory`` builds FakeDevice clients."""
    return FakeDeviceRegistry()
