"""Tests for the JSON-lines command protocol."""

import json
import time

import pytest

from cubik.core.protocol import (
    CommandRequest,
    parse_location,
    send_command,
    send_command_no_response,
)
from cubik.exceptions import (
    DeviceProtocolError,
    InvalidLocationError,
    TransportError,
    ValidationError,
)


class TestParseLocation:

    def test_valid(self):
        assert parse_location("yeelight://192.168.1.20:55443") == ("192.168.1.20", 55443)

    @pytest.mark.parametrize(
        "location",
        [
            "192.168.1.20:55443",
            "http://192.168.1.20:55443",
            "yeelight://192.168.1.20",
            "yeelight://:55443",
            "yeelight://192.168.1.20:port",
            "yeelight://192.168.1.20:70000",
            "yeelight://" + "a" * 64 + ".example:55443",
            "yeelight://a..b:55443",
            "",
        ],
    )
    def test_invalid(self, location):
        with pytest.raises(InvalidLocationError):
            parse_location(location)

    def test_invalid_location_is_validation_error(self):
        with pytest.raises(ValidationError):
            parse_location("nope")


def test_request_wire_format():
    wire = CommandRequest(method="set_bright", params=[50, "sudden", 0]).to_wire()

    assert wire.endswith(b"\r\n")
    assert json.loads(wire) == {"id": 1, "method": "set_bright", "params": [50, "sudden", 0]}


@pytest.mark.integration
class TestSendCommand:
    """Request/response exchanges against a local fake device."""

    def test_returns_result(self, device_server):
        device_server.reply = lambda req: [
            json.dumps({"id": req["id"], "result": ["on", "80"]}).encode() + b"\r\n"
        ]

        result = send_command(device_server.location, "get_prop", ["power", "bright"])

        assert result == ["on", "80"]
        assert device_server.raw[0].endswith(b"\r\n")
        assert device_server.requests[0] == {
            "id": 1,
            "method": "get_prop",
            "params": ["power", "bright"],
        }

    def test_device_error_is_not_transport_error(self, device_server):
        device_server.reply = lambda req: [
            json.dumps({"id": req["id"], "error": {"code": -1, "message": "unsupported method"}})
            .encode() + b"\r\n"
        ]

        with pytest.raises(DeviceProtocolError) as exc_info:
            send_command(device_server.location, "bogus", [])

        assert exc_info.value.code == -1
        assert exc_info.value.message == "unsupported method"
        assert not isinstance(exc_info.value, TransportError)

    def test_props_notification_is_skipped(self, device_server):
        device_server.reply = lambda req: [
            b'{"method": "props", "params": {"power": "on"}}\r\n',
            json.dumps({"id": req["id"], "result": ["ok"]}).encode() + b"\r\n",
        ]

        assert send_command(device_server.location, "toggle", []) == ["ok"]

    def test_timeout_is_transport_error(self, device_server):
        device_server.reply = lambda req: None

        start = time.monotonic()
        with pytest.raises(TransportError):
            send_command(device_server.location, "get_prop", ["power"], timeout=0.2)
        assert time.monotonic() - start < 1.0

    def test_connection_refused(self, closed_location):
        with pytest.raises(TransportError):
            send_command(closed_location, "get_prop", ["power"], timeout=0.5)

    def test_closed_without_reply(self, device_server):
        device_server.reply = lambda req: []

        with pytest.raises(TransportError):
            send_command(device_server.location, "toggle", [])

    def test_garbage_reply(self, device_server):
        device_server.reply = lambda req: [b"not json\r\n"]

        with pytest.raises(TransportError):
            send_command(device_server.location, "toggle", [])

    def test_invalid_location_fails_before_connecting(self, device_server):
        with pytest.raises(InvalidLocationError):
            send_command(f"127.0.0.1:{device_server.port}", "toggle", [])
        assert device_server.requests == []


@pytest.mark.integration
class TestSendCommandNoResponse:

    def test_returns_without_reading(self, device_server):
        device_server.reply = lambda req: None

        start = time.monotonic()
        send_command_no_response(device_server.location, "update_leds", ["AAAA"])
        assert time.monotonic() - start < 0.5

        requests = device_server.wait_for_requests(1)
        assert requests[0]["method"] == "update_leds"
        assert requests[0]["params"] == ["AAAA"]

    def test_connection_refused(self, closed_location):
        with pytest.raises(TransportError):
            send_command_no_response(closed_location, "update_leds", ["AAAA"], timeout=0.5)

    def test_invalid_location(self):
        with pytest.raises(InvalidLocationError):
            send_command_no_response("bad", "update_leds", ["AAAA"])

    def test_unencodable_host(self):
        with pytest.raises(InvalidLocationError):
            send_command_no_response("yeelight://" + "a" * 64 + ":55443", "update_leds", ["AAAA"])
