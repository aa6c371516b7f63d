"""Tests for the sensor session's request/response cycle."""

from __future__ import annotations

import pytest

from co2_sensor_mcp.errors import (
    ChecksumMismatch,
    MalformedFrame,
    PortUnavailable,
    ProtocolError,
    TransportError,
)
from co2_sensor_mcp.protocol.commands import Command
from co2_sensor_mcp.session import RECEIVE_BUFFER_SIZE, SensorSession
from co2_sensor_mcp.utils.checksum import compute_checksum


def _response(data: bytes) -> bytes:
    head = bytes([0x16, len(data)]) + data
    return head + bytes([compute_checksum(head)])


class FakeTransport:
    """Hands back queued responses, one per read."""

    def __init__(self, *responses: bytes) -> None:
        self.timeout = 5.0
        self.responses = list(responses)
        self.written: list[bytes] = []
        self.closed = False

    def write_all(self, data: bytes) -> None:
        self.written.append(data)

    def read_into(self, buffer: bytearray) -> int:
        if not self.responses:
            return 0
        data = self.responses.pop(0)[: len(buffer)]
        buffer[: len(data)] = data
        return len(data)

    def close(self) -> None:
        self.closed = True


class FailingWriteTransport(FakeTransport):
    def write_all(self, data: bytes) -> None:
        raise TransportError("Short write: 2 of 4 bytes")


def test_read_measurement_800():
    transport = FakeTransport(bytes([0x16, 0x03, 0x01, 0x03, 0x20, 0xC3]))
    session = SensorSession(transport)
    assert session.read_measurement() == 800


def test_read_measurement_sends_read_measure_frame():
    transport = FakeTransport(_response(b"\x01\x03\x20"))
    SensorSession(transport).read_measurement()
    assert transport.written == [bytes([0x11, 0x01, 0x01, 0xED])]


def test_read_measurement_full_cm1106_response():
    """The 8-byte response carries two status bytes after the reading."""
    raw = _response(bytes([0x01, 0x02, 0x58, 0x00, 0x00]))
    assert len(raw) == RECEIVE_BUFFER_SIZE
    assert SensorSession(FakeTransport(raw)).read_measurement() == 600


def test_zero_byte_read_is_transport_error():
    session = SensorSession(FakeTransport())
    with pytest.raises(TransportError, match="no response"):
        session.read_measurement()


def test_write_failure_is_transport_error():
    session = SensorSession(FailingWriteTransport(_response(b"\x01\x03\x20")))
    with pytest.raises(TransportError):
        session.read_measurement()


def test_wrong_checksum_is_protocol_error():
    raw = bytearray(_response(b"\x01\x03\x20"))
    raw[-1] ^= 0xFF
    session = SensorSession(FakeTransport(bytes(raw)))
    with pytest.raises(ProtocolError, match="wrong crc"):
        session.read_measurement()


def test_truncated_response_is_malformed():
    """Length byte claims 5 data bytes but only 2 arrived."""
    head = bytes([0x16, 0x05, 0x01, 0x03])
    session = SensorSession(FakeTransport(head + bytes([compute_checksum(head)])))
    with pytest.raises(MalformedFrame):
        session.read_measurement()


def test_payload_too_short_is_malformed():
    session = SensorSession(FakeTransport(_response(b"\x01\x03")))
    with pytest.raises(MalformedFrame):
        session.read_measurement()


def test_stale_buffer_tail_is_ignored():
    """A short response after a long one must not pick up old tail bytes."""
    transport = FakeTransport(
        _response(bytes([0x01, 0x02, 0x58, 0x00, 0x00])),
        _response(b"\x01\x03\x20"),
    )
    session = SensorSession(transport)
    assert session.read_measurement() == 600
    assert session.read_measurement() == 800


def test_no_retry_after_failure():
    transport = FakeTransport(
        bytes([0x16, 0x03, 0x01, 0x03, 0x20, 0x00]),
        _response(b"\x01\x03\x20"),
    )
    session = SensorSession(transport)
    with pytest.raises(ChecksumMismatch):
        session.read_measurement()
    assert len(transport.written) == 1
    # The next call is a fresh transaction.
    assert session.read_measurement() == 800
    assert len(transport.written) == 2


def test_transact_returns_payload():
    transport = FakeTransport(_response(bytes([0x0F, 0x01, 0x07])))
    payload = SensorSession(transport).transact(Command.ABC_PARAMETER_CHECK)
    assert payload == bytes([0x01, 0x07])
    assert transport.written[0][2] == Command.ABC_PARAMETER_CHECK


def test_calibrate_sends_target():
    transport = FakeTransport(_response(b"\x03"))
    SensorSession(transport).calibrate(400)
    assert transport.written == [bytes([0x11, 0x03, 0x03, 0x01, 0x90, 0x58])]


def test_calibrate_bad_crc():
    transport = FakeTransport(bytes([0x16, 0x01, 0x03, 0x00]))
    with pytest.raises(ChecksumMismatch):
        SensorSession(transport).calibrate(400)


def test_context_manager_closes_transport():
    transport = FakeTransport()
    with SensorSession(transport):
        pass
    assert transport.closed


def test_open_missing_port():
    with pytest.raises(PortUnavailable):
        SensorSession.open("/dev/co2-sensor-does-not-exist")


def test_read_measurement_response_keeps_raw_payload():
    raw = _response(bytes([0x01, 0x02, 0x58, 0x00, 0x40]))
    transport = FakeTransport(raw)
    result = SensorSession(transport).read_measurement_response()
    assert result.ppm == 600
    assert result.raw == bytes([0x02, 0x58, 0x00, 0x40])
    assert transport.written == [bytes([0x11, 0x01, 0x01, 0xED])]
