"""Sensor session: one serial connection, one request/response at a time.

Each call is a complete transaction. The session keeps only the open
connection and a fixed receive buffer between calls; it never retries.
"""

from __future__ import annotations

from typing import Protocol

from .errors import TransportError
from .protocol.commands import (
    Command,
    build_calibration,
    build_command,
    build_read_measure,
)
from .protocol.framing import parse_frame
from .protocol.parser import MeasurementResponse, parse_measurement
from .transport.serial_connection import READ_TIMEOUT_S, SerialConnection

RECEIVE_BUFFER_SIZE = 8  # ReadMeasure response: 16 05 01 DF1 DF2 DF3 DF4 CS


class Transport(Protocol):
    """What the session needs from a byte transport."""

    timeout: float

    def write_all(self, data: bytes) -> None: ...

    def read_into(self, buffer: bytearray) -> int: ...

    def close(self) -> None: ...


class SensorSession:
    """A request/response session with the CO2 sensor.

    Usage::

        with SensorSession.open("/dev/ttyUSB0") as sensor:
            ppm = sensor.read_measurement()
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._buffer = bytearray(RECEIVE_BUFFER_SIZE)

    @classmethod
    def open(cls, port: str, *, timeout: float = READ_TIMEOUT_S) -> SensorSession:
        """Open ``port`` at 9600 baud and return a session on it.

        Raises:
            PortUnavailable: If the device cannot be opened.
        """
        conn = SerialConnection(port, timeout=timeout)
        conn.open()
        return cls(conn)

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> SensorSession:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def transact(self, command: Command, params: bytes = b"") -> bytes:
        """Send one command and return the validated response payload.

        Raises:
            TransportError: Write failed or nothing came back in time.
            ProtocolError: The response checksum is wrong.
            MalformedFrame: The response length byte is inconsistent.
        """
        return self._exchange(build_command(command, params))

    def read_measurement(self) -> int:
        """Read the current CO2 concentration in ppm.

        Raises:
            TransportError: Write failed or nothing came back in time.
            ProtocolError: The response checksum is wrong.
            MalformedFrame: The response is inconsistent or too short.
        """
        return self.read_measurement_response().ppm

    def read_measurement_response(self) -> MeasurementResponse:
        """Like :meth:`read_measurement`, but keep the raw payload too."""
        return parse_measurement(self._exchange(build_read_measure()))

    def calibrate(self, ppm: int = 400) -> None:
        """Calibrate the sensor to ``ppm``, the concentration it is exposed to now."""
        self._exchange(build_calibration(ppm))

    def _exchange(self, frame: bytes) -> bytes:
        self._transport.write_all(frame)

        count = self._transport.read_into(self._buffer)
        if count == 0:
            raise TransportError(
                f"no response (timeout after {self._transport.timeout}s)"
            )

        # Tail bytes beyond count are stale from a previous exchange.
        return parse_frame(bytes(self._buffer[:count])).payload
