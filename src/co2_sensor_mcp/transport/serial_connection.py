"""Serial connection to the CO2 sensor.

Wraps ``pyserial`` behind the three operations the session needs: open by
name, write a whole frame, and read into a caller-owned buffer. Port names
may be device paths (``/dev/ttyUSB0``, ``COM3``) or pyserial URLs such as
``loop://``.
"""

from __future__ import annotations

import logging

import serial

from ..errors import PortUnavailable, TransportError

logger = logging.getLogger(__name__)

BAUD_RATE = 9600
READ_TIMEOUT_S = 5.0
INTER_BYTE_TIMEOUT_S = 0.1


class SerialConnection:
    """Manages the UART connection to the sensor.

    Usage::

        conn = SerialConnection("/dev/ttyUSB0")
        conn.open()
        conn.write_all(frame_bytes)
        count = conn.read_into(buffer)
        conn.close()
    """

    def __init__(
        self,
        port: str,
        baudrate: int = BAUD_RATE,
        timeout: float = READ_TIMEOUT_S,
    ) -> None:
        self._port = port
        self._baudrate = baudrate
        self._timeout = timeout
        self._serial: serial.SerialBase | None = None

    @property
    def port(self) -> str:
        return self._port

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def connected(self) -> bool:
        return self._serial is not None and self._serial.is_open

    def open(self) -> None:
        """Open the port at 8N1 with the configured baud rate and timeout.

        Raises:
            PortUnavailable: If the device is missing, busy, or not permitted.
        """
        try:
            self._serial = serial.serial_for_url(
                self._port,
                baudrate=self._baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self._timeout,
                inter_byte_timeout=INTER_BYTE_TIMEOUT_S,
            )
        except (serial.SerialException, OSError, ValueError) as e:
            raise PortUnavailable(
                f"Could not open serial port {self._port!r}: {e}"
            ) from e

        logger.info("Opened %s at %d baud", self._port, self._baudrate)

    def close(self) -> None:
        """Close the port."""
        if self._serial is None:
            return

        try:
            self._serial.close()
        except (serial.SerialException, OSError) as e:
            logger.warning("Error closing %s: %s", self._port, e)
        finally:
            self._serial = None
            logger.info("Closed %s", self._port)

    def write_all(self, data: bytes) -> None:
        """Write every byte of ``data`` to the port.

        Raises:
            TransportError: If not connected, the write fails, or only part
                of ``data`` was accepted.
        """
        port = self._require_open()
        logger.debug("TX %s", data.hex(" "))
        try:
            written = port.write(data)
            port.flush()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Write to {self._port!r} failed: {e}") from e

        if written is not None and written != len(data):
            raise TransportError(
                f"Short write to {self._port!r}: {written} of {len(data)} bytes"
            )

    def read_into(self, buffer: bytearray) -> int:
        """Read up to ``len(buffer)`` bytes into ``buffer``.

        Blocks until the buffer is full, the line goes quiet after the first
        byte, or the read timeout expires.

        Returns:
            Number of bytes read. Bytes past this count are left untouched.

        Raises:
            TransportError: If not connected or the read fails.
        """
        port = self._require_open()
        try:
            count = port.readinto(buffer)
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Read from {self._port!r} failed: {e}") from e

        logger.debug("RX %s", bytes(buffer[:count]).hex(" ") or "(nothing)")
        return count

    def _require_open(self) -> serial.SerialBase:
        if self._serial is None or not self._serial.is_open:
            raise TransportError(f"Serial port {self._port!r} is not open")
        return self._serial
