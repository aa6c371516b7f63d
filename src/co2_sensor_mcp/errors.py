"""Error taxonomy for the sensor protocol and serial session.

Every failure is raised to the caller. Nothing in the protocol or session
layers retries, logs, or guesses a value from a frame that failed validation.
"""

from __future__ import annotations


class SensorError(Exception):
    """Base class for all sensor errors."""


class PortUnavailable(SensorError, ConnectionError):
    """The serial device could not be opened."""


class TransportError(SensorError, IOError):
    """A write failed, or a read returned no bytes before the timeout."""


class ProtocolError(SensorError):
    """A well-formed frame failed validation."""


class ChecksumMismatch(ProtocolError):
    """The trailing checksum byte does not match the frame contents."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"wrong crc: expected 0x{expected:02X}, got 0x{actual:02X}"
        )
        self.expected = expected
        self.actual = actual


class MalformedFrame(SensorError, ValueError):
    """Declared length disagrees with the bytes read, or a payload is too short."""
