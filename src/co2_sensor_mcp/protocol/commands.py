"""Command opcodes and command frame builders.

Each command is a single opcode byte. The sensor echoes it back as the
first byte of the response's data segment.
"""

from __future__ import annotations

from enum import IntEnum

from .framing import pack


class Command(IntEnum):
    """Sensor operation opcodes."""

    READ_MEASURE = 0x01
    CALIBRATION = 0x03
    ABC_PARAMETER_CHECK = 0x0F
    ABC_PARAMETER_SET = 0x10


MAX_CALIBRATION_PPM = 0xFFFF


def build_command(command: Command, params: bytes = b"") -> bytes:
    """Build a command frame for ``command``."""
    return pack(command.value, params)


def build_read_measure() -> bytes:
    """Build a ReadMeasure command (0x01)."""
    return build_command(Command.READ_MEASURE)


def build_calibration(ppm: int = 400) -> bytes:
    """Build a Calibration command (0x03).

    Args:
        ppm: Reference concentration the sensor is currently exposed to,
            sent as two big-endian bytes.
    """
    if not 0 <= ppm <= MAX_CALIBRATION_PPM:
        raise ValueError(
            f"Calibration target must be 0-{MAX_CALIBRATION_PPM}, got {ppm}"
        )
    return build_command(Command.CALIBRATION, ppm.to_bytes(2, "big"))
