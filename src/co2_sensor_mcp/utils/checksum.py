"""8-bit checksum used by the sensor's UART frames.

The checksum is the two's-complement negation of the byte-wise sum::

    checksum = (255 - (sum(data) % 256) + 1) % 256

A byte sum of 0 therefore yields 0x00, and a sum of 255 yields 0x01.
"""

from __future__ import annotations


def compute_checksum(data: bytes) -> int:
    """Return the checksum byte for ``data``."""
    return (-sum(data)) & 0xFF


def verify_checksum(data: bytes, checksum: int) -> bool:
    """Check a claimed checksum byte against ``data``."""
    return compute_checksum(data) == checksum
