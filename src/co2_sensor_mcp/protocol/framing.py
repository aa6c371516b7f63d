"""Frame builder and validator for the sensor's UART protocol.

Frame layout::

    +--------------+--------+----------------------------+----------+
    | Start marker | Length |        Data segment        | Checksum |
    | 1 byte       | 1 byte |  ``Length`` bytes          | 1 byte   |
    +--------------+--------+----------------------------+----------+

- Start marker: 0x11 for frames sent to the sensor, 0x16 for its responses
- Length: number of bytes in the data segment only
- Data segment: ``[opcode, params...]`` outbound, ``[opcode echo, params...]``
  inbound
- Checksum: 8-bit negated sum of every preceding byte
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import ChecksumMismatch, MalformedFrame
from ..utils.checksum import compute_checksum, verify_checksum

START_COMMAND = 0x11
START_RESPONSE = 0x16
MAX_DATA_LENGTH = 0xFF
MIN_FRAME_SIZE = 3  # start + length + checksum


@dataclass
class Frame:
    """A validated protocol frame."""

    start: int
    command: int
    payload: bytes

    @property
    def data(self) -> bytes:
        """The full data segment, opcode echo included."""
        return bytes([self.command]) + self.payload

    def __repr__(self) -> str:
        return (
            f"Frame(start=0x{self.start:02X}, command=0x{self.command:02X}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


def pack(command: int, params: bytes = b"") -> bytes:
    """Build an outbound command frame.

    Args:
        command: Single-byte opcode.
        params: Command-specific parameter bytes.

    Returns:
        ``[0x11, len, opcode, *params, checksum]``.
    """
    data = bytes([command]) + params
    if len(data) > MAX_DATA_LENGTH:
        raise ValueError(
            f"Data segment must be at most {MAX_DATA_LENGTH} bytes, got {len(data)}"
        )
    head = bytes([START_COMMAND, len(data)]) + data
    return head + bytes([compute_checksum(head)])


def parse_frame(raw: bytes) -> Frame:
    """Validate raw bytes read from the wire and split them into a Frame.

    The checksum is verified before the length byte or any data byte is
    looked at.

    Raises:
        MalformedFrame: Too few bytes, or the declared length does not match
            the bytes actually present.
        ChecksumMismatch: The trailing byte is not the checksum of the rest.
    """
    if len(raw) < MIN_FRAME_SIZE:
        raise MalformedFrame(
            f"Frame needs at least {MIN_FRAME_SIZE} bytes, got {len(raw)}"
        )

    body = bytes(raw[:-1])
    claimed = raw[-1]
    if not verify_checksum(body, claimed):
        raise ChecksumMismatch(expected=compute_checksum(body), actual=claimed)

    length = body[1]
    data = body[2:]
    if length != len(data):
        raise MalformedFrame(
            f"Declared data length {length} but {len(data)} bytes present"
        )
    if length < 1:
        raise MalformedFrame("Data segment is empty, no opcode echo")

    return Frame(start=body[0], command=data[0], payload=data[1:])


def validate_and_extract(raw: bytes) -> bytes:
    """Validate a response and return its parameters, opcode echo dropped."""
    return parse_frame(raw).payload
