"""Interpretation of validated response payloads."""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import MalformedFrame


@dataclass
class MeasurementResponse:
    """Parsed ReadMeasure (0x01) response."""

    ppm: int
    raw: bytes

    def to_dict(self) -> dict:
        return {
            "ppm": self.ppm,
            "raw_hex": self.raw.hex(" ") if self.raw else "",
        }


def parse_measurement(payload: bytes) -> MeasurementResponse:
    """Decode a ReadMeasure payload.

    The first two bytes are the concentration, high byte first. Any bytes
    after them are sensor status and are kept only in ``raw``.
    """
    if len(payload) < 2:
        raise MalformedFrame(
            f"Measurement payload needs 2 bytes, got {len(payload)}"
        )
    high, low = payload[0], payload[1]
    return MeasurementResponse(ppm=high * 256 + low, raw=bytes(payload))
