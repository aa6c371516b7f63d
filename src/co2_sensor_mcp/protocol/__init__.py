"""Protocol layer: frame packing, checksum validation, and response parsing."""

from .framing import Frame, pack, parse_frame, validate_and_extract
from .commands import Command, build_command
from .parser import MeasurementResponse, parse_measurement
