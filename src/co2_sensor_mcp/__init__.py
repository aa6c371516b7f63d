"""MCP server and UART protocol driver for a CO2 concentration sensor."""

__version__ = "0.1.0"

from .errors import (
    SensorError,
    PortUnavailable,
    TransportError,
    ProtocolError,
    ChecksumMismatch,
    MalformedFrame,
)
from .session import SensorSession
