"""MCP server entry point for the CO2 sensor.

Exposes tools, resources, and prompts via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from mcp.server.fastmcp import FastMCP

from .errors import SensorError
from .protocol.commands import Command
from .session import SensorSession

logger = logging.getLogger(__name__)

DEFAULT_PORT = "/dev/ttyUSB0"
PORT_ENV_VAR = "CO2_SENSOR_PORT"

mcp = FastMCP(
    "co2-sensor",
    instructions="MCP server for a UART CO2 concentration sensor",
)

# Global session state
_session: SensorSession | None = None
_port: str | None = None


def _get_session() -> SensorSession:
    """Get the active sensor session, raising if not connected."""
    if _session is None:
        raise RuntimeError(
            "Not connected to sensor. Use the 'connect' tool first."
        )
    return _session


def _error(e: Exception) -> dict[str, Any]:
    logger.warning("%s: %s", type(e).__name__, e)
    return {"error": str(e), "kind": type(e).__name__}


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(port: str | None = None) -> dict[str, Any]:
    """Open the serial connection to the CO2 sensor.

    Args:
        port: Serial device path or pyserial URL. Defaults to the
              CO2_SENSOR_PORT environment variable, then /dev/ttyUSB0.
    """
    global _session, _port
    if _session is not None:
        return {"connected": True, "message": "Already connected", "port": _port}

    port = port or os.environ.get(PORT_ENV_VAR, DEFAULT_PORT)
    try:
        _session = SensorSession.open(port)
    except SensorError as e:
        return _error(e)

    _port = port
    return {"connected": True, "port": port}


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the serial connection to the sensor."""
    global _session, _port
    if _session is None:
        return {"disconnected": True}
    _session.close()
    _session = None
    _port = None
    return {"disconnected": True}


# ─── MEASUREMENT TOOLS ───────────────────────────────────────────────

@mcp.tool()
def read_co2(threshold: int | None = None) -> dict[str, Any]:
    """Take one CO2 reading.

    Args:
        threshold: Optional ppm limit. When given, the result reports
                   whether the reading is above it.
    """
    session = _get_session()
    try:
        measurement = session.read_measurement_response()
    except SensorError as e:
        return _error(e)

    result: dict[str, Any] = measurement.to_dict()
    if threshold is not None:
        result["threshold"] = threshold
        result["above_threshold"] = measurement.ppm > threshold
    return result


@mcp.tool()
def calibrate(ppm: int = 400) -> dict[str, Any]:
    """Calibrate the sensor's zero point.

    The sensor must sit in air of the given concentration (outdoor air is
    about 400 ppm) for several minutes before calling this.

    Args:
        ppm: Reference concentration (0-65535, default 400).
    """
    session = _get_session()
    try:
        session.calibrate(ppm)
    except (SensorError, ValueError) as e:
        return _error(e)
    return {"calibrated": True, "ppm": ppm}


# ─── RESOURCES ───────────────────────────────────────────────────────

@mcp.resource("co2://sensor/status")
def resource_sensor_status() -> str:
    """Connection status."""
    return json.dumps({"connected": _session is not None, "port": _port})


@mcp.resource("co2://protocol/commands")
def resource_protocol_commands() -> str:
    """The sensor's command opcodes."""
    commands = [
        {"name": c.name, "opcode": f"0x{c.value:02X}"} for c in Command
    ]
    return json.dumps({"commands": commands, "count": len(commands)})


# ─── PROMPTS ─────────────────────────────────────────────────────────

@mcp.prompt()
def ventilation_advice(threshold: int = 1000) -> str:
    """Read the room's CO2 level and suggest whether to ventilate.

    Args:
        threshold: ppm level above which ventilation is recommended.
    """
    return f"""Read the current CO2 concentration using the read_co2 tool
with threshold={threshold}.

Consider:
- Outdoor air is about 400 ppm
- Above {threshold} ppm, recommend opening windows or running ventilation
- Above 2000 ppm, flag the reading as urgent

If read_co2 returns an error, say so and suggest reconnecting."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
