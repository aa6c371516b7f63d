"""Serial transport to the sensor."""

from .serial_connection import SerialConnection
