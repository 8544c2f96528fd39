"""Byte transports for talking to the BMS."""

from .base import Transport
from .serial_connection import SerialConnection
