"""Serial connection to a Daly BMS.

The BMS speaks 9600 baud, 8 data bits, no parity, one stop bit on both the
RS485/UART adapter and the Bluetooth bridge. pyserial's ``timeout`` bounds
every read slot.
"""

from __future__ import annotations

import logging

import serial

try:
    import termios
except ImportError:  # Windows
    termios = None

from ..errors import ConnectionClosedError, TransportError
from .base import Transport

logger = logging.getLogger(__name__)

DEFAULT_PORT = "/dev/ttyUSB0"
DEFAULT_BAUDRATE = 9600
DEFAULT_TIMEOUT = 0.1  # seconds per read slot

# pyserial lets OS errors through on POSIX: reset_input_buffer() and flush()
# call tcflush/tcdrain directly, which raise termios.error.
_IO_ERRORS: tuple[type[BaseException], ...] = (serial.SerialException, OSError)
if termios is not None:
    _IO_ERRORS += (termios.error,)


class SerialConnection(Transport):
    """Manages the serial link to the BMS.

    Usage::

        conn = SerialConnection("/dev/ttyUSB0")
        conn.open()
        conn.write(frame_bytes)
        reply = conn.read(13)
        conn.close()
    """

    def __init__(
        self,
        port: str = DEFAULT_PORT,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._port = port
        self._baudrate = baudrate
        self._timeout = timeout
        self._serial: serial.Serial | None = None

    @property
    def connected(self) -> bool:
        return self._serial is not None and self._serial.is_open

    def open(self) -> None:
        """Open the serial port.

        Raises:
            TransportError: If the port cannot be opened.
        """
        if self.connected:
            return

        try:
            self._serial = serial.Serial(
                port=self._port,
                baudrate=self._baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self._timeout,
                write_timeout=self._timeout * 10,
            )
        except (serial.SerialException, OSError, ValueError) as e:
            raise TransportError(f"Could not open serial port {self._port}: {e}") from e

        logger.info("Opened %s at %d baud", self._port, self._baudrate)

    def close(self) -> None:
        """Close the serial port."""
        if self._serial is None:
            return

        try:
            self._serial.close()
        except _IO_ERRORS as e:
            logger.warning("Error closing %s: %s", self._port, e)
        finally:
            self._serial = None
            logger.info("Closed %s", self._port)

    def _require_open(self) -> serial.Serial:
        if not self.connected:
            raise ConnectionClosedError(f"Serial port {self._port} is not open")
        return self._serial

    def write(self, data: bytes) -> int:
        port = self._require_open()
        try:
            written = port.write(data)
            port.flush()
        except _IO_ERRORS as e:
            raise TransportError(f"Write to {self._port} failed: {e}") from e
        logger.debug("TX %s", data.hex(" "))
        return written if written is not None else 0

    def read(self, size: int) -> bytes:
        port = self._require_open()
        try:
            data = port.read(size)
        except _IO_ERRORS as e:
            raise TransportError(f"Read from {self._port} failed: {e}") from e
        if data:
            logger.debug("RX %s", data.hex(" "))
        return bytes(data)

    def drain(self) -> None:
        port = self._require_open()
        try:
            port.reset_input_buffer()
        except _IO_ERRORS as e:
            raise TransportError(f"Drain of {self._port} failed: {e}") from e
