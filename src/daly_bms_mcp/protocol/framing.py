"""Fixed 13-byte frame builder and validator.

Frame layout::

    +-------+---------+---------+--------+------------------+----------+
    | Start | Address | Command | Length |     Payload      | Checksum |
    | 1 B   | 1 B     | 1 B     | 1 B    |  8 bytes         | 1 B      |
    +-------+---------+---------+--------+------------------+----------+

- Start: 0xA5
- Address: 0x40 on the wired (RS485/UART) link, 0x80 through the Bluetooth bridge
- Length: always 0x08
- Payload: command-specific, zero-padded to 8 bytes
- Checksum: sum of bytes 0..11, low 8 bits

Requests and replies share the same shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from ..errors import (
    ChecksumMismatchError,
    CommandMismatchError,
    EncodingError,
    ShortFrameError,
)
from ..utils.checksum import checksum

START_BYTE = 0xA5
PAYLOAD_SIZE = 8
FRAME_SIZE = 13  # start + address + command + length + payload + checksum


class Address(IntEnum):
    """Host address byte, selecting the link variant."""

    WIRED = 0x40
    BLUETOOTH = 0x80


@dataclass(frozen=True)
class Frame:
    """A validated frame."""

    address: int
    command: int
    payload: bytes

    def __repr__(self) -> str:
        return (
            f"Frame(address=0x{self.address:02X}, command=0x{self.command:02X}, "
            f"payload={self.payload.hex(' ')})"
        )


def build_frame(
    command: int, extra: bytes = b"", address: int = Address.WIRED
) -> bytes:
    """Build a 13-byte request frame.

    Args:
        command: Single-byte opcode.
        extra: Up to 8 payload bytes; shorter payloads are zero-padded.
        address: Host address byte (see :class:`Address`).

    Raises:
        EncodingError: If ``extra`` is longer than 8 bytes or ``command``
            does not fit in a byte.
    """
    if len(extra) > PAYLOAD_SIZE:
        raise EncodingError(
            f"Extra payload must be at most {PAYLOAD_SIZE} bytes, got {len(extra)}"
        )
    if not 0 <= command <= 0xFF:
        raise EncodingError(f"Command must be 0-255, got {command}")

    body = bytes([START_BYTE, address, command, PAYLOAD_SIZE]) + extra.ljust(
        PAYLOAD_SIZE, b"\x00"
    )
    return body + bytes([checksum(body)])


def decode_frame(data: bytes) -> Frame:
    """Validate length and checksum of a frame and split out its fields.

    Raises:
        ShortFrameError: If ``data`` is not exactly 13 bytes.
        ChecksumMismatchError: If the checksum byte is wrong.
    """
    if len(data) != FRAME_SIZE:
        raise ShortFrameError(f"Frame must be {FRAME_SIZE} bytes, got {len(data)}")

    computed = checksum(data[:12])
    if computed != data[12]:
        raise ChecksumMismatchError(computed, data[12])

    return Frame(address=data[1], command=data[2], payload=bytes(data[4:12]))


def parse_frame(data: bytes, expected_command: int) -> bytes:
    """Validate a reply frame and return its 8-byte payload.

    Checks run in order: length, checksum, command byte.

    Raises:
        ShortFrameError, ChecksumMismatchError, CommandMismatchError
    """
    frame = decode_frame(data)
    if frame.command != expected_command:
        raise CommandMismatchError(expected_command, frame.command)
    return frame.payload
