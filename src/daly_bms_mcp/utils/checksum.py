"""Numeric helpers shared by the frame codec and the bitmap decoders."""

from __future__ import annotations


def checksum(data: bytes) -> int:
    """Return the low 8 bits of the sum of ``data``.

    This is a plain additive checksum, not a CRC. The BMS firmware computes
    it the same way, so it must not be strengthened.
    """
    return sum(data) & 0xFF


def fold_big_endian(data: bytes) -> int:
    """Interpret ``data`` as one unsigned big-endian integer of any length."""
    return int.from_bytes(data, "big")
