"""Command opcodes and payload builders for write commands.

Each command is one byte, echoed back in the reply frame's command field.
Queries carry an all-zero payload; write commands carry their argument in
the payload region.
"""

from __future__ import annotations

from enum import IntEnum

from ..errors import EncodingError


class Command(IntEnum):
    """Command opcodes."""

    RESTART = 0x00
    SET_SOC = 0x21
    SOC = 0x90
    CELL_VOLTAGE_RANGE = 0x91
    TEMPERATURE_RANGE = 0x92
    MOSFET_STATUS = 0x93
    STATUS = 0x94
    CELL_VOLTAGES = 0x95
    TEMPERATURES = 0x96
    BALANCING_STATUS = 0x97
    ERRORS = 0x98
    SET_DISCHARGE_MOSFET = 0xD9
    SET_CHARGE_MOSFET = 0xDA


SOC_RAW_MAX = 1000  # 100.0 % in tenths


def build_mosfet_payload(on: bool) -> bytes:
    """Payload for the charge/discharge MOSFET switch commands."""
    return b"\x01" if on else b"\x00"


def build_soc_payload(percent: float) -> bytes:
    """Payload for the set-SOC command.

    Six zero bytes followed by the SOC in tenths of a percent as a
    big-endian uint16, clamped to 0-1000.

    Args:
        percent: State of charge, 0-100.
    """
    try:
        raw = int(round(float(percent) * 10))
    except (TypeError, ValueError, OverflowError) as e:
        raise EncodingError(f"SOC must be a number, got {percent!r}") from e
    raw = max(0, min(SOC_RAW_MAX, raw))
    return b"\x00" * 6 + raw.to_bytes(2, "big")
