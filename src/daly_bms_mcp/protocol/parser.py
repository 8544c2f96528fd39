"""Payload decoders for BMS replies.

Every decoder takes the 8-byte payload of a validated frame. Multi-byte
fields are big-endian.
"""

from __future__ import annotations

import struct

from ..errors import DecodeError
from ..models.faults import fault_name
from ..models.measurements import (
    STATE_NAMES,
    CellVoltageRange,
    MosfetStatus,
    SOCData,
    StatusData,
    TemperatureRange,
)
from ..utils.checksum import fold_big_endian

CURRENT_OFFSET = 30000  # raw current is offset by 3000.0 A
TEMPERATURE_OFFSET = 40
BALANCING_MIN_BITS = 48

_STATUS = struct.Struct(">bb??bhx")
_SOC = struct.Struct(">hhhh")
_CELL_VOLTAGE_RANGE = struct.Struct(">hbhb2x")
_TEMPERATURE_RANGE = struct.Struct(">bbbb4x")
_MOSFET_STATUS = struct.Struct(">b??Bl")

MOSFET_MODES = {0: "stationary", 1: "charging"}


def _unpack(fmt: struct.Struct, payload: bytes, what: str) -> tuple:
    if len(payload) < fmt.size:
        raise DecodeError(
            f"{what} needs {fmt.size} payload bytes, got {len(payload)}"
        )
    return fmt.unpack(payload[: fmt.size])


def parse_status(payload: bytes) -> StatusData:
    """Parse a status (0x94) payload."""
    cells, sensors, charger, load, state_bits, cycles = _unpack(
        _STATUS, payload, "status"
    )
    states = {
        name: bool((state_bits >> bit) & 1) for bit, name in enumerate(STATE_NAMES)
    }
    return StatusData(
        cell_count=cells,
        sensor_count=sensors,
        charger_running=charger,
        load_running=load,
        states=states,
        cycle_count=cycles,
    )


def parse_soc(payload: bytes) -> SOCData:
    """Parse a state-of-charge (0x90) payload."""
    voltage, _, current, soc = _unpack(_SOC, payload, "soc")
    return SOCData(
        total_voltage=voltage / 10,
        current=(current - CURRENT_OFFSET) / 10,
        soc_percent=soc / 10,
    )


def parse_cell_voltage_range(payload: bytes) -> CellVoltageRange:
    """Parse a cell voltage range (0x91) payload. Voltages are in mV on the wire."""
    high_mv, high_cell, low_mv, low_cell = _unpack(
        _CELL_VOLTAGE_RANGE, payload, "cell voltage range"
    )
    return CellVoltageRange(
        highest_voltage=high_mv / 1000,
        highest_cell=high_cell,
        lowest_voltage=low_mv / 1000,
        lowest_cell=low_cell,
    )


def parse_temperature_range(payload: bytes) -> TemperatureRange:
    """Parse a temperature range (0x92) payload."""
    high, high_sensor, low, low_sensor = _unpack(
        _TEMPERATURE_RANGE, payload, "temperature range"
    )
    return TemperatureRange(
        highest_temperature=float(high - TEMPERATURE_OFFSET),
        highest_sensor=high_sensor,
        lowest_temperature=float(low - TEMPERATURE_OFFSET),
        lowest_sensor=low_sensor,
    )


def parse_mosfet_status(payload: bytes) -> MosfetStatus:
    """Parse a MOSFET status (0x93) payload."""
    mode, charging, discharging, heartbeat, capacity = _unpack(
        _MOSFET_STATUS, payload, "mosfet status"
    )
    return MosfetStatus(
        mode=MOSFET_MODES.get(mode, "discharging"),
        charging_mosfet=charging,
        discharging_mosfet=discharging,
        heartbeat=heartbeat,
        capacity_ah=capacity / 1000,
    )


def cell_voltages_from_raw(raw: dict[int, int]) -> dict[int, float]:
    """Convert reassembled millivolt readings to volts."""
    return {index: mv / 1000 for index, mv in raw.items()}


def temperatures_from_raw(raw: dict[int, int]) -> dict[int, float]:
    """Convert reassembled raw temperature bytes to °C."""
    return {index: float(value - TEMPERATURE_OFFSET) for index, value in raw.items()}


def parse_balancing_status(payload: bytes, cell_count: int) -> dict[int, bool]:
    """Parse a balancing status (0x97) payload.

    The payload is one big-endian integer written out as a binary string
    left-padded to at least 48 digits. Cell ``i`` (1-based) is balancing when
    the ``i``-th digit from the right is set.
    """
    bits = format(fold_big_endian(payload), "b").zfill(BALANCING_MIN_BITS)
    result: dict[int, bool] = {}
    for cell in range(1, cell_count + 1):
        position = len(bits) - cell
        if position < 0:
            break
        result[cell] = bits[position] == "1"
    return result


def parse_errors(payload: bytes) -> list[str]:
    """Parse a fault bitmap (0x98) payload into fault names.

    An all-zero payload means no faults. Set bits without a table entry come
    back as placeholder names instead of being dropped.
    """
    faults: list[str] = []
    for byte_index, value in enumerate(payload):
        if not value:
            continue
        for bit in range(8):
            if value & (1 << bit):
                faults.append(fault_name(byte_index, bit))
    return faults
