"""Typed results for the BMS query commands."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

STATE_NAMES = ["DI1", "DI2", "DI3", "DI4", "DO1", "DO2", "DO3", "DO4"]


@dataclass
class StatusData:
    """Status (0x94): pack layout and I/O states.

    ``cell_count`` and ``sensor_count`` size every paginated query.
    """

    cell_count: int
    sensor_count: int
    charger_running: bool
    load_running: bool
    states: dict[str, bool] = field(default_factory=dict)
    cycle_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SOCData:
    """State of charge (0x90). Negative current means charging."""

    total_voltage: float
    current: float
    soc_percent: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class CellVoltageRange:
    """Highest and lowest cell voltage (0x91)."""

    highest_voltage: float
    highest_cell: int
    lowest_voltage: float
    lowest_cell: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TemperatureRange:
    """Highest and lowest sensor temperature in °C (0x92)."""

    highest_temperature: float
    highest_sensor: int
    lowest_temperature: float
    lowest_sensor: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class MosfetStatus:
    """Charge/discharge MOSFET state (0x93)."""

    mode: str
    charging_mosfet: bool
    discharging_mosfet: bool
    heartbeat: int
    capacity_ah: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class AllData:
    """Everything the BMS reports, gathered in one pass."""

    soc: SOCData
    cell_voltage_range: CellVoltageRange
    temperature_range: TemperatureRange
    mosfet_status: MosfetStatus
    status: StatusData
    cell_voltages: dict[int, float]
    temperatures: dict[int, float]
    balancing_status: dict[int, bool]
    errors: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "soc": self.soc.to_dict(),
            "cell_voltage_range": self.cell_voltage_range.to_dict(),
            "temperature_range": self.temperature_range.to_dict(),
            "mosfet_status": self.mosfet_status.to_dict(),
            "status": self.status.to_dict(),
            "cell_voltages": dict(self.cell_voltages),
            "temperatures": dict(self.temperatures),
            "balancing_status": dict(self.balancing_status),
            "errors": list(self.errors),
        }
