"""Data models for decoded BMS measurements and fault codes."""

from .measurements import (
    AllData,
    CellVoltageRange,
    MosfetStatus,
    SOCData,
    StatusData,
    TemperatureRange,
)
from .faults import FAULT_CODES, fault_name
