"""Fault bitmap table for the errors command (0x98).

``FAULT_CODES[byte][bit]`` names the condition signalled by that bit of the
8-byte payload. Bytes and bits with no entry are reported with a placeholder
name built by :func:`unknown_fault_name`.
"""

from __future__ import annotations

FAULT_CODES: dict[int, list[str]] = {
    0: [
        "cell_over_voltage_level_1",
        "cell_over_voltage_level_2",
        "cell_under_voltage_level_1",
        "cell_under_voltage_level_2",
        "pack_over_voltage_level_1",
        "pack_over_voltage_level_2",
        "pack_under_voltage_level_1",
        "pack_under_voltage_level_2",
    ],
    1: [
        "charge_temperature_high_level_1",
        "charge_temperature_high_level_2",
        "charge_temperature_low_level_1",
        "charge_temperature_low_level_2",
        "discharge_temperature_high_level_1",
        "discharge_temperature_high_level_2",
        "discharge_temperature_low_level_1",
        "discharge_temperature_low_level_2",
    ],
    2: [
        "charge_over_current_level_1",
        "charge_over_current_level_2",
        "discharge_over_current_level_1",
        "discharge_over_current_level_2",
        "soc_high_level_1",
        "soc_high_level_2",
        "soc_low_level_1",
        "soc_low_level_2",
    ],
    3: [
        "cell_voltage_difference_level_1",
        "cell_voltage_difference_level_2",
        "temperature_difference_level_1",
        "temperature_difference_level_2",
    ],
    4: [
        "charge_mosfet_temperature_high",
        "discharge_mosfet_temperature_high",
        "charge_mosfet_temperature_sensor_fault",
        "discharge_mosfet_temperature_sensor_fault",
        "charge_mosfet_adhesion_fault",
        "discharge_mosfet_adhesion_fault",
        "charge_mosfet_open_circuit_fault",
        "discharge_mosfet_open_circuit_fault",
    ],
    5: [
        "afe_acquisition_chip_fault",
        "cell_voltage_acquisition_dropped",
        "cell_temperature_sensor_fault",
        "eeprom_storage_fault",
        "rtc_clock_fault",
        "precharge_failure",
        "vehicle_communication_fault",
        "internal_communication_fault",
    ],
    6: [
        "current_module_fault",
        "pack_voltage_detection_fault",
        "short_circuit_protection_fault",
        "low_voltage_charging_forbidden",
    ],
}


def unknown_fault_name(byte_index: int, bit: int) -> str:
    return f"unknown_fault_byte{byte_index}_bit{bit}"


def fault_name(byte_index: int, bit: int) -> str:
    """Return the table name for a bit, or a placeholder if it has none."""
    names = FAULT_CODES.get(byte_index, [])
    if bit < len(names):
        return names[bit]
    return unknown_fault_name(byte_index, bit)
