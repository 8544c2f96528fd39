"""Tests for connection settings and address parsing."""

import pytest

from daly_bms_mcp.config import BMSSettings, parse_address
from daly_bms_mcp.protocol.framing import Address


@pytest.mark.parametrize("value,expected", [
    ("wired", Address.WIRED),
    ("RS485", Address.WIRED),
    ("bluetooth", Address.BLUETOOTH),
    (" BLE ", Address.BLUETOOTH),
    ("4", Address.WIRED),
    ("0x80", Address.BLUETOOTH),
    (4, Address.WIRED),
    (8, Address.BLUETOOTH),
    (0x40, Address.WIRED),
    (Address.BLUETOOTH, Address.BLUETOOTH),
])
def test_parse_address(value, expected):
    """Names, nibbles and byte values all resolve."""
    assert parse_address(value) is expected


@pytest.mark.parametrize("value", ["wifi", 5, 0x41, ""])
def test_parse_address_rejects_unknown(value):
    """Unknown variants raise ValueError."""
    with pytest.raises(ValueError):
        parse_address(value)


def test_defaults():
    """Defaults match the BMS factory serial settings."""
    settings = BMSSettings()
    assert settings.port == "/dev/ttyUSB0"
    assert settings.address is Address.WIRED
    assert settings.retries == 3
    assert settings.timeout == 0.1
    assert settings.baudrate == 9600


def test_retries_minimum():
    """Retry count is raised to at least one."""
    assert BMSSettings(retries=0).retries == 1


def test_from_env():
    """Environment variables override defaults."""
    settings = BMSSettings.from_env({
        "DALY_BMS_PORT": "/dev/ttyS1",
        "DALY_BMS_ADDRESS": "bluetooth",
        "DALY_BMS_RETRIES": "5",
        "DALY_BMS_TIMEOUT": "0.25",
    })
    assert settings.port == "/dev/ttyS1"
    assert settings.address is Address.BLUETOOTH
    assert settings.retries == 5
    assert settings.timeout == 0.25


def test_from_env_empty():
    """No variables means defaults."""
    assert BMSSettings.from_env({}) == BMSSettings()


@pytest.mark.parametrize("name,value", [
    ("DALY_BMS_ADDRESS", "zigbee"),
    ("DALY_BMS_RETRIES", "many"),
    ("DALY_BMS_TIMEOUT", "soon"),
])
def test_from_env_bad_values(name, value):
    """Bad values name the offending variable."""
    with pytest.raises(ValueError, match=name):
        BMSSettings.from_env({name: value})
