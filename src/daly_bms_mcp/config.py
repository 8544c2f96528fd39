"""Connection settings, optionally read from the environment.

Environment variables::

    DALY_BMS_PORT       serial device, e.g. /dev/ttyUSB0
    DALY_BMS_ADDRESS    wired | bluetooth (also 4/8 or 0x40/0x80)
    DALY_BMS_RETRIES    attempts per command, minimum 1
    DALY_BMS_TIMEOUT    read timeout per frame, seconds
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .protocol.dispatcher import DEFAULT_RETRIES
from .protocol.framing import Address
from .transport.serial_connection import DEFAULT_BAUDRATE, DEFAULT_PORT, DEFAULT_TIMEOUT

ADDRESS_ALIASES = {
    "wired": Address.WIRED,
    "rs485": Address.WIRED,
    "uart": Address.WIRED,
    "usb": Address.WIRED,
    "4": Address.WIRED,
    "0x40": Address.WIRED,
    "bluetooth": Address.BLUETOOTH,
    "ble": Address.BLUETOOTH,
    "8": Address.BLUETOOTH,
    "0x80": Address.BLUETOOTH,
}


def parse_address(value: str | int | Address) -> Address:
    """Resolve a user-supplied address variant.

    Accepts an :class:`Address`, its byte value, the nibble used in Daly's
    documentation (4 or 8), or a name such as ``"wired"``/``"bluetooth"``.
    """
    if isinstance(value, Address):
        return value
    if isinstance(value, int):
        if value in (4, 8):
            return Address(value << 4)
        try:
            return Address(value)
        except ValueError:
            raise ValueError(f"Unknown BMS address {value!r}") from None

    key = str(value).strip().lower()
    if key not in ADDRESS_ALIASES:
        raise ValueError(
            f"Unknown BMS address {value!r}. Valid: {sorted(ADDRESS_ALIASES)}"
        )
    return ADDRESS_ALIASES[key]


@dataclass
class BMSSettings:
    """Everything needed to open a session with the BMS."""

    port: str = DEFAULT_PORT
    address: Address = Address.WIRED
    retries: int = DEFAULT_RETRIES
    timeout: float = DEFAULT_TIMEOUT
    baudrate: int = DEFAULT_BAUDRATE

    def __post_init__(self) -> None:
        self.address = parse_address(self.address)
        self.retries = max(1, int(self.retries))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BMSSettings:
        env = os.environ if environ is None else environ
        settings = cls()

        if env.get("DALY_BMS_PORT"):
            settings.port = env["DALY_BMS_PORT"]
        if env.get("DALY_BMS_ADDRESS"):
            try:
                settings.address = parse_address(env["DALY_BMS_ADDRESS"])
            except ValueError as e:
                raise ValueError(f"DALY_BMS_ADDRESS: {e}") from e
        if env.get("DALY_BMS_RETRIES"):
            try:
                settings.retries = max(1, int(env["DALY_BMS_RETRIES"]))
            except ValueError as e:
                raise ValueError(
                    f"DALY_BMS_RETRIES must be an integer, got {env['DALY_BMS_RETRIES']!r}"
                ) from e
        if env.get("DALY_BMS_TIMEOUT"):
            try:
                settings.timeout = float(env["DALY_BMS_TIMEOUT"])
            except ValueError as e:
                raise ValueError(
                    f"DALY_BMS_TIMEOUT must be a number, got {env['DALY_BMS_TIMEOUT']!r}"
                ) from e

        return settings
