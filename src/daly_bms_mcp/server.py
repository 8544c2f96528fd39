"""MCP server entry point for the Daly BMS.

Exposes every BMS query and write command as a tool via the Model Context
Protocol using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Callable

from mcp.server.fastmcp import FastMCP

from .bms import DalyBMS
from .config import BMSSettings, parse_address
from .errors import DalyBMSError
from .models.faults import FAULT_CODES

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "daly-bms",
    instructions="MCP server for Daly battery management systems over UART/RS485",
)

# Global connection state
_bms: DalyBMS | None = None


def _get_bms() -> DalyBMS:
    """Get the active BMS session, raising if not connected."""
    if _bms is None or not _bms.connected:
        raise RuntimeError(
            "Not connected to BMS. Use the 'connect' tool first."
        )
    return _bms


def _call(fn: Callable[[DalyBMS], Any]) -> dict[str, Any]:
    """Run ``fn`` against the session and turn driver errors into tool results."""
    bms = _get_bms()
    try:
        return fn(bms)
    except DalyBMSError as e:
        logger.warning("BMS call failed: %s", e)
        return {"error": str(e), "error_type": type(e).__name__}


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(
    port: str | None = None,
    address: str | None = None,
    retries: int | None = None,
) -> dict[str, Any]:
    """Open the serial link to the BMS and read its status.

    Unset arguments fall back to DALY_BMS_* environment variables, then to
    defaults (/dev/ttyUSB0, wired address, 3 retries).

    Args:
        port: Serial device, e.g. /dev/ttyUSB0.
        address: "wired" (RS485/UART) or "bluetooth" (wireless bridge).
        retries: Attempts per command (minimum 1).
    """
    global _bms
    if _bms is not None and _bms.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "port": _bms.settings.port,
        }

    settings = BMSSettings.from_env()
    if port is not None:
        settings.port = port
    if address is not None:
        try:
            settings.address = parse_address(address)
        except ValueError as e:
            return {"error": str(e)}
    if retries is not None:
        settings.retries = max(1, retries)

    bms = DalyBMS(settings)
    try:
        bms.connect()
    except DalyBMSError as e:
        return {"connected": False, "error": str(e)}
    _bms = bms

    result: dict[str, Any] = {
        "connected": True,
        "port": settings.port,
        "address": settings.address.name.lower(),
        "retries": settings.retries,
    }
    if bms.status is not None:
        result["status"] = bms.status.to_dict()
    else:
        result["warning"] = "Status query failed; call get_status before cell or temperature reads"
    return result


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the serial link and drop the cached status."""
    global _bms
    if _bms is None:
        return {"disconnected": True}
    _bms.disconnect()
    _bms = None
    return {"disconnected": True}


# ─── QUERY TOOLS ──────────────────────────────────────────────────────

@mcp.tool()
def get_status() -> dict[str, Any]:
    """Read cell count, sensor count, charger/load state, DI/DO states and cycle count."""
    return _call(lambda bms: bms.get_status().to_dict())


@mcp.tool()
def get_soc() -> dict[str, Any]:
    """Read total voltage, current (negative = charging) and state of charge."""
    return _call(lambda bms: bms.get_soc().to_dict())


@mcp.tool()
def get_cell_voltage_range() -> dict[str, Any]:
    """Read the highest and lowest cell voltage and which cells they are."""
    return _call(lambda bms: bms.get_cell_voltage_range().to_dict())


@mcp.tool()
def get_temperature_range() -> dict[str, Any]:
    """Read the highest and lowest temperature and which sensors they are."""
    return _call(lambda bms: bms.get_temperature_range().to_dict())


@mcp.tool()
def get_mosfet_status() -> dict[str, Any]:
    """Read charge/discharge mode, MOSFET states and remaining capacity."""
    return _call(lambda bms: bms.get_mosfet_status().to_dict())


@mcp.tool()
def get_cell_voltages() -> dict[str, Any]:
    """Read every cell voltage in volts.

    Requires a successful status query first (done automatically on connect).
    """
    def read(bms: DalyBMS) -> dict[str, Any]:
        voltages = bms.get_cell_voltages()
        return {"cell_voltages": voltages, "count": len(voltages)}
    return _call(read)


@mcp.tool()
def get_temperatures() -> dict[str, Any]:
    """Read every temperature sensor in °C.

    Requires a successful status query first (done automatically on connect).
    """
    def read(bms: DalyBMS) -> dict[str, Any]:
        temperatures = bms.get_temperatures()
        return {"temperatures": temperatures, "count": len(temperatures)}
    return _call(read)


@mcp.tool()
def get_balancing_status() -> dict[str, Any]:
    """Read which cells are balancing."""
    return _call(lambda bms: {"balancing": bms.get_balancing_status()})


@mcp.tool()
def get_errors() -> dict[str, Any]:
    """Read active fault conditions. An empty list means no faults."""
    return _call(lambda bms: {"errors": bms.get_errors()})


@mcp.tool()
def get_all_data() -> dict[str, Any]:
    """Run every query once and return the combined result."""
    return _call(lambda bms: bms.get_all_data().to_dict())


# ─── WRITE TOOLS ──────────────────────────────────────────────────────

@mcp.tool()
def set_charge_mosfet(on: bool) -> dict[str, Any]:
    """Switch the charge MOSFET.

    Args:
        on: True to allow charging, False to block it.
    """
    return _call(lambda bms: {
        "charge_mosfet": on,
        "reply": bms.set_charge_mosfet(on).hex(" "),
    })


@mcp.tool()
def set_discharge_mosfet(on: bool) -> dict[str, Any]:
    """Switch the discharge MOSFET.

    Args:
        on: True to allow discharging, False to block it.
    """
    return _call(lambda bms: {
        "discharge_mosfet": on,
        "reply": bms.set_discharge_mosfet(on).hex(" "),
    })


@mcp.tool()
def set_soc(percent: float) -> dict[str, Any]:
    """Set the BMS state of charge.

    Args:
        percent: State of charge (0-100).
    """
    if not 0 <= percent <= 100:
        return {"error": "SOC must be 0-100"}
    return _call(lambda bms: {
        "soc_percent": percent,
        "reply": bms.set_soc(percent).hex(" "),
    })


@mcp.tool()
def restart() -> dict[str, Any]:
    """Restart the BMS. Sent once, without retries."""
    return _call(lambda bms: {"restarted": True, "reply": bms.restart().hex(" ")})


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("daly://device/status")
def resource_device_status() -> str:
    """Connection state and the cached status from the last status query."""
    if _bms is None or not _bms.connected:
        return json.dumps({"connected": False})

    status = _bms.status
    return json.dumps({
        "connected": True,
        "port": _bms.settings.port,
        "address": _bms.settings.address.name.lower(),
        "status": status.to_dict() if status is not None else None,
    })


@mcp.resource("daly://catalog/faults")
def resource_fault_catalog() -> str:
    """Fault names by payload byte and bit."""
    faults = [
        {"byte": byte_index, "bit": bit, "name": name}
        for byte_index, names in sorted(FAULT_CODES.items())
        for bit, name in enumerate(names)
    ]
    return json.dumps({"faults": faults, "count": len(faults)})


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(
        level=os.environ.get("DALY_BMS_LOG_LEVEL", "INFO").upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
