"""Tests for the MCP tool layer."""

from __future__ import annotations

import json
import sys
from unittest.mock import MagicMock, patch

import pytest

from daly_bms_mcp.errors import ExchangeFailedError, NoResponseError, PrerequisiteMissingError
from daly_bms_mcp.models.measurements import StatusData


def _get_server_module():
    """Import server module with FastMCP mocked to avoid init issues."""
    mock_fastmcp_cls = MagicMock()
    mock_fastmcp_instance = MagicMock()
    # Make the @mcp.tool() decorator a no-op that returns the function unchanged
    mock_fastmcp_instance.tool.return_value = lambda fn: fn
    mock_fastmcp_instance.resource.return_value = lambda fn: fn
    mock_fastmcp_cls.return_value = mock_fastmcp_instance

    with patch("mcp.server.fastmcp.FastMCP", mock_fastmcp_cls):
        # Remove cached server module so it re-imports with our mock
        sys.modules.pop("daly_bms_mcp.server", None)
        import daly_bms_mcp.server as server_mod

    return server_mod


def _status() -> StatusData:
    return StatusData(
        cell_count=4,
        sensor_count=2,
        charger_running=False,
        load_running=True,
        states={},
        cycle_count=7,
    )


@pytest.fixture
def server():
    server_mod = _get_server_module()
    yield server_mod
    server_mod._bms = None


def test_tools_require_connection(server):
    """Calling a tool before connect raises."""
    with pytest.raises(RuntimeError, match="connect"):
        server.get_soc()


def test_connect_builds_session_from_arguments(server, monkeypatch):
    """Tool arguments override environment settings."""
    monkeypatch.setenv("DALY_BMS_PORT", "/dev/ttyS9")
    monkeypatch.setenv("DALY_BMS_RETRIES", "7")

    mock_bms = MagicMock()
    mock_bms.status = _status()
    with patch.object(server, "DalyBMS", return_value=mock_bms) as bms_cls:
        result = server.connect(port="/dev/ttyUSB1", address="bluetooth")

    settings = bms_cls.call_args.args[0]
    assert settings.port == "/dev/ttyUSB1"
    assert settings.address.name == "BLUETOOTH"
    assert settings.retries == 7
    mock_bms.connect.assert_called_once()
    assert result["connected"] is True
    assert result["address"] == "bluetooth"
    assert result["status"]["cell_count"] == 4


def test_connect_warns_without_status(server):
    """A failed initial status shows up as a warning."""
    mock_bms = MagicMock()
    mock_bms.status = None
    with patch.object(server, "DalyBMS", return_value=mock_bms):
        result = server.connect(port="/dev/ttyUSB0")
    assert result["connected"] is True
    assert "warning" in result


def test_connect_rejects_bad_address(server):
    """Unknown address names are reported, not raised."""
    result = server.connect(address="zigbee")
    assert "error" in result
    assert server._bms is None


def test_connect_reports_open_failure(server):
    """Transport errors on open are returned as tool errors."""
    from daly_bms_mcp.errors import TransportError

    mock_bms = MagicMock()
    mock_bms.connect.side_effect = TransportError("no port")
    with patch.object(server, "DalyBMS", return_value=mock_bms):
        result = server.connect(port="/dev/missing")
    assert result == {"connected": False, "error": "no port"}
    assert server._bms is None


def test_query_tool_returns_dict(server):
    """Query tools serialize measurement dataclasses."""
    mock_bms = MagicMock()
    mock_bms.get_status.return_value = _status()
    server._bms = mock_bms

    assert server.get_status()["cycle_count"] == 7


def test_driver_errors_become_error_results(server):
    """DalyBMSError subclasses are reported with their type."""
    mock_bms = MagicMock()
    mock_bms.get_cell_voltages.side_effect = PrerequisiteMissingError("status first")
    mock_bms.get_soc.side_effect = ExchangeFailedError(0x90, 3, NoResponseError("silent"))
    server._bms = mock_bms

    result = server.get_cell_voltages()
    assert result["error_type"] == "PrerequisiteMissingError"

    result = server.get_soc()
    assert result["error_type"] == "ExchangeFailedError"
    assert "0x90" in result["error"]


def test_cell_voltages_tool(server):
    """Cell voltages come back with a count."""
    mock_bms = MagicMock()
    mock_bms.get_cell_voltages.return_value = {1: 3.3, 2: 3.31}
    server._bms = mock_bms

    assert server.get_cell_voltages() == {"cell_voltages": {1: 3.3, 2: 3.31}, "count": 2}


def test_set_soc_validates_range(server):
    """SOC outside 0-100 is rejected before anything is sent."""
    mock_bms = MagicMock()
    server._bms = mock_bms

    assert "error" in server.set_soc(120)
    mock_bms.set_soc.assert_not_called()


def test_set_charge_mosfet_tool(server):
    """Write tools echo the raw reply as hex."""
    mock_bms = MagicMock()
    mock_bms.set_charge_mosfet.return_value = b"\x01" + b"\x00" * 7
    server._bms = mock_bms

    result = server.set_charge_mosfet(True)
    mock_bms.set_charge_mosfet.assert_called_once_with(True)
    assert result["reply"] == "01 00 00 00 00 00 00 00"


def test_disconnect(server):
    """Disconnect closes the session and forgets it."""
    mock_bms = MagicMock()
    server._bms = mock_bms

    assert server.disconnect() == {"disconnected": True}
    mock_bms.disconnect.assert_called_once()
    assert server._bms is None


def test_device_status_resource(server):
    """Status resource reports cached status when connected."""
    assert json.loads(server.resource_device_status()) == {"connected": False}

    mock_bms = MagicMock()
    mock_bms.status = _status()
    mock_bms.settings.port = "/dev/ttyUSB0"
    mock_bms.settings.address.name = "WIRED"
    server._bms = mock_bms

    data = json.loads(server.resource_device_status())
    assert data["connected"] is True
    assert data["address"] == "wired"
    assert data["status"]["sensor_count"] == 2


def test_fault_catalog_resource(server):
    """Fault catalog lists every table entry."""
    data = json.loads(server.resource_fault_catalog())
    assert data["count"] == len(data["faults"])
    assert data["faults"][0] == {"byte": 0, "bit": 0, "name": "cell_over_voltage_level_1"}
