"""Tests for page planning and reassembly of paginated replies."""

import logging

from daly_bms_mcp.protocol.framing import Address
from daly_bms_mcp.protocol.pages import (
    CELL_VOLTAGES,
    TEMPERATURES,
    plan_page_count,
    reassemble,
)


def _voltage_page(index: int, *items: int) -> bytes:
    data = b"".join(v.to_bytes(2, "big", signed=True) for v in items)
    return (bytes([index]) + data).ljust(8, b"\x00")


def _temperature_page(index: int, *items: int) -> bytes:
    data = bytes(v & 0xFF for v in items)
    return (bytes([index]) + data).ljust(8, b"\x00")


def test_layouts():
    """Three 2-byte cells or seven 1-byte temperatures fit a page."""
    assert CELL_VOLTAGES.items_per_page == 3
    assert TEMPERATURES.items_per_page == 7
    assert CELL_VOLTAGES.bridge_pages == 16
    assert TEMPERATURES.bridge_pages == 3


def test_reassemble_stops_mid_page():
    """Five items from two 3-item pages stops before the sixth."""
    pages = [_voltage_page(1, 10, 20, 30), _voltage_page(2, 40, 50, 60)]
    assert reassemble(pages, 2, 5) == {1: 10, 2: 20, 3: 30, 4: 40, 5: 50}


def test_reassemble_ignores_extra_pages():
    """Pages after the item count is reached are not read."""
    pages = [_voltage_page(1, 1, 2, 3), _voltage_page(2, 4, 5, 6)]
    assert reassemble(pages, 2, 3) == {1: 1, 2: 2, 3: 3}


def test_reassemble_short_result():
    """Running out of pages returns what was collected, not an error."""
    pages = [_voltage_page(1, 3300, 3301, 3302)]
    result = reassemble(pages, 2, 8)
    assert result == {1: 3300, 2: 3301, 3: 3302}


def test_reassemble_empty_input():
    """No pages, no items."""
    assert reassemble([], 2, 4) == {}


def test_reassemble_signed_items():
    """Items are signed big-endian integers."""
    assert reassemble([_voltage_page(1, -1, 3)], 2, 2) == {1: -1, 2: 3}
    assert reassemble([_temperature_page(1, -20, 65)], 1, 2) == {1: -20, 2: 65}


def test_reassemble_temperatures_use_all_seven_bytes():
    """Single-byte items fill the whole page before moving on."""
    pages = [
        _temperature_page(1, 61, 62, 63, 64, 65, 66, 67),
        _temperature_page(2, 68, 69),
    ]
    result = reassemble(pages, 1, 9)
    assert list(result) == list(range(1, 10))
    assert result[7] == 67
    assert result[9] == 69


def test_reassemble_keeps_reception_order(caplog):
    """Out-of-order pages are logged but not reordered."""
    pages = [_voltage_page(2, 40, 50, 60), _voltage_page(1, 10, 20, 30)]
    with caplog.at_level(logging.WARNING, logger="daly_bms_mcp.protocol.pages"):
        result = reassemble(pages, 2, 6)

    assert result == {1: 40, 2: 50, 3: 60, 4: 10, 5: 20, 6: 30}
    assert "Expected page 1, got page 2" in caplog.text


def test_plan_page_count_wired():
    """Wired links ask for just enough pages."""
    assert plan_page_count(16, 3, Address.WIRED, 16) == 6
    assert plan_page_count(15, 3, Address.WIRED, 16) == 5
    assert plan_page_count(4, 7, Address.WIRED, 3) == 1
    assert plan_page_count(8, 7, Address.WIRED, 3) == 2
    assert plan_page_count(0, 3, Address.WIRED, 16) == 0


def test_plan_page_count_bluetooth_is_fixed():
    """The Bluetooth bridge always sends its fixed page count."""
    assert plan_page_count(4, 3, Address.BLUETOOTH, 16) == 16
    assert plan_page_count(48, 3, Address.BLUETOOTH, 16) == 16
    assert plan_page_count(2, 7, Address.BLUETOOTH, 3) == 3
