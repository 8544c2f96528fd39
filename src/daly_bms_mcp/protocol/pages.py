"""Multi-frame page planning and reassembly.

Cell voltages and temperatures do not fit in one 8-byte payload, so the BMS
answers with several frames. Each payload starts with a 1-based page index
followed by 7 bytes of fixed-width signed items::

    cell voltages:  [page] [mV hi mV lo] [mV hi mV lo] [mV hi mV lo] [pad]
    temperatures:   [page] [t] [t] [t] [t] [t] [t] [t]

Pages are merged in the order they arrived. The embedded page index is only
checked for logging; the link gives no ordering guarantee and the driver
does not reorder.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .framing import PAYLOAD_SIZE, Address

logger = logging.getLogger(__name__)

PAGE_DATA_SIZE = PAYLOAD_SIZE - 1  # first byte is the page index


@dataclass(frozen=True)
class SeriesLayout:
    """How one paginated measurement is packed."""

    name: str
    item_width: int
    bridge_pages: int  # the Bluetooth bridge always sends this many pages

    @property
    def items_per_page(self) -> int:
        return PAGE_DATA_SIZE // self.item_width


CELL_VOLTAGES = SeriesLayout(name="cell voltages", item_width=2, bridge_pages=16)
TEMPERATURES = SeriesLayout(name="temperatures", item_width=1, bridge_pages=3)


def plan_page_count(
    item_total: int,
    items_per_page: int,
    address: int,
    bridge_pages: int,
) -> int:
    """Return how many reply frames to wait for.

    The wired link sends only the pages needed for ``item_total`` items.
    The Bluetooth bridge sends every page unconditionally.
    """
    if address == Address.BLUETOOTH:
        return bridge_pages
    return math.ceil(item_total / items_per_page)


def reassemble(
    payloads: list[bytes], item_width: int, item_count: int
) -> dict[int, int]:
    """Merge paged payloads into a mapping of 1-based item index to raw value.

    Stops as soon as ``item_count`` items are collected, even mid-page. If
    the pages run out first the shorter mapping is returned as-is.

    Args:
        payloads: 8-byte payloads in reception order.
        item_width: Bytes per item (2 for cell voltages, 1 for temperatures).
        item_count: Number of items wanted.
    """
    items: dict[int, int] = {}
    if item_count <= 0:
        return items

    for expected_page, payload in enumerate(payloads, start=1):
        if not payload:
            continue

        page = payload[0]
        if page != expected_page:
            logger.warning("Expected page %d, got page %d", expected_page, page)

        data = payload[1:]
        for offset in range(0, len(data) - item_width + 1, item_width):
            raw = int.from_bytes(data[offset : offset + item_width], "big", signed=True)
            items[len(items) + 1] = raw
            if len(items) == item_count:
                return items

    return items
