"""Shared fixtures: a scripted in-memory transport."""

from __future__ import annotations

import pytest

from daly_bms_mcp.errors import TransportError
from daly_bms_mcp.protocol import dispatcher
from daly_bms_mcp.transport.base import Transport
from daly_bms_mcp.utils.checksum import checksum


def reply_frame(command: int, payload: bytes, address: int = 0x01) -> bytes:
    """Build a BMS-side reply frame (address 0x01) with a valid checksum."""
    body = bytes([0xA5, address, command, 0x08]) + payload.ljust(8, b"\x00")
    return body + bytes([checksum(body)])


class FakeTransport(Transport):
    """Replays scripted exchanges.

    ``script`` is a list with one entry per expected write. Each entry is a
    dict with optional keys:

    - ``write``: an int to return from write, or an exception to raise
      (defaults to the full frame length)
    - ``reads``: list of bytes (or exceptions) returned by successive reads

    Reads beyond the scripted ones return ``b""`` (a timeout).
    """

    def __init__(self, script: list[dict] | None = None) -> None:
        self.script = list(script or [])
        self.writes: list[bytes] = []
        self.drains = 0
        self.read_calls = 0
        self._reads: list = []
        self._open = False

    @property
    def connected(self) -> bool:
        return self._open

    def open(self) -> None:
        self._open = True

    def close(self) -> None:
        self._open = False

    def write(self, data: bytes) -> int:
        self.writes.append(data)
        step = self.script.pop(0) if self.script else {}
        self._reads = list(step.get("reads", []))
        result = step.get("write", len(data))
        if isinstance(result, Exception):
            raise result
        return result

    def read(self, size: int) -> bytes:
        self.read_calls += 1
        if not self._reads:
            return b""
        item = self._reads.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def drain(self) -> None:
        self.drains += 1


class FailingDrainTransport(FakeTransport):
    def drain(self) -> None:
        self.drains += 1
        raise TransportError("drain failed")


@pytest.fixture
def no_sleep(monkeypatch):
    """Record backoff sleeps in the dispatcher instead of sleeping."""
    delays: list[float] = []
    monkeypatch.setattr(dispatcher.time, "sleep", delays.append)
    return delays
