"""Abstract byte-stream transport used by the request dispatcher."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Transport(ABC):
    """Blocking byte transport with a read timeout configured at open time.

    Implementations raise :class:`~daly_bms_mcp.errors.TransportError` on
    I/O failure. A read that times out is not a failure: it returns fewer
    bytes than requested, possibly none.
    """

    @property
    @abstractmethod
    def connected(self) -> bool:
        """Return True while the link is open."""

    @abstractmethod
    def open(self) -> None:
        """Open the link."""

    @abstractmethod
    def close(self) -> None:
        """Close the link. Closing twice is a no-op."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write ``data`` and return the number of bytes accepted."""

    @abstractmethod
    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes, returning early on timeout."""

    @abstractmethod
    def drain(self) -> None:
        """Discard any input already buffered on the link."""
