"""Request dispatcher: drive one command to completion over a transport.

One attempt is drain, write, then collect up to N reply frames. Attempts are
retried with a constant backoff; bus contention on the half-duplex link is
transient, so the delay does not grow.
"""

from __future__ import annotations

import logging
import time

from ..errors import (
    ExchangeFailedError,
    FrameError,
    NoResponseError,
    TransportError,
    WriteError,
)
from ..transport.base import Transport
from .framing import FRAME_SIZE, Address, build_frame, parse_frame

logger = logging.getLogger(__name__)

DEFAULT_RETRIES = 3
RETRY_BACKOFF = 0.2  # seconds between attempts


class RequestDispatcher:
    """Send commands and collect validated reply payloads.

    Args:
        transport: An open :class:`Transport`.
        address: Host address byte written into every request.
        retries: Total attempts per exchange; values below 1 become 1.
    """

    def __init__(
        self,
        transport: Transport,
        address: int = Address.WIRED,
        retries: int = DEFAULT_RETRIES,
    ) -> None:
        self._transport = transport
        self._address = address
        self._retries = max(1, retries)

    @property
    def address(self) -> int:
        return self._address

    @property
    def retries(self) -> int:
        return self._retries

    def send(
        self,
        command: int,
        extra: bytes = b"",
        expected_frames: int = 1,
        retries: int | None = None,
    ) -> list[bytes]:
        """Run one exchange and return the collected 8-byte payloads.

        The list holds between 1 and ``expected_frames`` payloads in
        reception order. Callers that need an exact count must check it.

        Args:
            command: Opcode to send.
            extra: Extra payload bytes (max 8).
            expected_frames: Number of reply frames to wait for.
            retries: Per-call override of the attempt count.

        Raises:
            EncodingError: If the request cannot be encoded. Not retried.
            ExchangeFailedError: If every attempt failed.
        """
        request = build_frame(command, extra, self._address)
        attempts = self._retries if retries is None else max(1, retries)
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                return self._attempt(command, request, expected_frames)
            except (TransportError, WriteError, NoResponseError) as e:
                last_error = e
                logger.warning(
                    "Attempt %d/%d for command 0x%02X failed: %s",
                    attempt, attempts, command, e,
                )
            if attempt < attempts:
                time.sleep(RETRY_BACKOFF)

        raise ExchangeFailedError(command, attempts, last_error) from last_error

    def _attempt(self, command: int, request: bytes, expected_frames: int) -> list[bytes]:
        try:
            self._transport.drain()
        except TransportError as e:
            logger.warning("Could not drain input before command 0x%02X: %s", command, e)

        written = self._transport.write(request)
        if written != len(request):
            raise WriteError(
                f"Short write for command 0x{command:02X}: "
                f"{written} of {len(request)} bytes"
            )

        payloads: list[bytes] = []
        for _ in range(expected_frames):
            try:
                data = self._transport.read(FRAME_SIZE)
            except TransportError as e:
                logger.debug("Read error for command 0x%02X: %s", command, e)
                break

            if not data:
                break
            if len(data) < FRAME_SIZE:
                logger.warning(
                    "Partial reply for command 0x%02X: %d of %d bytes",
                    command, len(data), FRAME_SIZE,
                )
                break

            try:
                payloads.append(parse_frame(data, command))
            except FrameError as e:
                logger.debug("Dropping frame %s: %s", data.hex(" "), e)

        if not payloads:
            raise NoResponseError(f"No valid reply frames for command 0x{command:02X}")
        return payloads
