"""Exception hierarchy for the Daly BMS driver.

Every failure is scoped to a single call. Frame-level errors are recovered
inside the dispatcher; the rest reach the caller.
"""

from __future__ import annotations


class DalyBMSError(Exception):
    """Base class for all driver errors."""


class TransportError(DalyBMSError):
    """Open, read, write or drain failed at the serial boundary."""


class ConnectionClosedError(TransportError):
    """I/O attempted on a connection that is not open."""


class EncodingError(DalyBMSError):
    """A request could not be encoded (e.g. extra payload over 8 bytes)."""


class FrameError(DalyBMSError):
    """An inbound frame failed validation and should be discarded."""


class ShortFrameError(FrameError):
    """Frame is not exactly 13 bytes."""


class ChecksumMismatchError(FrameError):
    """Additive checksum over bytes 0..11 does not match byte 12."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"checksum mismatch: computed 0x{expected:02X}, frame has 0x{actual:02X}"
        )
        self.expected = expected
        self.actual = actual


class CommandMismatchError(FrameError):
    """Reply carries a different command byte than the one requested."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"command mismatch: expected 0x{expected:02X}, got 0x{actual:02X}"
        )
        self.expected = expected
        self.actual = actual


class WriteError(DalyBMSError):
    """The transport accepted fewer bytes than the request frame holds."""


class NoResponseError(DalyBMSError):
    """An attempt finished without a single valid reply frame."""


class DecodeError(DalyBMSError):
    """A validated payload could not be interpreted as the requested measurement."""


class PrerequisiteMissingError(DalyBMSError):
    """A query needs the cell/sensor count, but no status has been read yet."""


class ExchangeFailedError(DalyBMSError):
    """All attempts for one command failed."""

    def __init__(self, command: int, attempts: int, last_error: Exception | None) -> None:
        super().__init__(
            f"command 0x{command:02X} failed after {attempts} attempt(s): {last_error}"
        )
        self.command = command
        self.attempts = attempts
        self.last_error = last_error
