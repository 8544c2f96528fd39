"""Driver and MCP server for Daly battery management systems."""

from .bms import DalyBMS
from .config import BMSSettings
from .errors import (
    DalyBMSError,
    ExchangeFailedError,
    PrerequisiteMissingError,
    TransportError,
)
from .protocol.framing import Address

__version__ = "0.1.0"
