"""Protocol layer: framing, checksum, dispatch, page reassembly and payload parsing."""

from .framing import Address, build_frame, parse_frame
from .commands import Command
from .dispatcher import RequestDispatcher
