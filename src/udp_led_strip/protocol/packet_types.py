"""Datagram kinds and framing constants.

Framing is fixed by length, there is no version field:

- client -> fixture poll request: ``FF`` (1 byte)
- client -> fixture set color:    ``00 RR GG BB`` (4 bytes)
- fixture -> client state:        ``RR GG BB`` (3 bytes, reply or broadcast)
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

CONTROL_SET_COLOR: Final = 0x00
CONTROL_POLL_REQUEST: Final = 0xFF

POLL_REQUEST_LENGTH: Final = 1
SET_COLOR_LENGTH: Final = 4
COLOR_STATE_LENGTH: Final = 3


class DatagramKind(StrEnum):
    """What a datagram is, judged from its length and control byte."""

    POLL_REQUEST = "poll_request"
    SET_COLOR = "set_color"
    COLOR_STATE = "color_state"
    UNKNOWN = "unknown"
