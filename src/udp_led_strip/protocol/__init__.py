"""LED strip wire protocol - datagram framing, codec and errors.

Public API:
- Framing constants and DatagramKind
- Codec functions (encode_poll_request, encode_set_color, decode_color, classify)
- Base and validation exceptions
"""

from udp_led_strip.protocol.codec import (
    classify,
    decode_color,
    encode_poll_request,
    encode_set_color,
)
from udp_led_strip.protocol.exceptions import (
    ColorValidationError,
    DatagramDecodeError,
    LedStripError,
    StripConfigError,
)
from udp_led_strip.protocol.packet_types import (
    COLOR_STATE_LENGTH,
    CONTROL_POLL_REQUEST,
    CONTROL_SET_COLOR,
    POLL_REQUEST_LENGTH,
    SET_COLOR_LENGTH,
    DatagramKind,
)

__all__ = [
    # Framing
    "COLOR_STATE_LENGTH",
    "CONTROL_POLL_REQUEST",
    "CONTROL_SET_COLOR",
    "POLL_REQUEST_LENGTH",
    "SET_COLOR_LENGTH",
    "DatagramKind",
    # Codec
    "classify",
    "decode_color",
    "encode_poll_request",
    "encode_set_color",
    # Errors
    "ColorValidationError",
    "DatagramDecodeError",
    "LedStripError",
    "StripConfigError",
]
