"""Encode and decode LED strip datagrams."""

from __future__ import annotations

from typing import TYPE_CHECKING

from udp_led_strip.protocol.exceptions import DatagramDecodeError
from udp_led_strip.protocol.packet_types import (
    COLOR_STATE_LENGTH,
    CONTROL_POLL_REQUEST,
    CONTROL_SET_COLOR,
    POLL_REQUEST_LENGTH,
    SET_COLOR_LENGTH,
    DatagramKind,
)

if TYPE_CHECKING:
    from udp_led_strip.color import Color

_POLL_REQUEST = bytes((CONTROL_POLL_REQUEST,))


def encode_poll_request() -> bytes:
    """Return the one-byte poll request."""
    return _POLL_REQUEST


def encode_set_color(color: Color) -> bytes:
    """Return ``00 R G B`` for ``color``. Off is sent as ``00 00 00 00``."""
    return bytes((CONTROL_SET_COLOR, *color.rgb()))


def decode_color(data: bytes) -> Color:
    """Decode a fixture reply or broadcast.

    Args:
        data: Raw datagram payload

    Returns:
        The announced Color

    Raises:
        DatagramDecodeError: payload is not exactly three bytes

    """
    from udp_led_strip.color import Color

    if len(data) != COLOR_STATE_LENGTH:
        raise DatagramDecodeError(f"bad_length={len(data)}", data)
    return Color.from_bytes(data)


def classify(data: bytes) -> DatagramKind:
    """Tell what kind of datagram ``data`` is without decoding it."""
    length = len(data)
    if length == COLOR_STATE_LENGTH:
        return DatagramKind.COLOR_STATE
    if length == POLL_REQUEST_LENGTH and data[0] == CONTROL_POLL_REQUEST:
        return DatagramKind.POLL_REQUEST
    if length == SET_COLOR_LENGTH and data[0] == CONTROL_SET_COLOR:
        return DatagramKind.SET_COLOR
    return DatagramKind.UNKNOWN
