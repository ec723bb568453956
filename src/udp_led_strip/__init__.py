"""Asyncio UDP client for networked RGB LED strips."""

__version__ = "0.3.0"

from udp_led_strip.client import ClientMode, ColorCallback, LedStripClient  # noqa: E402
from udp_led_strip.color import Color  # noqa: E402
from udp_led_strip.config import StripConfig  # noqa: E402
from udp_led_strip.protocol import ColorValidationError, LedStripError, StripConfigError  # noqa: E402
from udp_led_strip.transport import (  # noqa: E402
    ClientClosedError,
    LedStripTransportError,
    NotConnectedError,
    PollTimeoutError,
    UdpTransport,
)

__all__ = [
    "ClientClosedError",
    "ClientMode",
    "Color",
    "ColorCallback",
    "ColorValidationError",
    "LedStripClient",
    "LedStripError",
    "LedStripTransportError",
    "NotConnectedError",
    "PollTimeoutError",
    "StripConfig",
    "StripConfigError",
    "UdpTransport",
    "__version__",
]
