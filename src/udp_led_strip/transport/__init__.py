"""UDP transport for LED strip fixtures."""

from .exceptions import ClientClosedError, LedStripTransportError, NotConnectedError, PollTimeoutError
from .types import ColorSink, ColorTransport
from .udp_transport import UdpTransport

__all__ = [
    "ClientClosedError",
    "ColorSink",
    "ColorTransport",
    "LedStripTransportError",
    "NotConnectedError",
    "PollTimeoutError",
    "UdpTransport",
]
