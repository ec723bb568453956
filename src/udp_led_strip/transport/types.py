"""Structural types shared by the transport and the client.

The client only depends on the ColorTransport protocol, so tests (and other
hosts) can hand it any object with the same coroutine surface.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from udp_led_strip.color import Color

ColorSink = Callable[["Color"], None]


class ColorTransport(Protocol):
    """What LedStripClient needs from a transport."""

    def listen(self, on_color: ColorSink) -> None:
        """Register the sink receiving every accepted fixture color."""
        ...

    async def open(self) -> None:
        """Bind the socket and start receiving."""
        ...

    async def close(self) -> None:
        """Stop receiving and release the socket."""
        ...

    async def send_command(self, color: Color) -> None:
        """Fire-and-forget set-color datagram."""
        ...

    async def send_poll_request(self) -> None:
        """Fire-and-forget poll request datagram."""
        ...

    async def request_color(self, timeout: float | None = None) -> Color:
        """Poll and wait for the fixture's reply."""
        ...
