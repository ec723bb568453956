"""Test doubles for the LED strip client.

FakeTransport stands in for UdpTransport in client state-machine tests.
LoopbackFixture is a plain UDP socket on 127.0.0.1 playing the LED strip
for transport and end-to-end tests.
"""

from __future__ import annotations

import asyncio
import socket

from udp_led_strip.color import Color
from udp_led_strip.transport import ColorSink, LedStripTransportError, PollTimeoutError

FIXTURE_ADDRESS = ("127.0.0.1", 7026)


class FakeTransport:
    """In-memory ColorTransport.

    ``fixture_color`` is what the simulated strip answers polls with; None
    makes polls time out after their timeout.
    """

    def __init__(self) -> None:
        self.sink: ColorSink | None = None
        self.opened = False
        self.closed = False
        self.sent: list[Color] = []
        self.poll_requests = 0
        self.color_requests = 0
        self.fixture_color: Color | None = None
        self.send_error: OSError | None = None

    def listen(self, on_color: ColorSink) -> None:
        self.sink = on_color

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True

    async def send_command(self, color: Color) -> None:
        if self.send_error is not None:
            raise LedStripTransportError(f"send set_color failed: {self.send_error}", FIXTURE_ADDRESS)
        self.sent.append(color)

    async def send_poll_request(self) -> None:
        self.poll_requests += 1

    async def request_color(self, timeout: float | None = None) -> Color:
        self.color_requests += 1
        wait = 0.05 if timeout is None else timeout
        if self.fixture_color is None:
            await asyncio.sleep(wait)
            raise PollTimeoutError(wait, FIXTURE_ADDRESS)
        color = self.fixture_color
        self.emit(color)
        return color

    def emit(self, color: Color) -> None:
        """Simulate a confirmed report (reply or broadcast) from the strip."""
        assert self.sink is not None, "client not started"
        self.sink(color)


class LoopbackFixture:
    """A UDP socket on 127.0.0.1 that plays the LED strip."""

    def __init__(self) -> None:
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.setblocking(False)
        self.sock.bind(("127.0.0.1", 0))

    @property
    def port(self) -> int:
        return self.sock.getsockname()[1]

    async def recv(self, timeout: float = 1.0) -> tuple[bytes, tuple[str, int]]:
        loop = asyncio.get_running_loop()
        return await asyncio.wait_for(loop.sock_recvfrom(self.sock, 64), timeout)

    def send_to(self, payload: bytes, port: int) -> None:
        self.sock.sendto(payload, ("127.0.0.1", port))

    async def answer_polls(self, color: Color, count: int = 1) -> None:
        """Reply to ``count`` poll requests with ``color``."""
        answered = 0
        while answered < count:
            data, address = await self.recv(timeout=5.0)
            if data == b"\xff":
                self.sock.sendto(bytes(color.rgb()), address)
                answered += 1

    def close(self) -> None:
        self.sock.close()


RED = Color.from_rgb(255, 0, 0)
GREEN = Color.from_rgb(0, 255, 0)
BLUE = Color.from_rgb(0, 0, 255)
