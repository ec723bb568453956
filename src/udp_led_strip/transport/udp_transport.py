"""Asyncio UDP transport for one LED strip fixture.

One non-blocking socket per fixture, bound to the fixture's well-known port
with address reuse and (optionally) joined to the multicast group the fixture
announces on. Everything inbound flows through a single receive task:

- datagrams from any address other than the configured fixture are dropped
- datagrams that are not exactly three RGB bytes are dropped
- accepted colors go to the registered sink, then resolve every pending poll

Polls share this socket instead of opening one per request: the fixture
answers on its well-known port/group, and all overlapping polls observe the
same fixture state, so they can safely share one reply.
"""

from __future__ import annotations

import asyncio
import contextlib
import socket
import struct
import time
from typing import TYPE_CHECKING

from udp_led_strip.const import MAX_DATAGRAM_SIZE
from udp_led_strip.instrumentation import timed_async
from udp_led_strip.logging_abstraction import get_logger
from udp_led_strip.metrics import registry
from udp_led_strip.protocol import (
    DatagramDecodeError,
    DatagramKind,
    decode_color,
    encode_poll_request,
    encode_set_color,
)

from .exceptions import ClientClosedError, LedStripTransportError, PollTimeoutError

if TYPE_CHECKING:
    from udp_led_strip.color import Color
    from udp_led_strip.config import StripConfig

    from .types import ColorSink

logger = get_logger(__name__)


class UdpTransport:
    """UDP send / poll / listen primitives bound to one fixture.

    Usage:
        >>> transport = UdpTransport(StripConfig(host="192.168.1.55"))
        >>> transport.listen(lambda color: print(color))
        >>> await transport.open()
        >>> await transport.send_command(Color.from_rgb(255, 0, 0))
        >>> color = await transport.request_color(timeout=2.0)
        >>> await transport.close()

    Attributes:
        config: Fixture configuration
        lp: Log prefix

    """

    def __init__(self, config: StripConfig) -> None:
        self.config = config
        self.lp = f"UdpTransport:{config.label}:"
        self._fixture_host = str(config.host)
        self._sock: socket.socket | None = None
        self._receive_task: asyncio.Task[None] | None = None
        self._on_color: ColorSink | None = None
        self._pending: set[asyncio.Future[Color]] = set()
        self._closed = False

    # -- lifecycle -----------------------------------------------------------

    def listen(self, on_color: ColorSink) -> None:
        """Register the sink called with every accepted fixture color.

        Only one sink is kept; the strip client owns fan-out to subscribers.
        """
        self._on_color = on_color

    async def open(self) -> None:
        """Bind the socket, join the multicast group and start receiving.

        Raises:
            LedStripTransportError: bind or multicast join failed
            ClientClosedError: transport was already closed

        """
        if self._closed:
            raise ClientClosedError("open transport")
        if self._sock is not None:
            return
        self._sock = self._create_socket()
        host, port = self._sock.getsockname()
        logger.info(
            "%s Listening on %s:%d%s",
            self.lp,
            host,
            port,
            f" (multicast {self.config.multicast_group})" if self.config.multicast_group else "",
            extra={"local_host": host, "local_port": port, "multicast_group": self.config.multicast_group},
        )
        self._receive_task = asyncio.get_running_loop().create_task(
            self._receive_loop(),
            name=f"udp_receive-{self.config.label}",
        )

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        bind_address = ("0.0.0.0", self.config.bind_port)  # noqa: S104
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            sock.setblocking(False)
            sock.bind(bind_address)
            if self.config.multicast_group is not None:
                sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, self.config.multicast_ttl)
                mreq = struct.pack(
                    "=4sl",
                    socket.inet_aton(str(self.config.multicast_group)),
                    socket.INADDR_ANY,
                )
                sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, mreq)
        except OSError as e:
            sock.close()
            raise LedStripTransportError(f"socket setup failed: {e}", bind_address) from e
        return sock

    async def close(self) -> None:
        """Cancel receiving, fail pending polls and close the socket. Idempotent."""
        if self._closed:
            return
        self._closed = True
        logger.info("%s Closing transport", self.lp)

        if self._receive_task is not None:
            self._receive_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._receive_task
            self._receive_task = None

        for future in self._pending:
            if not future.done():
                future.set_exception(ClientClosedError("request color"))
        self._pending.clear()

        if self._sock is not None:
            self._sock.close()
            self._sock = None

    @property
    def is_open(self) -> bool:
        return self._sock is not None and not self._closed

    @property
    def local_address(self) -> tuple[str, int]:
        """Bound ``(host, port)`` of the socket."""
        sock = self._require_socket("read local address")
        host, port = sock.getsockname()
        return (host, port)

    def _require_socket(self, operation: str) -> socket.socket:
        if self._closed:
            raise ClientClosedError(operation)
        if self._sock is None:
            raise LedStripTransportError(f"cannot {operation}: transport not open")
        return self._sock

    # -- outbound ------------------------------------------------------------

    @timed_async("send_command")
    async def send_command(self, color: Color) -> None:
        """Send ``00 R G B`` to the fixture without waiting for any reply.

        Raises:
            LedStripTransportError: local send failure

        """
        await self._send(encode_set_color(color), DatagramKind.SET_COLOR)
        logger.debug("%s Sent color %s", self.lp, color.hex(), extra={"rgb": color.rgb()})

    async def send_poll_request(self) -> None:
        """Send the one-byte poll request without waiting for the reply."""
        await self._send(encode_poll_request(), DatagramKind.POLL_REQUEST)

    async def _send(self, payload: bytes, kind: DatagramKind) -> None:
        sock = self._require_socket(f"send {kind}")
        address = self.config.fixture_address
        try:
            await asyncio.get_running_loop().sock_sendto(sock, payload, address)
        except OSError as e:
            registry.record_datagram_sent(self.config.label, kind, "error")
            logger.warning(
                "%s Sending %s to %s:%d failed: %s",
                self.lp,
                kind,
                address[0],
                address[1],
                e,
                extra={"kind": str(kind), "error": str(e)},
            )
            raise LedStripTransportError(f"send {kind} failed: {e}", address) from e
        registry.record_datagram_sent(self.config.label, kind, "success")

    @timed_async("request_color")
    async def request_color(self, timeout: float | None = None) -> Color:
        """Poll the fixture and wait for the next color it reports.

        Args:
            timeout: Seconds to wait (default: ``config.poll_timeout``)

        Returns:
            The reported Color

        Raises:
            PollTimeoutError: nothing accepted from the fixture in time
            LedStripTransportError: the poll request could not be sent
            ClientClosedError: the transport closed while waiting

        """
        if timeout is None:
            timeout = self.config.poll_timeout
        self._require_socket("request color")

        future: asyncio.Future[Color] = asyncio.get_running_loop().create_future()
        self._pending.add(future)
        start_time = time.perf_counter()
        try:
            await self.send_poll_request()
            color = await asyncio.wait_for(future, timeout)
        except TimeoutError as e:
            registry.record_poll(self.config.label, "timeout")
            raise PollTimeoutError(timeout, self.config.fixture_address) from e
        except LedStripTransportError:
            registry.record_poll(self.config.label, "error")
            raise
        finally:
            self._pending.discard(future)

        registry.record_poll(self.config.label, "success")
        registry.record_poll_latency(self.config.label, time.perf_counter() - start_time)
        return color

    # -- inbound -------------------------------------------------------------

    async def _receive_loop(self) -> None:
        lp = f"{self.lp}receive:"
        sock = self._require_socket("receive")
        loop = asyncio.get_running_loop()
        while True:
            try:
                data, address = await loop.sock_recvfrom(sock, MAX_DATAGRAM_SIZE)
            except asyncio.CancelledError:
                logger.debug("%s CANCELLED", lp)
                raise
            except OSError as e:
                if self._closed:
                    break
                # ICMP errors from earlier sends surface here on some platforms
                logger.warning("%s recvfrom failed: %s", lp, e, extra={"error": str(e)})
                continue
            try:
                self._handle_datagram(data, address)
            except Exception:
                logger.exception("%s Exception handling datagram from %s", lp, address[0])

    def _handle_datagram(self, data: bytes, address: tuple[str, int]) -> None:
        sender = address[0]
        if sender != self._fixture_host:
            registry.record_datagram_recv(self.config.label, "foreign_sender")
            logger.debug(
                "%s Ignoring %d bytes from %s:%d (not the fixture)",
                self.lp,
                len(data),
                sender,
                address[1],
            )
            return
        try:
            color = decode_color(data)
        except DatagramDecodeError as e:
            registry.record_datagram_recv(self.config.label, "bad_length")
            logger.debug("%s Dropping datagram: %s", self.lp, e, extra={"reason": e.reason})
            return

        registry.record_datagram_recv(self.config.label, "accepted")
        logger.debug("%s Received RGB value: %d %d %d", self.lp, *color.rgb())
        if self._on_color is not None:
            self._on_color(color)
        for future in self._pending:
            if not future.done():
                future.set_result(color)

    def __repr__(self) -> str:
        status = "open" if self.is_open else ("closed" if self._closed else "idle")
        return f"UdpTransport({self.config.label}, {status})"
