"""LED strip client: cached fixture color, staleness and change notifications.

The cache only ever holds a *confirmed* color: one the fixture reported in a
poll reply or broadcast. Sending a color never writes the cache; the fixture's
next report does. A staleness timer, re-armed on every report, drops the cache
back to unknown when the fixture goes quiet.

Everything runs on one asyncio loop. The transport's receive task, the refresh
task and the staleness timer are callbacks on that loop, so state transitions
and notification dispatch never interleave and no locks are needed.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import TYPE_CHECKING, Self

from udp_led_strip.color import Color
from udp_led_strip.correlation import operation_context
from udp_led_strip.logging_abstraction import get_logger
from udp_led_strip.metrics import registry
from udp_led_strip.protocol import ColorValidationError, LedStripError
from udp_led_strip.transport import (
    ClientClosedError,
    NotConnectedError,
    PollTimeoutError,
    UdpTransport,
)

if TYPE_CHECKING:
    from types import TracebackType

    from udp_led_strip.config import StripConfig
    from udp_led_strip.transport import ColorTransport

__all__ = ["ClientMode", "ColorCallback", "LedStripClient"]

logger = get_logger(__name__)

ColorCallback = Callable[[Color | None], object | Awaitable[object]]


class ClientMode(StrEnum):
    """How ``current_color()`` answers.

    PASSIVE: return the cached color (or None) without touching the network;
        the cache is fed by fixture broadcasts.
    POLL: run a poll round trip and return the fixture's answer, raising
        PollTimeoutError if it does not reply.
    """

    PASSIVE = "passive"
    POLL = "poll"


class LedStripClient:
    """Tracks and controls one UDP LED strip fixture.

    Usage:
        >>> config = StripConfig(host="192.168.1.55")
        >>> async with LedStripClient(config, ClientMode.PASSIVE) as strip:
        ...     strip.subscribe(lambda color: print("now", color))
        ...     await strip.set_color(Color.from_rgb(255, 0, 0))

    Attributes:
        config: Fixture configuration
        mode: PASSIVE or POLL, fixed for the life of the client
        transport: Transport bound to the fixture
        lp: Log prefix

    """

    def __init__(
        self,
        config: StripConfig,
        mode: ClientMode | str = ClientMode.PASSIVE,
        transport: ColorTransport | None = None,
    ) -> None:
        self.config = config
        self.mode = ClientMode(mode)
        self.transport: ColorTransport = transport if transport is not None else UdpTransport(config)
        self.lp = f"LedStripClient:{config.name}({config.label}):"

        self._color: Color | None = None
        self._last_updated: float | None = None
        self._desired: Color | None = None
        self._desired_at: float | None = None
        self._last_lit: Color | None = None
        # hue survives greys and black, which have none of their own
        self._hue: float | None = None

        self._subscribers: list[ColorCallback] = []
        self._callback_tasks: set[asyncio.Task[object]] = set()
        self._staleness_handle: asyncio.TimerHandle | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        self._started = False
        self._closed = False

    # -- lifecycle -----------------------------------------------------------

    async def start(self) -> None:
        """Open the transport and start the background refresh. Idempotent."""
        self._ensure_open("start")
        if self._started:
            return
        self.transport.listen(self._on_observation)
        await self.transport.open()
        self._started = True
        registry.record_color_known(self.config.label, known=False)
        logger.info("%s Started in %s mode", self.lp, self.mode, extra={"mode": str(self.mode)})

        if self.mode is ClientMode.POLL or self.config.passive_poll_nudge:
            self._refresh_task = asyncio.get_running_loop().create_task(
                self._refresh_loop(),
                name=f"led_strip_refresh-{self.config.label}",
            )

    async def close(self) -> None:
        """Cancel timers and tasks and close the transport. Idempotent.

        After close every operation raises ClientClosedError.
        """
        if self._closed:
            return
        self._closed = True
        logger.info("%s Closing", self.lp)

        if self._staleness_handle is not None:
            self._staleness_handle.cancel()
            self._staleness_handle = None
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._refresh_task
            self._refresh_task = None
        callback_tasks = list(self._callback_tasks)
        for task in callback_tasks:
            task.cancel()
        if callback_tasks:
            await asyncio.gather(*callback_tasks, return_exceptions=True)
        self._subscribers.clear()
        await self.transport.close()

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise ClientClosedError(operation)

    @property
    def closed(self) -> bool:
        return self._closed

    # -- reads ---------------------------------------------------------------

    @property
    def cached_color(self) -> Color | None:
        """Last confirmed color, or None when unknown. Never touches the network."""
        self._ensure_open("read color")
        return self._color

    @property
    def last_updated(self) -> float | None:
        """Loop time of the last confirmed observation."""
        return self._last_updated

    @property
    def is_known(self) -> bool:
        return self._color is not None

    @property
    def desired_color(self) -> Color | None:
        """Last color sent with set_color (not necessarily applied)."""
        return self._desired

    def require_color(self) -> Color:
        """Cached color for synchronous getters.

        Raises:
            NotConnectedError: the color is unknown

        """
        color = self.cached_color
        if color is None:
            logger.error("%s Could not connect to LED strip", self.lp)
            raise NotConnectedError(self.config.name)
        return color

    async def current_color(self) -> Color | None:
        """Current fixture color, answered according to ``mode``.

        PASSIVE returns the cache (None when unknown). POLL asks the fixture;
        the reply also updates the cache through the normal observation path.

        Raises:
            PollTimeoutError: POLL mode and the fixture did not answer
            LedStripTransportError: POLL mode and the request could not be sent

        """
        self._ensure_open("read color")
        if self.mode is ClientMode.PASSIVE:
            return self._color
        with operation_context():
            return await self.transport.request_color(self.config.poll_timeout)

    # -- writes --------------------------------------------------------------

    async def set_color(self, color: Color | tuple[int, int, int]) -> None:
        """Send ``color`` to the fixture.

        Returns once the datagram is handed to the OS. Does not wait for the
        fixture and does not change the cached color.

        Raises:
            ColorValidationError: channel outside [0, 255]
            LedStripTransportError: local send failure

        """
        self._ensure_open("set color")
        if not isinstance(color, Color):
            try:
                r, g, b = color
            except (TypeError, ValueError) as e:
                raise ColorValidationError("color", color, "Color or (r, g, b)") from e
            color = Color.from_rgb(r, g, b)

        with operation_context():
            logger.info("%s LEDs set to %s", self.lp, color, extra={"rgb": color.rgb()})
            await self.transport.send_command(color)

        self._desired = color
        self._desired_at = asyncio.get_running_loop().time()
        self._remember_lit(color)

    def _remember_lit(self, color: Color) -> None:
        if color.is_off():
            return
        self._last_lit = color
        if color.saturation() > 0:
            self._hue = color.hue()

    async def set_on(self, on: bool) -> None:
        """Turn the strip off, or back on to its last lit color (white if none).

        Raises:
            NotConnectedError: the fixture color is unknown

        """
        base = self._base_color("set power")
        if not on:
            target = Color.OFF
        elif not base.is_off():
            target = base
        else:
            target = self._last_lit or Color.WHITE
        await self.set_color(target)

    async def set_hue(self, hue: float) -> None:
        """Replace the hue (degrees) of the current color."""
        await self._set_hsv("set hue", hue=hue)

    async def set_saturation(self, saturation: float) -> None:
        """Replace the saturation (percent) of the current color."""
        await self._set_hsv("set saturation", saturation=saturation)

    async def set_brightness(self, brightness: float) -> None:
        """Replace the brightness (HSV value, percent) of the current color."""
        await self._set_hsv("set brightness", value=brightness)

    async def _set_hsv(self, operation: str, **component: float) -> None:
        base = self._base_color(operation)
        # Black has no hue; tint the last lit color instead.
        tint = base if not base.is_off() else (self._last_lit or Color.WHITE)
        hue = tint.hue()
        if tint.saturation() == 0 and self._hue is not None:
            hue = self._hue
        hue = component.get("hue", hue)
        target = Color.from_hsv(
            hue,
            component.get("saturation", tint.saturation()),
            component.get("value", tint.value()),
        )

        if base.is_off() and "value" not in component:
            # strip stays dark, the new tint is used on the next turn-on
            await self.set_color(Color.OFF)
            self._last_lit = target
        else:
            await self.set_color(target)
        self._hue = hue

    def _base_color(self, operation: str) -> Color:
        """Color the convenience setters build on.

        The last desired color wins while it is newer than the last confirmed
        observation, so quick successive hue/saturation changes compose.
        """
        self._ensure_open(operation)
        if self._color is None:
            raise NotConnectedError(self.config.name)
        if (
            self._desired is not None
            and self._desired_at is not None
            and self._last_updated is not None
            and self._desired_at > self._last_updated
        ):
            return self._desired
        return self._color

    # -- subscriptions -------------------------------------------------------

    def subscribe(self, callback: ColorCallback) -> Callable[[], None]:
        """Call ``callback(color | None)`` on every cached-state transition.

        Coroutine functions are allowed; their coroutine is scheduled as a task.

        Returns:
            A function that removes this subscription

        """
        self._ensure_open("subscribe")
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            self.unsubscribe(callback)

        return _unsubscribe

    def unsubscribe(self, callback: ColorCallback) -> None:
        """Remove one registration of ``callback``; unknown callbacks are ignored."""
        with contextlib.suppress(ValueError):
            self._subscribers.remove(callback)

    def _notify(self, color: Color | None) -> None:
        for callback in list(self._subscribers):
            try:
                result = callback(color)
            except Exception:
                registry.record_callback_error(self.config.label)
                logger.exception("%s Subscriber %r raised", self.lp, callback)
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._callback_tasks.add(task)
                task.add_done_callback(self._callback_done)

    def _callback_done(self, task: asyncio.Task[object]) -> None:
        self._callback_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            registry.record_callback_error(self.config.label)
            logger.error(
                "%s Async subscriber raised: %s",
                self.lp,
                exc,
                extra={"error_type": type(exc).__name__},
            )

    # -- cached state transitions --------------------------------------------

    def _on_observation(self, color: Color) -> None:
        """Transport sink: a confirmed color from the fixture."""
        if self._closed:
            return
        previous = self._color
        self._color = color
        self._last_updated = asyncio.get_running_loop().time()
        self._remember_lit(color)
        self._arm_staleness_timer()

        if previous == color:
            logger.debug("%s Color unchanged (%s)", self.lp, color.hex())
            return
        if previous is None:
            registry.record_state_transition(self.config.label, "known")
        logger.info(
            "%s Color changed: %s -> %s",
            self.lp,
            previous.hex() if previous else "unknown",
            color.hex(),
            extra={"rgb": color.rgb()},
        )
        self._notify(color)

    def _arm_staleness_timer(self) -> None:
        if self._staleness_handle is not None:
            self._staleness_handle.cancel()
        self._staleness_handle = asyncio.get_running_loop().call_later(
            self.config.staleness_window,
            self._expire,
        )

    def _expire(self) -> None:
        self._staleness_handle = None
        if self._closed or self._color is None:
            return
        logger.warning(
            "%s Resetting color since no response was received for %.1fs",
            self.lp,
            self.config.staleness_window,
        )
        self._color = None
        registry.record_state_transition(self.config.label, "unknown")
        self._notify(None)

    # -- background refresh --------------------------------------------------

    async def _refresh_loop(self) -> None:
        lp = f"{self.lp}refresh:"
        logger.info(
            "%s Starting background refresh every %.1fs (%s mode)",
            lp,
            self.config.refresh_interval,
            self.mode,
        )
        loop = asyncio.get_running_loop()
        interval = self.config.refresh_interval
        next_tick = loop.time()
        while True:
            try:
                with operation_context():
                    await self._refresh_once(lp)
                # ticks are fixed; a poll that overran its slot starts the next one at once
                next_tick = max(next_tick + interval, loop.time())
                await asyncio.sleep(next_tick - loop.time())
            except asyncio.CancelledError:
                logger.debug("%s CANCELLED", lp)
                break
            except Exception:
                logger.exception("%s Exception in background refresh", lp)
                await asyncio.sleep(interval)
                next_tick = loop.time()

        logger.debug("%s FINISHED", lp)

    async def _refresh_once(self, lp: str) -> None:
        try:
            if self.mode is ClientMode.PASSIVE:
                # the fixture answers a poll request with a broadcast
                await self.transport.send_poll_request()
            else:
                await self.transport.request_color(self.config.poll_timeout)
        except PollTimeoutError as e:
            # a single miss never changes state; only the staleness timer does
            logger.warning("%s %s", lp, e)
        except LedStripError as e:
            logger.warning("%s Refresh failed: %s", lp, e, extra={"error_type": type(e).__name__})

    # -- accessory-facing names ----------------------------------------------

    get_current_color = current_color
    set_desired_color = set_color
    on_color_changed = subscribe

    def __repr__(self) -> str:
        state = self._color.hex() if self._color else "unknown"
        return f"LedStripClient({self.config.label}, {self.mode}, {state})"
