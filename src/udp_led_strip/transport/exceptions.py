"""Exception types for the UDP transport and client lifecycle.

Extends the protocol exception hierarchy with socket, timeout and state
errors.
"""

from __future__ import annotations

from udp_led_strip.protocol.exceptions import LedStripError


class LedStripTransportError(LedStripError):
    """Local socket failure (bind, multicast join, send) or transport not open.

    Raised when:
    - The UDP socket cannot be bound or joined to the multicast group
    - sendto fails locally (network unreachable, no route, ...)
    - A send or poll is attempted before open()

    Attributes:
        reason: Specific failure reason
        address: Address involved, when there is one

    """

    def __init__(self, reason: str, address: tuple[str, int] | None = None) -> None:
        self.reason: str = reason
        self.address: tuple[str, int] | None = address
        where = f" ({address[0]}:{address[1]})" if address else ""
        super().__init__(f"Transport error: {reason}{where}")


class PollTimeoutError(LedStripError, TimeoutError):
    """No color reply from the fixture within the poll timeout.

    Also a builtin TimeoutError, so callers that only know asyncio idioms
    still catch it.

    Attributes:
        timeout_seconds: Timeout that was exceeded
        address: Fixture that did not answer

    """

    def __init__(self, timeout_seconds: float, address: tuple[str, int]) -> None:
        self.timeout_seconds: float = timeout_seconds
        self.address: tuple[str, int] = address
        super().__init__(f"No reply from {address[0]}:{address[1]} within {timeout_seconds:.3f}s")


class NotConnectedError(LedStripError):
    """The fixture color is unknown (never observed, or stale).

    Raised by operations that need a confirmed color, such as the cached
    getter or the on/hue/saturation/brightness setters.
    """

    def __init__(self, name: str) -> None:
        self.name: str = name
        super().__init__(f"Could not connect to {name}: color unknown")


class ClientClosedError(LedStripError):
    """Operation attempted after close()."""

    def __init__(self, operation: str) -> None:
        self.operation: str = operation
        super().__init__(f"Cannot {operation}: client is closed")
