"""
Timing for network operations.

``timed_async`` logs how long a coroutine took and warns when it exceeds
``LED_STRIP_PERF_THRESHOLD_MS``. Tracking can be switched off with
``LED_STRIP_PERF_TRACKING=0``.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Coroutine
from typing import Any, ParamSpec, TypeVar

from udp_led_strip.logging_abstraction import StripLogger, get_logger

__all__ = [
    "measure_time",
    "timed_async",
]

P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger(__name__)


def measure_time(start_time: float) -> float:
    """Milliseconds elapsed since ``start_time`` (a ``time.perf_counter()`` value)."""
    return (time.perf_counter() - start_time) * 1000


def timed_async(
    operation_name: str | None = None,
) -> Callable[[Callable[P, Coroutine[Any, Any, T]]], Callable[P, Coroutine[Any, Any, T]]]:
    """
    Decorator timing an async function.

    The duration is logged whether the call returns or raises, so a poll that
    times out still shows up with its full wait.

    Args:
        operation_name: Name for the log line (defaults to the function name)

    Example:
        @timed_async("request_color")
        async def request_color(self, timeout=None):
            ...
    """

    def decorator(func: Callable[P, Coroutine[Any, Any, T]]) -> Callable[P, Coroutine[Any, Any, T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            from udp_led_strip.const import (  # noqa: PLC0415
                LED_STRIP_PERF_THRESHOLD_MS,
                LED_STRIP_PERF_TRACKING,
            )

            if not LED_STRIP_PERF_TRACKING:
                return await func(*args, **kwargs)

            op_name = operation_name or func.__name__
            start_time = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                _log_timing(logger, op_name, measure_time(start_time), LED_STRIP_PERF_THRESHOLD_MS)

        return wrapper

    return decorator


def _log_timing(log: StripLogger, operation_name: str, elapsed_ms: float, threshold_ms: int) -> None:
    context: dict[str, object] = {
        "operation": operation_name,
        "duration_ms": round(elapsed_ms, 2),
        "threshold_ms": threshold_ms,
    }
    if elapsed_ms > threshold_ms:
        log.warning(
            "[%s] completed in %.1fms (threshold: %dms)",
            operation_name,
            elapsed_ms,
            threshold_ms,
            extra={**context, "exceeded_threshold": True},
        )
    else:
        log.debug(
            "[%s] completed in %.1fms",
            operation_name,
            elapsed_ms,
            extra={**context, "exceeded_threshold": False},
        )
