"""Prometheus metrics registry for the UDP LED strip client."""

import threading
from typing import Final

from prometheus_client import (  # type: ignore[import-untyped]
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

led_strip_datagram_sent_total: Final = Counter(  # type: ignore[assignment]
    "led_strip_datagram_sent_total",
    "Total datagrams sent to the fixture",
    ["fixture", "kind", "outcome"],
)

led_strip_datagram_recv_total: Final = Counter(  # type: ignore[assignment]
    "led_strip_datagram_recv_total",
    "Total datagrams received on the client socket",
    ["fixture", "outcome"],
)

led_strip_poll_total: Final = Counter(  # type: ignore[assignment]
    "led_strip_poll_total",
    "Total color polls",
    ["fixture", "outcome"],
)

led_strip_poll_latency_seconds: Final = Histogram(  # type: ignore[assignment]
    "led_strip_poll_latency_seconds",
    "Poll round-trip latency in seconds",
    ["fixture"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

led_strip_state_transition_total: Final = Counter(  # type: ignore[assignment]
    "led_strip_state_transition_total",
    "Cached color state transitions",
    ["fixture", "to_state"],
)

led_strip_color_known: Final = Gauge(  # type: ignore[assignment]
    "led_strip_color_known",
    "1 when the fixture color is known, 0 when stale or never observed",
    ["fixture"],
)

led_strip_callback_errors_total: Final = Counter(  # type: ignore[assignment]
    "led_strip_callback_errors_total",
    "Subscriber callbacks that raised",
    ["fixture"],
)

_server_state = {"started": False}
_server_lock = threading.Lock()


def start_metrics_server(port: int | None = None) -> None:
    """Start the Prometheus HTTP endpoint once per process.

    Args:
        port: Listen port (default: ``LED_STRIP_METRICS_PORT``)
    """
    if port is None:
        from udp_led_strip.const import LED_STRIP_METRICS_PORT

        port = LED_STRIP_METRICS_PORT
    with _server_lock:
        if not _server_state["started"]:
            start_http_server(port)  # type: ignore[no-untyped-call]
            _server_state["started"] = True


def record_datagram_sent(fixture: str, kind: str, outcome: str) -> None:
    """Record an outbound datagram (kind: set_color/poll_request)."""
    led_strip_datagram_sent_total.labels(fixture=fixture, kind=kind, outcome=outcome).inc()  # type: ignore[no-untyped-call]


def record_datagram_recv(fixture: str, outcome: str) -> None:
    """Record an inbound datagram (outcome: accepted/foreign_sender/bad_length)."""
    led_strip_datagram_recv_total.labels(fixture=fixture, outcome=outcome).inc()  # type: ignore[no-untyped-call]


def record_poll(fixture: str, outcome: str) -> None:
    """Record a poll outcome (success/timeout/error)."""
    led_strip_poll_total.labels(fixture=fixture, outcome=outcome).inc()  # type: ignore[no-untyped-call]


def record_poll_latency(fixture: str, latency_seconds: float) -> None:
    """Record the round trip of a successful poll."""
    led_strip_poll_latency_seconds.labels(fixture=fixture).observe(latency_seconds)  # type: ignore[no-untyped-call]


def record_state_transition(fixture: str, to_state: str) -> None:
    """Record a Known/Unknown transition and update the known gauge."""
    led_strip_state_transition_total.labels(fixture=fixture, to_state=to_state).inc()  # type: ignore[no-untyped-call]
    record_color_known(fixture, known=to_state == "known")


def record_color_known(fixture: str, *, known: bool) -> None:
    """Set the color-known gauge."""
    led_strip_color_known.labels(fixture=fixture).set(1 if known else 0)  # type: ignore[no-untyped-call]


def record_callback_error(fixture: str) -> None:
    """Record a subscriber callback that raised."""
    led_strip_callback_errors_total.labels(fixture=fixture).inc()  # type: ignore[no-untyped-call]
