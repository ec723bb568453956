"""Metrics module."""

from .registry import (
    record_callback_error,
    record_color_known,
    record_datagram_recv,
    record_datagram_sent,
    record_poll,
    record_poll_latency,
    record_state_transition,
    start_metrics_server,
)

__all__ = [
    "record_callback_error",
    "record_color_known",
    "record_datagram_recv",
    "record_datagram_sent",
    "record_poll",
    "record_poll_latency",
    "record_state_transition",
    "start_metrics_server",
]
