"""Unit tests for the LED strip metrics registry."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from udp_led_strip.metrics import registry

FIXTURE = "10.9.8.7:7026"


def _sample(metric, name: str, labels: dict[str, str]) -> float | None:
    for family in metric.collect():
        for sample in family.samples:
            if sample.name == name and sample.labels == labels:
                return sample.value
    return None


class TestDatagramMetrics:
    """Tests for datagram counters."""

    def test_record_datagram_sent(self) -> None:
        """Test record_datagram_sent labels kind and outcome."""
        registry.record_datagram_sent(FIXTURE, "set_color", "success")
        value = _sample(
            registry.led_strip_datagram_sent_total,
            "led_strip_datagram_sent_total",
            {"fixture": FIXTURE, "kind": "set_color", "outcome": "success"},
        )
        assert value is not None
        assert value >= 1

    def test_record_datagram_recv(self) -> None:
        """Test record_datagram_recv counts each outcome separately."""
        labels = {"fixture": FIXTURE, "outcome": "foreign_sender"}
        before = _sample(registry.led_strip_datagram_recv_total, "led_strip_datagram_recv_total", labels) or 0
        registry.record_datagram_recv(FIXTURE, "foreign_sender")
        registry.record_datagram_recv(FIXTURE, "foreign_sender")
        after = _sample(registry.led_strip_datagram_recv_total, "led_strip_datagram_recv_total", labels)
        assert after == before + 2


class TestPollMetrics:
    """Tests for poll counters and latency."""

    def test_record_poll(self) -> None:
        """Test record_poll helper."""
        registry.record_poll(FIXTURE, "timeout")
        value = _sample(
            registry.led_strip_poll_total,
            "led_strip_poll_total",
            {"fixture": FIXTURE, "outcome": "timeout"},
        )
        assert value is not None

    def test_record_poll_latency(self) -> None:
        """Test record_poll_latency observes into the histogram."""
        labels = {"fixture": FIXTURE}
        before = _sample(registry.led_strip_poll_latency_seconds, "led_strip_poll_latency_seconds_count", labels) or 0
        registry.record_poll_latency(FIXTURE, 0.012)
        after = _sample(registry.led_strip_poll_latency_seconds, "led_strip_poll_latency_seconds_count", labels)
        assert after == before + 1


class TestStateMetrics:
    """Tests for state transition metrics and the known gauge."""

    def test_transition_sets_gauge(self) -> None:
        """Test known/unknown transitions drive the color-known gauge."""
        gauge_labels = {"fixture": FIXTURE}
        registry.record_state_transition(FIXTURE, "known")
        assert _sample(registry.led_strip_color_known, "led_strip_color_known", gauge_labels) == 1.0
        registry.record_state_transition(FIXTURE, "unknown")
        assert _sample(registry.led_strip_color_known, "led_strip_color_known", gauge_labels) == 0.0

    def test_transition_counter(self) -> None:
        """Test record_state_transition counts by target state."""
        labels = {"fixture": FIXTURE, "to_state": "unknown"}
        name = "led_strip_state_transition_total"
        before = _sample(registry.led_strip_state_transition_total, name, labels) or 0
        registry.record_state_transition(FIXTURE, "unknown")
        assert _sample(registry.led_strip_state_transition_total, name, labels) == before + 1

    def test_record_callback_error(self) -> None:
        """Test record_callback_error helper."""
        registry.record_callback_error(FIXTURE)
        value = _sample(
            registry.led_strip_callback_errors_total,
            "led_strip_callback_errors_total",
            {"fixture": FIXTURE},
        )
        assert value is not None


class TestMetricsServer:
    """Tests for start_metrics_server."""

    @pytest.fixture(autouse=True)
    def reset_server_state(self):
        saved = dict(registry._server_state)
        registry._server_state["started"] = False
        yield
        registry._server_state.update(saved)

    def test_starts_once(self) -> None:
        """Test the HTTP server is only started on the first call."""
        with patch("udp_led_strip.metrics.registry.start_http_server") as mock_start:
            registry.start_metrics_server(9999)
            registry.start_metrics_server(9999)
        mock_start.assert_called_once_with(9999)

    def test_default_port_from_env_constant(self) -> None:
        """Test the port defaults to LED_STRIP_METRICS_PORT."""
        with (
            patch("udp_led_strip.const.LED_STRIP_METRICS_PORT", 19426),
            patch("udp_led_strip.metrics.registry.start_http_server") as mock_start,
        ):
            registry.start_metrics_server()
        mock_start.assert_called_once_with(19426)
