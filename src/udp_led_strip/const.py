import os

from udp_led_strip import __version__

__all__ = [
    "DEFAULT_MULTICAST_GROUP",
    "DEFAULT_MULTICAST_TTL",
    "DEFAULT_POLL_TIMEOUT",
    "DEFAULT_PORT",
    "DEFAULT_REFRESH_INTERVAL",
    "DEFAULT_STALENESS_WINDOW",
    "LED_STRIP_DEBUG",
    "LED_STRIP_LOG_FORMAT",
    "LED_STRIP_LOG_HUMAN_OUTPUT",
    "LED_STRIP_LOG_JSON_FILE",
    "LED_STRIP_LOG_NAME",
    "LED_STRIP_METRICS_PORT",
    "LED_STRIP_PERF_THRESHOLD_MS",
    "LED_STRIP_PERF_TRACKING",
    "LED_STRIP_VERSION",
    "MAX_DATAGRAM_SIZE",
    "YES_ANSWER",
]

YES_ANSWER = ("true", "1", "yes", "y", "t", 1, "on", "o")
LED_STRIP_LOG_NAME: str = "udp_led_strip"
LED_STRIP_VERSION: str = __version__

# Fixture wire defaults
DEFAULT_PORT: int = 7026
DEFAULT_MULTICAST_GROUP: str = "239.0.0.123"
DEFAULT_MULTICAST_TTL: int = 128
# The fixture re-announces its color roughly every 5s; staleness is 2x that.
DEFAULT_REFRESH_INTERVAL: float = 5.0
DEFAULT_POLL_TIMEOUT: float = 5.0
DEFAULT_STALENESS_WINDOW: float = 10.0
MAX_DATAGRAM_SIZE: int = 64

LED_STRIP_DEBUG = os.environ.get("LED_STRIP_DEBUG", "0").casefold() in YES_ANSWER

LED_STRIP_LOG_FORMAT: str = os.environ.get("LED_STRIP_LOG_FORMAT", "human").casefold()
_json_file = os.environ.get("LED_STRIP_LOG_JSON_FILE")
LED_STRIP_LOG_JSON_FILE: str | None = _json_file if _json_file else None
LED_STRIP_LOG_HUMAN_OUTPUT: str = os.environ.get("LED_STRIP_LOG_HUMAN_OUTPUT", "stderr")

LED_STRIP_PERF_TRACKING: bool = os.environ.get("LED_STRIP_PERF_TRACKING", "true").casefold() in YES_ANSWER
_perf_threshold = os.environ.get("LED_STRIP_PERF_THRESHOLD_MS", "250")
try:
    _perf_threshold_value = int(_perf_threshold)
except ValueError:
    _perf_threshold_value = 250
LED_STRIP_PERF_THRESHOLD_MS: int = _perf_threshold_value

_metrics_port = os.environ.get("LED_STRIP_METRICS_PORT", "9426")
try:
    _metrics_port_value = int(_metrics_port)
except ValueError:
    _metrics_port_value = 9426
LED_STRIP_METRICS_PORT: int = _metrics_port_value
