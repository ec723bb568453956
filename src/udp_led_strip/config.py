"""Per-fixture client configuration.

One StripConfig belongs to one client instance; nothing here is shared
process-wide. Durations are seconds. The accessory layer speaks milliseconds,
which ``from_accessory_config`` converts.
"""

from __future__ import annotations

from collections.abc import Mapping
from ipaddress import IPv4Address
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from udp_led_strip.const import (
    DEFAULT_MULTICAST_GROUP,
    DEFAULT_MULTICAST_TTL,
    DEFAULT_POLL_TIMEOUT,
    DEFAULT_PORT,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_STALENESS_WINDOW,
)
from udp_led_strip.protocol.exceptions import StripConfigError

__all__ = ["StripConfig"]

MS_PER_SECOND = 1000.0

# accessory key -> (StripConfig field, is a millisecond duration)
_ACCESSORY_KEYS: dict[str, tuple[str, bool]] = {
    "ip": ("host", False),
    "ipAddress": ("host", False),
    "port": ("port", False),
    "localPort": ("local_port", False),
    "multicast": ("multicast_group", False),
    "multicastTtl": ("multicast_ttl", False),
    "pollTimeout": ("poll_timeout", True),
    "stalenessWindow": ("staleness_window", True),
    "refreshInterval": ("refresh_interval", True),
    "pollNudge": ("passive_poll_nudge", False),
    "name": ("name", False),
}


class StripConfig(BaseModel):
    """Connection and timing settings for one LED strip fixture."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    host: IPv4Address
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    # None binds the same port the fixture uses (its broadcasts target it)
    local_port: int | None = Field(default=None, ge=0, le=65535)
    multicast_group: IPv4Address | None = IPv4Address(DEFAULT_MULTICAST_GROUP)
    multicast_ttl: int = Field(default=DEFAULT_MULTICAST_TTL, ge=1, le=255)
    poll_timeout: float = Field(default=DEFAULT_POLL_TIMEOUT, gt=0)
    staleness_window: float = Field(default=DEFAULT_STALENESS_WINDOW, gt=0)
    refresh_interval: float = Field(default=DEFAULT_REFRESH_INTERVAL, gt=0)
    passive_poll_nudge: bool = True
    name: str = "LED strip"

    @field_validator("multicast_group")
    @classmethod
    def _multicast_range(cls, value: IPv4Address | None) -> IPv4Address | None:
        if value is not None and not value.is_multicast:
            msg = f"{value} is not a multicast address"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def _staleness_covers_refresh(self) -> Self:
        if self.staleness_window < self.refresh_interval:
            msg = (
                f"staleness_window ({self.staleness_window}s) must be at least "
                f"refresh_interval ({self.refresh_interval}s)"
            )
            raise ValueError(msg)
        return self

    @property
    def bind_port(self) -> int:
        return self.port if self.local_port is None else self.local_port

    @property
    def fixture_address(self) -> tuple[str, int]:
        return (str(self.host), self.port)

    @property
    def label(self) -> str:
        """Short ``host:port`` identifier used in logs and metric labels."""
        return f"{self.host}:{self.port}"

    @classmethod
    def from_accessory_config(cls, config: Mapping[str, object]) -> StripConfig:
        """Build a config from the accessory layer's dictionary.

        Unknown keys (``accessory``, ``platform`` ...) are ignored. Durations
        are given in milliseconds. ``multicast`` may be ``false``/``None`` to
        disable the multicast join.

        Raises:
            StripConfigError: required key missing or a value is invalid

        """
        values: dict[str, object] = {}
        for key, (field_name, is_ms) in _ACCESSORY_KEYS.items():
            if key not in config:
                continue
            raw = config[key]
            if is_ms and isinstance(raw, int | float) and not isinstance(raw, bool):
                raw = raw / MS_PER_SECOND
            if field_name == "multicast_group" and raw is False:
                raw = None
            values[field_name] = raw

        if "host" not in values:
            msg = "LED strip config requires 'ip' (fixture IPv4 address)"
            raise StripConfigError(msg)
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            msg = f"Invalid LED strip config: {e.error_count()} error(s): {e.errors(include_url=False)}"
            raise StripConfigError(msg) from e
