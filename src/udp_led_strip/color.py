"""Immutable RGB color value with HSV accessors.

RGB is the only stored representation. Hue, saturation and value are computed
on demand so the two coordinate spaces can never drift apart.
"""

from __future__ import annotations

import colorsys
from dataclasses import dataclass
from typing import ClassVar, Self

from udp_led_strip.protocol.exceptions import ColorValidationError

CHANNEL_MIN = 0
CHANNEL_MAX = 0xFF
HUE_MAX = 360.0
PERCENT_MAX = 100.0


def _check_channel(name: str, value: object) -> int:
    # bool is an int subclass but True/False are never meant as channel values
    if isinstance(value, bool) or not isinstance(value, int):
        raise ColorValidationError(name, value, "int in [0, 255]")
    if not CHANNEL_MIN <= value <= CHANNEL_MAX:
        raise ColorValidationError(name, value, "int in [0, 255]")
    return value


def _check_range(name: str, value: object, upper: float) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ColorValidationError(name, value, f"number in [0, {upper:g}]")
    if not 0 <= value <= upper:
        raise ColorValidationError(name, value, f"number in [0, {upper:g}]")
    return float(value)


@dataclass(frozen=True, slots=True)
class Color:
    """An RGB color. Equality and hashing are by the (r, g, b) triple."""

    OFF: ClassVar[Color]
    WHITE: ClassVar[Color]

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        _check_channel("r", self.r)
        _check_channel("g", self.g)
        _check_channel("b", self.b)

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> Self:
        """Build a color from 8-bit channels; out-of-range raises ColorValidationError."""
        return cls(r, g, b)

    @classmethod
    def from_hsv(cls, hue: float, saturation: float, value: float) -> Self:
        """Build a color from hue (degrees) and saturation/value (percent).

        Args:
            hue: 0-360, where 360 is the same as 0
            saturation: 0-100
            value: 0-100 (brightness)

        Returns:
            Color with channels rounded to the nearest integer

        Raises:
            ColorValidationError: a component is outside its range

        """
        h = _check_range("hue", hue, HUE_MAX) % HUE_MAX
        s = _check_range("saturation", saturation, PERCENT_MAX)
        v = _check_range("value", value, PERCENT_MAX)
        red, green, blue = colorsys.hsv_to_rgb(h / HUE_MAX, s / PERCENT_MAX, v / PERCENT_MAX)
        return cls(round(red * CHANNEL_MAX), round(green * CHANNEL_MAX), round(blue * CHANNEL_MAX))

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:
        """Build a color from three raw bytes R, G, B."""
        if len(data) != 3:  # noqa: PLR2004
            raise ColorValidationError("rgb bytes", data, "exactly 3 bytes")
        return cls(data[0], data[1], data[2])

    def rgb(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def _hsv(self) -> tuple[float, float, float]:
        return colorsys.rgb_to_hsv(self.r / CHANNEL_MAX, self.g / CHANNEL_MAX, self.b / CHANNEL_MAX)

    def hue(self) -> float:
        """Hue in degrees, [0, 360). Greys and black report 0."""
        return self._hsv()[0] * HUE_MAX

    def saturation(self) -> float:
        """Saturation in percent, [0, 100]. Black reports 0."""
        return self._hsv()[1] * PERCENT_MAX

    def value(self) -> float:
        """Value (brightness) in percent, [0, 100]."""
        return self._hsv()[2] * PERCENT_MAX

    def is_off(self) -> bool:
        return self.value() == 0

    def with_hsv(
        self,
        hue: float | None = None,
        saturation: float | None = None,
        value: float | None = None,
    ) -> Color:
        """Return a copy with the given HSV components replaced."""
        return Color.from_hsv(
            self.hue() if hue is None else hue,
            self.saturation() if saturation is None else saturation,
            self.value() if value is None else value,
        )

    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    def __str__(self) -> str:
        return f"{self.hex()} (h={self.hue():.0f} s={self.saturation():.0f}% v={self.value():.0f}%)"


Color.OFF = Color(0, 0, 0)
Color.WHITE = Color(255, 255, 255)
