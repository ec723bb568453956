"""Unit tests for the Color value type."""

from __future__ import annotations

import itertools
import random

import pytest

from udp_led_strip.color import Color
from udp_led_strip.protocol.exceptions import ColorValidationError

CHANNEL_SAMPLE = (0, 1, 2, 64, 127, 128, 200, 254, 255)


class TestConstruction:
    """Tests for from_rgb / from_hsv / from_bytes."""

    def test_from_rgb_keeps_channels(self):
        color = Color.from_rgb(12, 34, 56)
        assert color.rgb() == (12, 34, 56)

    @pytest.mark.parametrize(
        ("r", "g", "b"),
        [(-1, 0, 0), (0, 256, 0), (0, 0, 1000), (1.5, 0, 0), ("255", 0, 0), (True, 0, 0)],
    )
    def test_from_rgb_rejects_invalid_channels(self, r, g, b):
        with pytest.raises(ColorValidationError):
            Color.from_rgb(r, g, b)

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError, match="Invalid r"):
            Color.from_rgb(300, 0, 0)

    def test_from_hsv_primary_colors(self):
        assert Color.from_hsv(0, 100, 100).rgb() == (255, 0, 0)
        assert Color.from_hsv(120, 100, 100).rgb() == (0, 255, 0)
        assert Color.from_hsv(240, 100, 100).rgb() == (0, 0, 255)

    def test_from_hsv_hue_360_wraps_to_red(self):
        assert Color.from_hsv(360, 100, 100) == Color.from_hsv(0, 100, 100)

    @pytest.mark.parametrize(
        ("h", "s", "v"),
        [(-1, 50, 50), (361, 50, 50), (0, 101, 50), (0, 50, -0.1), (0, 50, float("nan"))],
    )
    def test_from_hsv_rejects_out_of_range(self, h, s, v):
        with pytest.raises(ColorValidationError):
            Color.from_hsv(h, s, v)

    def test_from_bytes(self):
        assert Color.from_bytes(b"\x01\x02\x03").rgb() == (1, 2, 3)

    def test_from_bytes_wrong_length(self):
        with pytest.raises(ColorValidationError):
            Color.from_bytes(b"\x01\x02")


class TestHsvAccessors:
    """Tests for derived hue/saturation/value."""

    def test_red(self):
        red = Color.from_rgb(255, 0, 0)
        assert red.hue() == 0
        assert red.saturation() == 100
        assert red.value() == 100

    def test_half_blue(self):
        color = Color.from_rgb(0, 0, 128)
        assert color.hue() == pytest.approx(240)
        assert color.saturation() == pytest.approx(100)
        assert color.value() == pytest.approx(50.2, abs=0.1)

    def test_black_has_stable_defaults(self):
        black = Color.from_rgb(0, 0, 0)
        assert black.hue() == 0
        assert black.saturation() == 0
        assert black.value() == 0

    def test_hue_range(self):
        for color in (Color.from_rgb(255, 0, 1), Color.from_rgb(255, 1, 0), Color.from_rgb(1, 2, 3)):
            assert 0 <= color.hue() < 360


class TestRoundTrip:
    """RGB -> HSV -> RGB reconstruction."""

    def test_round_trip_grid(self):
        for rgb in itertools.product(CHANNEL_SAMPLE, repeat=3):
            color = Color.from_rgb(*rgb)
            rebuilt = Color.from_hsv(color.hue(), color.saturation(), color.value())
            assert all(abs(a - b) <= 1 for a, b in zip(rebuilt.rgb(), rgb, strict=True)), rgb

    def test_round_trip_random(self):
        rng = random.Random(7026)
        for _ in range(2000):
            rgb = (rng.randint(0, 255), rng.randint(0, 255), rng.randint(0, 255))
            color = Color.from_rgb(*rgb)
            rebuilt = Color.from_hsv(color.hue(), color.saturation(), color.value())
            assert all(abs(a - b) <= 1 for a, b in zip(rebuilt.rgb(), rgb, strict=True)), rgb


class TestOff:
    """Off detection."""

    def test_black_is_off(self):
        assert Color.from_rgb(0, 0, 0).is_off() is True
        assert Color.OFF.is_off() is True

    def test_zero_value_is_off_whatever_the_hue(self):
        assert Color.from_hsv(200, 80, 0).is_off() is True

    def test_dim_color_is_not_off(self):
        assert Color.from_rgb(0, 0, 1).is_off() is False


class TestValueSemantics:
    """Equality, hashing, immutability and helpers."""

    def test_equality_by_rgb(self):
        assert Color.from_rgb(1, 2, 3) == Color(1, 2, 3)
        assert Color.from_hsv(0, 100, 100) == Color.from_rgb(255, 0, 0)
        assert Color.from_rgb(1, 2, 3) != Color.from_rgb(1, 2, 4)

    def test_hashable(self):
        assert len({Color.from_rgb(1, 2, 3), Color.from_rgb(1, 2, 3)}) == 1

    def test_immutable(self):
        color = Color.from_rgb(1, 2, 3)
        with pytest.raises(AttributeError):
            color.r = 5  # type: ignore[misc]

    def test_with_hsv_replaces_one_component(self):
        red = Color.from_rgb(255, 0, 0)
        assert red.with_hsv(hue=120) == Color.from_rgb(0, 255, 0)
        assert red.with_hsv(value=0) == Color.OFF
        assert red.with_hsv(saturation=0) == Color.WHITE

    def test_hex(self):
        assert Color.from_rgb(255, 16, 1).hex() == "#ff1001"

    def test_str_mentions_hex(self):
        assert "#00ff00" in str(Color.from_rgb(0, 255, 0))
