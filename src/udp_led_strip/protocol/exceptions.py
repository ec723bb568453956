"""Exception types for LED strip protocol and validation errors.

Errors raise instead of returning None: a color that cannot be built or a
datagram that cannot be decoded is always an exception, and the caller decides
whether it is noise (dropped) or a user error (propagated).
"""

from __future__ import annotations


class LedStripError(Exception):
    """Base exception for all LED strip client errors.

    Catching this catches every error the client raises on purpose, while the
    subclasses keep the specific failure kinds apart.
    """


class ColorValidationError(LedStripError, ValueError):
    """A color component is outside its valid range.

    Attributes:
        component: Name of the offending component ("r", "hue", ...)
        value: The rejected value

    """

    def __init__(self, component: str, value: object, expected: str) -> None:
        self.component: str = component
        self.value: object = value
        super().__init__(f"Invalid {component}: {value!r} (expected {expected})")


class DatagramDecodeError(ColorValidationError):
    """Inbound datagram does not carry a color.

    Raised by the codec when a payload is not exactly three RGB bytes. The
    transport treats it as protocol noise and drops the datagram.

    Attributes:
        reason: Specific failure reason (e.g. "bad_length")
        data_preview: First 8 bytes of the payload

    """

    def __init__(self, reason: str, data: bytes = b"") -> None:
        self.reason: str = reason
        self.data_preview: bytes = data[:8]
        super().__init__("datagram", data[:8], f"3 RGB bytes, {reason}")


class StripConfigError(LedStripError, ValueError):
    """Accessory configuration could not be turned into a StripConfig."""
