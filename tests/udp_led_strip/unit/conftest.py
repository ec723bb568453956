"""
Shared fixtures for LED strip unit tests.

Client tests run against FakeTransport; transport and end-to-end tests talk
to a LoopbackFixture socket on 127.0.0.1.
"""

import pytest

from tests.helpers.strip_doubles import FakeTransport, LoopbackFixture
from udp_led_strip.config import StripConfig


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def strip_config() -> StripConfig:
    """Short timings, no multicast, no passive refresh loop."""
    return StripConfig(
        host="127.0.0.1",
        local_port=0,
        multicast_group=None,
        poll_timeout=0.05,
        staleness_window=0.2,
        refresh_interval=0.2,
        passive_poll_nudge=False,
        name="Test strip",
    )


@pytest.fixture
def loopback_fixture():
    fixture = LoopbackFixture()
    yield fixture
    fixture.close()


@pytest.fixture
def loopback_config(loopback_fixture: LoopbackFixture) -> StripConfig:
    """Config pointing at the loopback fixture, client bound to an ephemeral port."""
    return StripConfig(
        host="127.0.0.1",
        port=loopback_fixture.port,
        local_port=0,
        multicast_group=None,
        poll_timeout=0.5,
        staleness_window=10.0,
        refresh_interval=5.0,
        passive_poll_nudge=False,
    )
