"""Pytest configuration and fixtures for veml6070 tests.

Provides a fake clock so lifecycle tests never really wait for the sensor
refresh interval, digital twin bus openers for hardware-free testing, and
isolation of the global logging and driver factory state between tests.
"""

from __future__ import annotations

import pytest

from veml6070.devices.sensor import Sensor, SensorConfig
from veml6070.drivers import config as driver_config
from veml6070.drivers.twin import DigitalTwinBusOpener, DigitalTwinConfig
from veml6070.observability import reset_logging


class FakeClock:
    """Clock that records requested sleeps instead of waiting.

    Attributes:
        now: Value returned by monotonic(); advanced by every sleep.
        sleeps: Every duration passed to sleep(), in seconds.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(autouse=True)
def isolate_global_state():
    """Reset logging handlers and the global driver factory around each test.

    Business context:
    Both configure_logging() and drivers.config keep module-level state.
    Tests that configure either must not leak into the next test.

    Yields:
        None.
    """
    driver_config._factory = None
    yield
    driver_config._factory = None
    reset_logging()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a FakeClock recording refresh waits."""
    return FakeClock()


@pytest.fixture
def twin_config() -> DigitalTwinConfig:
    """Provide a twin configuration reporting 600 counts at 1T on bus 1."""
    return DigitalTwinConfig(uv_counts=600, available_buses=(1,))


@pytest.fixture
def twin_opener(twin_config: DigitalTwinConfig) -> DigitalTwinBusOpener:
    """Provide a digital twin opener sharing ``twin_config``.

    Tests may mutate twin_config after construction; open buses read the
    configuration live, so fault injection takes effect immediately.
    """
    return DigitalTwinBusOpener(twin_config)


@pytest.fixture
def sensor(twin_opener: DigitalTwinBusOpener, fake_clock: FakeClock) -> Sensor:
    """Provide a disabled Sensor on the twin with default RSET (270 kΩ)."""
    return Sensor(twin_opener, SensorConfig(bus_number=1), clock=fake_clock)
