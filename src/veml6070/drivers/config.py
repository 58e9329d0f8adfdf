"""Driver configuration and factory.

Supports switching between the real smbus2 transport and the digital twin
for testing and development without a sensor attached.

Example:
    from veml6070.drivers import config

    config.use_hardware()
    factory = config.get_factory()
    sensor = Sensor(factory.create_bus_opener(), factory.create_sensor_config())
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

from veml6070.drivers.twin import DigitalTwinBusOpener, DigitalTwinConfig
from veml6070.types import DEFAULT_BUS_NUMBER, DEFAULT_RSET_KOHM

if TYPE_CHECKING:
    from veml6070.devices.sensor import SensorConfig
    from veml6070.drivers.bus import I2CBusOpener

__all__ = [
    "DriverMode",
    "DriverConfig",
    "DriverFactory",
    "get_factory",
    "configure",
    "use_hardware",
    "use_digital_twin",
]


class DriverMode(Enum):
    """Driver mode selection."""

    HARDWARE = "hardware"  # smbus2 on /dev/i2c-N
    DIGITAL_TWIN = "digital_twin"  # Simulated bus and device


@dataclass
class DriverConfig:
    """Configuration for transport selection and sensor settings.

    Attributes:
        mode: HARDWARE for a real bus, DIGITAL_TWIN for simulation.
        bus_number: I2C adapter number (``/dev/i2c-N``).
        rset: RSET resistor value on the board, in kΩ.
        ignore_ack_errors: Swallow failures of the ACK-clearing ARA read.
        twin_uv_counts: Simulated 1T UV counts in digital twin mode.
    """

    mode: DriverMode = DriverMode.DIGITAL_TWIN
    bus_number: int = DEFAULT_BUS_NUMBER
    rset: float = DEFAULT_RSET_KOHM
    ignore_ack_errors: bool = True
    twin_uv_counts: int = 600


class DriverFactory:
    """Factory for bus openers and sensor configuration.

    Thread Safety:
        Not thread-safe. Configure the global factory once at startup.
    """

    def __init__(self, config: DriverConfig | None = None) -> None:
        """Initialize the factory.

        Args:
            config: Driver configuration. None uses DriverConfig() defaults
                (digital twin, bus 1, RSET 270 kΩ).
        """
        self.config = config or DriverConfig()

    def create_bus_opener(self) -> I2CBusOpener:
        """Create the bus opener for the configured mode.

        Returns:
            SMBusOpener in HARDWARE mode, DigitalTwinBusOpener otherwise.

        Raises:
            ImportError: If smbus2 is unavailable in HARDWARE mode.
        """
        if self.config.mode == DriverMode.HARDWARE:
            from veml6070.drivers.smbus import SMBusOpener

            return SMBusOpener()
        return DigitalTwinBusOpener(
            DigitalTwinConfig(
                uv_counts=self.config.twin_uv_counts,
                available_buses=(self.config.bus_number,),
            )
        )

    def create_sensor_config(self) -> SensorConfig:
        """Build the SensorConfig matching this driver configuration."""
        from veml6070.devices.sensor import SensorConfig

        return SensorConfig(
            bus_number=self.config.bus_number,
            rset=self.config.rset,
            ignore_ack_errors=self.config.ignore_ack_errors,
        )


_factory: DriverFactory | None = None


def get_factory() -> DriverFactory:
    """Return the global factory, creating a digital twin one on first use."""
    global _factory

    if _factory is None:
        _factory = DriverFactory()
    return _factory


def configure(config: DriverConfig) -> None:
    """Replace the global factory with one using ``config``."""
    global _factory

    _factory = DriverFactory(config)


def use_hardware(preserve_config: bool = False) -> None:
    """Switch the global factory to the smbus2 transport.

    Args:
        preserve_config: Keep bus number, RSET and other settings from the
            current factory. When False, every other setting is reset.
    """
    _switch_mode(DriverMode.HARDWARE, preserve_config)


def use_digital_twin(preserve_config: bool = False) -> None:
    """Switch the global factory to the digital twin."""
    _switch_mode(DriverMode.DIGITAL_TWIN, preserve_config)


def _switch_mode(mode: DriverMode, preserve_config: bool) -> None:
    if preserve_config:
        configure(replace(get_factory().config, mode=mode))
    else:
        configure(DriverConfig(mode=mode))
