"""Tests for transport selection (drivers.config)."""

from __future__ import annotations

from veml6070.devices.sensor import SensorConfig
from veml6070.drivers import config
from veml6070.drivers.config import DriverConfig, DriverFactory, DriverMode
from veml6070.drivers.smbus import SMBusOpener
from veml6070.drivers.twin import DigitalTwinBusOpener


class TestDriverFactory:
    """Tests for DriverFactory products."""

    def test_defaults_to_digital_twin(self):
        """Verifies the default factory simulates the sensor."""
        factory = DriverFactory()

        assert factory.config.mode is DriverMode.DIGITAL_TWIN
        assert isinstance(factory.create_bus_opener(), DigitalTwinBusOpener)

    def test_twin_opener_uses_config(self):
        """Verifies the twin opener exposes only the configured bus."""
        factory = DriverFactory(DriverConfig(bus_number=3, twin_uv_counts=1500))

        opener = factory.create_bus_opener()

        assert isinstance(opener, DigitalTwinBusOpener)
        assert opener.config.uv_counts == 1500
        assert opener.config.available_buses == (3,)

    def test_hardware_mode_creates_smbus_opener(self):
        """Verifies HARDWARE mode returns the smbus2 opener."""
        factory = DriverFactory(DriverConfig(mode=DriverMode.HARDWARE))

        assert isinstance(factory.create_bus_opener(), SMBusOpener)

    def test_create_sensor_config(self):
        """Verifies sensor settings are carried over."""
        factory = DriverFactory(
            DriverConfig(bus_number=0, rset=300.0, ignore_ack_errors=False)
        )

        assert factory.create_sensor_config() == SensorConfig(
            bus_number=0, rset=300.0, ignore_ack_errors=False
        )


class TestGlobalFactory:
    """Tests for the module-level factory helpers."""

    def test_get_factory_is_cached(self):
        """Verifies get_factory returns the same instance until reconfigured."""
        assert config.get_factory() is config.get_factory()

    def test_configure_replaces_factory(self):
        """Verifies configure installs a new factory."""
        before = config.get_factory()

        config.configure(DriverConfig(bus_number=4))

        assert config.get_factory() is not before
        assert config.get_factory().config.bus_number == 4

    def test_use_hardware_resets_settings(self):
        """Verifies switching modes without preserve_config resets settings."""
        config.configure(DriverConfig(bus_number=4, rset=300.0))

        config.use_hardware()

        factory_config = config.get_factory().config
        assert factory_config.mode is DriverMode.HARDWARE
        assert factory_config.bus_number == 1
        assert factory_config.rset == 270.0

    def test_use_digital_twin_preserves_settings(self):
        """Verifies preserve_config keeps everything except the mode."""
        config.configure(
            DriverConfig(mode=DriverMode.HARDWARE, bus_number=4, rset=300.0)
        )

        config.use_digital_twin(preserve_config=True)

        factory_config = config.get_factory().config
        assert factory_config.mode is DriverMode.DIGITAL_TWIN
        assert factory_config.bus_number == 4
        assert factory_config.rset == 300.0
