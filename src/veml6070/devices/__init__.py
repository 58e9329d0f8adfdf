"""Device layer for the VEML6070.

The Sensor class wraps an injected bus opener with the lifecycle state
machine, register staging and measurement pipeline.

Example:
    from veml6070.devices import Sensor, SensorConfig
    from veml6070.drivers import DigitalTwinBusOpener

    async with Sensor(DigitalTwinBusOpener(), SensorConfig(rset=270)) as sensor:
        value = await sensor.read()
"""

from veml6070.devices.sensor import (
    Clock,
    Sensor,
    SensorConfig,
    SensorStatus,
    SystemClock,
)

__all__ = [
    "Clock",
    "Sensor",
    "SensorConfig",
    "SensorStatus",
    "SystemClock",
]
