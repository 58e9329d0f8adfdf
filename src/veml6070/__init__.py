"""Async driver for the Vishay VEML6070 UV light sensor over I2C.

Example:
    import asyncio

    from veml6070 import IntegrationTime, Sensor, SensorConfig
    from veml6070.drivers.smbus import SMBusOpener

    async def main():
        async with Sensor(SMBusOpener(), SensorConfig(bus_number=1)) as sensor:
            await sensor.set_integration_time(IntegrationTime.IT_2T)
            value = await sensor.read()
            print(value.uv_index.value, value.risk_level.name)

    asyncio.run(main())
"""

from veml6070.devices.sensor import Sensor, SensorConfig
from veml6070.errors import (
    CommandRegisterError,
    I2CError,
    LogicError,
    SensorError,
    VEML6070Error,
)
from veml6070.measurement import SensorValue, UvIndex
from veml6070.register import BitRegister, CommandRegister
from veml6070.types import (
    AcknowledgeMode,
    AcknowledgeThreshold,
    BusState,
    I2CAddress,
    IntegrationTime,
    SensorState,
    ShutdownMode,
    UvIndexRiskLevel,
)

__version__ = "0.1.0"

__all__ = [
    # Device
    "Sensor",
    "SensorConfig",
    # Register model
    "BitRegister",
    "CommandRegister",
    # Measurements
    "SensorValue",
    "UvIndex",
    # Enums
    "AcknowledgeMode",
    "AcknowledgeThreshold",
    "BusState",
    "I2CAddress",
    "IntegrationTime",
    "SensorState",
    "ShutdownMode",
    "UvIndexRiskLevel",
    # Errors
    "VEML6070Error",
    "LogicError",
    "CommandRegisterError",
    "I2CError",
    "SensorError",
]
