"""Bus transports for the VEML6070 driver.

Supports two modes:
- HARDWARE: smbus2 on a Linux I2C adapter (``/dev/i2c-N``)
- DIGITAL_TWIN: Simulated bus and device for testing without hardware

Use drivers.config to switch modes:
    from veml6070.drivers import config
    config.use_digital_twin()  # or config.use_hardware()

Bus Protocols:
    I2CBus and I2CBusOpener are the only transport surface the sensor
    lifecycle depends on.

    from veml6070.drivers import I2CBus, I2CBusOpener
"""

from veml6070.drivers import config
from veml6070.drivers.bus import I2CBus, I2CBusOpener
from veml6070.drivers.config import (
    DriverConfig,
    DriverFactory,
    DriverMode,
    configure,
    get_factory,
    use_digital_twin,
    use_hardware,
)
from veml6070.drivers.twin import (
    DigitalTwinBusOpener,
    DigitalTwinConfig,
    DigitalTwinI2CBus,
)

__all__ = [
    # Submodules
    "config",
    # Configuration
    "DriverMode",
    "DriverConfig",
    "DriverFactory",
    "get_factory",
    "configure",
    "use_digital_twin",
    "use_hardware",
    # Bus protocols
    "I2CBus",
    "I2CBusOpener",
    # Digital twin
    "DigitalTwinConfig",
    "DigitalTwinI2CBus",
    "DigitalTwinBusOpener",
]
