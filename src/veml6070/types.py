"""Enumerations and fixed constants for the VEML6070.

Kept in a separate module so the register, measurement and device layers can
import them without circular imports.

Values follow the Vishay VEML6070 datasheet (doc. 84277, pages 6-8) and the
"Designing the VEML6070 UV Light Sensor Into Applications" application note
(doc. 84310).
"""

from __future__ import annotations

from enum import Enum, IntEnum

__all__ = [
    "I2CAddress",
    "CommandRegisterBit",
    "ShutdownMode",
    "IntegrationTime",
    "AcknowledgeMode",
    "AcknowledgeThreshold",
    "UvIndexRiskLevel",
    "SensorState",
    "BusState",
    "DEFAULT_BUS_NUMBER",
    "DEFAULT_RSET_KOHM",
]

DEFAULT_BUS_NUMBER = 1
DEFAULT_RSET_KOHM = 270.0  # kΩ, reference board value


class I2CAddress(IntEnum):
    """7-bit I2C addresses used by the device.

    The VEML6070 answers on several addresses, one per function, instead of
    using register offsets behind a single address.
    """

    ARA = 0x0C  # Alert Response
    CMD = 0x38  # Command register (write)
    DATA_MSB = 0x39  # Data, most significant byte (read)
    DATA_LSB = 0x33  # Data, least significant byte (read)


class CommandRegisterBit(IntEnum):
    """Bit positions in the command register (0 = least significant)."""

    SD = 0  # Shutdown mode
    RESERVED_0 = 1  # Must be 1
    IT_0 = 2  # Integration time, low bit
    IT_1 = 3  # Integration time, high bit
    ACK_THD = 4  # Acknowledge threshold window
    ACK = 5  # Acknowledge activity
    RESERVED_1 = 6
    RESERVED_2 = 7


class ShutdownMode(IntEnum):
    """Value of the SD bit.

    DISABLED means the device is active and measuring. ENABLED puts it in
    shutdown, drawing less than 1 µA.
    """

    DISABLED = 0
    ENABLED = 1


class IntegrationTime(IntEnum):
    """Integration time code, stored as ``IT_1 << 1 | IT_0``."""

    IT_HALF_T = 0
    IT_1T = 1
    IT_2T = 2
    IT_4T = 3

    @property
    def multiplier(self) -> float:
        """Multiplier of the base integration time T for this code."""
        return _INTEGRATION_MULTIPLIERS[self]


_INTEGRATION_MULTIPLIERS: dict[IntegrationTime, float] = {
    IntegrationTime.IT_HALF_T: 0.5,
    IntegrationTime.IT_1T: 1.0,
    IntegrationTime.IT_2T: 2.0,
    IntegrationTime.IT_4T: 4.0,
}


class AcknowledgeMode(IntEnum):
    """Value of the ACK bit."""

    DISABLED = 0
    ENABLED = 1


class AcknowledgeThreshold(IntEnum):
    """Value of the ACK_THD bit (UV step count that triggers an ACK)."""

    ACK_102_STEPS = 0
    ACK_145_STEPS = 1


class UvIndexRiskLevel(IntEnum):
    """Exposure risk category derived from the UV index."""

    LOW = 0
    MODERATE = 1
    HIGH = 2
    VERY_HIGH = 3
    EXTREME = 4


class SensorState(Enum):
    """Lifecycle state of a Sensor."""

    DISABLED = "disabled"
    ENABLED = "enabled"


class BusState(Enum):
    """Ownership state of the sensor's bus handle."""

    CLOSED = "closed"
    OPEN = "open"
