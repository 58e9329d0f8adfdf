"""Hardware I2C transport backed by smbus2.

Maps the I2CBus protocol onto ``smbus2.SMBus``:

- ``read_byte(address)``  -> SMBus.read_byte(address)
- ``write_byte(address, value)`` -> SMBus.write_byte(address, value)
- ``close()`` -> SMBus.close()

OSError raised by the kernel driver (NACK shows up as errno EREMOTEIO or
EIO) is converted into I2CError carrying the device address.

Example:
    from veml6070.drivers.smbus import SMBusOpener

    bus = SMBusOpener().open(1)  # /dev/i2c-1
    bus.write_byte(0x38, 0x06)
    bus.close()
"""

from __future__ import annotations

from smbus2 import SMBus

from veml6070.errors import I2CError
from veml6070.observability import get_logger

logger = get_logger(__name__)

__all__ = ["SMBusI2CBus", "SMBusOpener"]


class SMBusI2CBus:
    """I2CBus implementation wrapping an open ``smbus2.SMBus``."""

    def __init__(self, smbus: SMBus, bus_number: int) -> None:
        self._smbus = smbus
        self._bus_number = bus_number
        self._closed = False

    @property
    def bus_number(self) -> int:
        return self._bus_number

    @property
    def is_open(self) -> bool:
        return not self._closed

    def _ensure_open(self, address: int) -> None:
        if self._closed:
            raise I2CError(f"I2C bus {self._bus_number} is closed", address)

    def read_byte(self, address: int) -> int:
        """Read one byte from ``address``.

        Raises:
            I2CError: If the bus is closed or the transaction fails.
        """
        self._ensure_open(address)
        try:
            return self._smbus.read_byte(address)
        except OSError as e:
            raise I2CError(
                f"Read from 0x{address:02X} on bus {self._bus_number} failed: {e}",
                address,
            ) from e

    def write_byte(self, address: int, value: int) -> None:
        """Write one byte to ``address``.

        Raises:
            I2CError: If the bus is closed or the transaction fails.
        """
        self._ensure_open(address)
        try:
            self._smbus.write_byte(address, value)
        except OSError as e:
            raise I2CError(
                f"Write 0x{value:02X} to 0x{address:02X} on bus "
                f"{self._bus_number} failed: {e}",
                address,
            ) from e

    def close(self) -> None:
        """Close the underlying SMBus. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._smbus.close()
        except OSError as e:
            raise I2CError(f"Closing I2C bus {self._bus_number} failed: {e}") from e
        logger.debug("I2C bus closed", bus=self._bus_number)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"SMBusI2CBus(bus={self._bus_number}, {state})"


class SMBusOpener:
    """I2CBusOpener opening ``/dev/i2c-N`` through smbus2."""

    def open(self, bus_number: int) -> SMBusI2CBus:
        """Open the I2C adapter ``bus_number``.

        Args:
            bus_number: Adapter number, e.g. 1 for ``/dev/i2c-1`` on a
                Raspberry Pi.

        Returns:
            SMBusI2CBus ready for transactions.

        Raises:
            I2CError: If the adapter does not exist or permission is denied.
        """
        try:
            smbus = SMBus(bus_number)
        except OSError as e:
            raise I2CError(f"Failed to open I2C bus {bus_number}: {e}") from e
        logger.debug("I2C bus opened", bus=bus_number)
        return SMBusI2CBus(smbus, bus_number)
