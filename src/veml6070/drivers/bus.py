"""I2C bus protocols consumed by the sensor lifecycle.

Provides the abstraction over the bus transport so the lifecycle can be
driven by real hardware (smbus2) or by the digital twin without changes.

Protocols:
    I2CBus: An open bus handle issuing single-byte transactions
    I2CBusOpener: Factory opening a bus by number

Example:
    # For testing - create mock implementations
    class MockBus:
        def __init__(self):
            self.writes = []

        def read_byte(self, address):
            return 0

        def write_byte(self, address, value):
            self.writes.append((address, value))

        def close(self):
            pass

    class MockOpener:
        def open(self, bus_number):
            return MockBus()

    sensor = Sensor(MockOpener())

Testing:
    See tests/drivers/test_twin.py and tests/test_sensor.py for
    the DigitalTwinBusOpener used throughout the test suite.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

__all__ = ["I2CBus", "I2CBusOpener"]


@runtime_checkable
class I2CBus(Protocol):  # pragma: no cover
    """Protocol for an open I2C bus handle.

    The VEML6070 has no register pointer: every transaction is a single
    byte read from or written to one of its fixed 7-bit addresses.

    Implementations should raise veml6070.errors.I2CError on transport
    failures (NACK, timeout, closed bus). The lifecycle wraps whatever is
    raised into SensorError, so other exception types still surface
    correctly, only with a less specific cause.

    Not required to be thread-safe: a Sensor owns its handle exclusively
    and serializes its operations.
    """

    def read_byte(self, address: int) -> int:
        """Read a single byte from the device at a 7-bit address.

        Args:
            address: 7-bit I2C address (0x00-0x7F).

        Returns:
            Byte value 0-255.

        Raises:
            I2CError: On NACK, timeout or closed bus.
        """
        ...

    def write_byte(self, address: int, value: int) -> None:
        """Write a single byte to the device at a 7-bit address.

        Args:
            address: 7-bit I2C address (0x00-0x7F).
            value: Byte value 0-255.

        Raises:
            I2CError: On NACK, timeout or closed bus.
        """
        ...

    def close(self) -> None:
        """Release the bus.

        Raises:
            I2CError: If the underlying device cannot be closed.
        """
        ...


@runtime_checkable
class I2CBusOpener(Protocol):  # pragma: no cover
    """Protocol for opening I2C buses by adapter number.

    Business context: The lifecycle acquires the bus in enable() and
    releases it in disable(), so it needs a factory rather than an already
    open handle.
    """

    def open(self, bus_number: int) -> I2CBus:
        """Open the bus with the given adapter number (``/dev/i2c-N``).

        Raises:
            I2CError: If the bus does not exist or cannot be opened.
        """
        ...
