"""Digital twin I2C bus simulating a VEML6070.

Provides a simulated bus with a VEML6070 attached, for development and
testing without hardware. The twin mirrors the behavior the driver relies
on:

- Writes to CMD (0x38) latch the command byte.
- Reads from DATA_MSB (0x39) / DATA_LSB (0x33) return the configured UV
  counts scaled by the latched integration time, or 0 in shutdown.
- Reads from ARA (0x0C) fail by default, as on the real part.
- Any other address NACKs.

Faults can be injected per address or for open/close, and every
transaction is recorded for assertions.

Example:
    from veml6070.drivers.twin import DigitalTwinBusOpener, DigitalTwinConfig

    opener = DigitalTwinBusOpener(DigitalTwinConfig(uv_counts=600))
    sensor = Sensor(opener)
    await sensor.enable()
    value = await sensor.read()  # raw_value == 600 at 1T
    opener.last_bus.writes       # [(0x38, 0x06)]
"""

from __future__ import annotations

from dataclasses import dataclass, field

from veml6070.errors import I2CError
from veml6070.observability import get_logger
from veml6070.register import CommandRegister
from veml6070.types import I2CAddress, ShutdownMode

logger = get_logger(__name__)

__all__ = [
    "DigitalTwinConfig",
    "DigitalTwinI2CBus",
    "DigitalTwinBusOpener",
]


@dataclass
class DigitalTwinConfig:
    """Configuration for the simulated device and bus.

    Read live by open buses, so tests may change values between reads.

    Attributes:
        uv_counts: UV intensity expressed as 1T counts. The twin scales it
            by the active integration multiplier, clamped to 16 bits.
        ara_responds: When False (default) ARA reads fail like the real part.
        available_buses: Bus numbers that can be opened.
        fail_open: Make every open() fail.
        fail_close: Make close() fail (the bus is still marked closed).
        fail_read_addresses: Addresses whose reads fail.
        fail_write_addresses: Addresses whose writes fail.
    """

    uv_counts: int = 600
    ara_responds: bool = False
    available_buses: tuple[int, ...] = (0, 1)
    fail_open: bool = False
    fail_close: bool = False
    fail_read_addresses: set[int] = field(default_factory=set)
    fail_write_addresses: set[int] = field(default_factory=set)

    def __repr__(self) -> str:
        return (
            f"DigitalTwinConfig(uv_counts={self.uv_counts}, "
            f"buses={list(self.available_buses)})"
        )


class DigitalTwinI2CBus:
    """Simulated bus handle with one VEML6070 attached.

    Attributes:
        command: Last command byte accepted at CMD, None until written.
        reads: Addresses of every attempted read, in order.
        writes: (address, value) of every successful write, in order.

    Note:
        This class is NOT thread-safe.
    """

    def __init__(self, config: DigitalTwinConfig, bus_number: int) -> None:
        self._config = config
        self.bus_number = bus_number
        self.command: int | None = None
        self.reads: list[int] = []
        self.writes: list[tuple[int, int]] = []
        self._closed = False

    @property
    def is_open(self) -> bool:
        return not self._closed

    @property
    def command_writes(self) -> list[int]:
        """Values successfully written to the CMD address."""
        return [value for address, value in self.writes if address == I2CAddress.CMD]

    def _check(self, address: int, failing: set[int], action: str) -> None:
        if self._closed:
            raise I2CError(f"I2C bus {self.bus_number} is closed", address)
        if address in failing:
            raise I2CError(f"Simulated {action} failure at 0x{address:02X}", address)

    def _sample(self) -> int:
        """Current 16-bit sample given the latched command byte."""
        if self.command is None:
            return 0
        register = CommandRegister.from_hex(self.command)
        if register.get_shutdown_mode() == ShutdownMode.ENABLED:
            return 0
        scaled = self._config.uv_counts * register.get_integration_time().multiplier
        return max(0, min(0xFFFF, int(scaled)))

    def read_byte(self, address: int) -> int:
        self.reads.append(address)
        self._check(address, self._config.fail_read_addresses, "read")

        if address == I2CAddress.ARA:
            if not self._config.ara_responds:
                raise I2CError("No acknowledge from alert response address", address)
            return 0
        if address == I2CAddress.DATA_MSB:
            return self._sample() >> 8
        if address == I2CAddress.DATA_LSB:
            return self._sample() & 0xFF
        raise I2CError(f"No device at 0x{address:02X}", address)

    def write_byte(self, address: int, value: int) -> None:
        self._check(address, self._config.fail_write_addresses, "write")
        if address != I2CAddress.CMD:
            raise I2CError(f"Address 0x{address:02X} is not writable", address)
        if not 0 <= value <= 0xFF:
            raise I2CError(f"Invalid byte value {value}", address)

        self.command = value
        self.writes.append((address, value))
        logger.debug("Twin command latched", bus=self.bus_number, value=f"0x{value:02X}")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._config.fail_close:
            raise I2CError(f"Simulated close failure on bus {self.bus_number}")


class DigitalTwinBusOpener:
    """I2CBusOpener returning simulated buses.

    Attributes:
        config: Shared configuration, read live by every opened bus.
        buses: Every bus opened so far, in order.
    """

    def __init__(self, config: DigitalTwinConfig | None = None) -> None:
        self.config = config or DigitalTwinConfig()
        self.buses: list[DigitalTwinI2CBus] = []

    @property
    def last_bus(self) -> DigitalTwinI2CBus | None:
        """Most recently opened bus, or None if open() never succeeded."""
        return self.buses[-1] if self.buses else None

    @property
    def command_writes(self) -> list[int]:
        """CMD writes across every bus opened by this opener."""
        return [value for bus in self.buses for value in bus.command_writes]

    def open(self, bus_number: int) -> DigitalTwinI2CBus:
        """Open a simulated bus.

        Raises:
            I2CError: If fail_open is set or bus_number is not available.
        """
        if self.config.fail_open or bus_number not in self.config.available_buses:
            raise I2CError(f"Failed to open I2C bus {bus_number}: no such bus")

        bus = DigitalTwinI2CBus(self.config, bus_number)
        self.buses.append(bus)
        logger.debug("Twin bus opened", bus=bus_number, config=repr(self.config))
        return bus
