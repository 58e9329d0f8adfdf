"""VEML6070 sensor lifecycle.

Provides the async state machine that owns the bus handle and the command
register, sequences ACK clearing and register writes, and turns timed data
reads into SensorValue measurements.

Key Components:
- Sensor: Lifecycle state machine with bus opener injection
- SensorConfig: Bus number, RSET and ACK handling
- Clock / SystemClock: Injectable time source for the refresh wait

Architecture:
    The Sensor follows a driver injection pattern:

    ┌─────────────────────────────────────────────────┐
    │                     Sensor                      │
    │  (state machine, register staging, readings)    │
    └─────────────────────────────────────────────────┘
                          │
                          │ uses
                          ▼
    ┌─────────────────────────────────────────────────┐
    │            I2CBusOpener / I2CBus                │
    │        (single-byte I2C transactions)           │
    └─────────────────────────────────────────────────┘
                    │                │
        ┌───────────┘                └───────────┐
        ▼                                        ▼
    ┌─────────────────┐              ┌─────────────────┐
    │ DigitalTwin     │              │  SMBus          │
    │ BusOpener       │              │  Opener         │
    │ (simulation)    │              │  (smbus2)       │
    └─────────────────┘              └─────────────────┘

States:
    (DISABLED, CLOSED) --enable()--> (ENABLED, OPEN) --disable()--> (DISABLED, CLOSED)

Example:
    import asyncio

    from veml6070.devices.sensor import Sensor
    from veml6070.drivers.smbus import SMBusOpener

    async def main():
        async with Sensor(SMBusOpener()) as sensor:
            value = await sensor.read()
            print(value.uv_index.value, value.risk_level.name)

    asyncio.run(main())
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from types import TracebackType
from typing import TYPE_CHECKING, Protocol, TypedDict, TypeVar

from veml6070.errors import SensorError
from veml6070.measurement import SensorValue, refresh_time_ms
from veml6070.observability import LogContext, get_logger
from veml6070.register import CommandRegister
from veml6070.types import (
    DEFAULT_BUS_NUMBER,
    DEFAULT_RSET_KOHM,
    AcknowledgeMode,
    AcknowledgeThreshold,
    BusState,
    I2CAddress,
    IntegrationTime,
    SensorState,
    ShutdownMode,
)

if TYPE_CHECKING:
    from veml6070.drivers.bus import I2CBus, I2CBusOpener

logger = get_logger(__name__)

__all__ = [
    "Sensor",
    "SensorConfig",
    "SensorStatus",
    "Clock",
    "SystemClock",
]

_T = TypeVar("_T")


class Clock(Protocol):  # pragma: no cover
    """Protocol for time functions (injectable for testing).

    Example:
        class FakeClock:
            def __init__(self):
                self.sleeps = []

            def monotonic(self) -> float:
                return 0.0

            async def sleep(self, seconds: float) -> None:
                self.sleeps.append(seconds)

        sensor = Sensor(opener, clock=FakeClock())
    """

    def monotonic(self) -> float:
        """Return monotonic time in seconds."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task for ``seconds`` without busy-waiting."""
        ...


class SystemClock:
    """Default clock using time.monotonic and asyncio.sleep."""

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


@dataclass
class SensorConfig:
    """Configuration for a Sensor.

    Attributes:
        bus_number: I2C adapter number passed to the bus opener.
        rset: RSET resistor value on the board, in kΩ. Scales both the
            refresh time and the UV index conversion.
        ignore_ack_errors: When True (default), a failed ARA read while
            clearing the ACK state is ignored. The VEML6070 is documented to
            never answer meaningfully on ARA, so the read usually fails.
    """

    bus_number: int = DEFAULT_BUS_NUMBER
    rset: float = DEFAULT_RSET_KOHM
    ignore_ack_errors: bool = True

    def __post_init__(self) -> None:
        if self.bus_number < 0:
            raise ValueError(f"bus_number must be >= 0, got {self.bus_number}")
        if self.rset <= 0:
            raise ValueError(f"rset must be positive (kΩ), got {self.rset}")


class SensorStatus(TypedDict):
    """Snapshot returned by Sensor.get_status().

    Keys:
        state: "enabled" or "disabled".
        bus_state: "open" or "closed".
        bus_number: Configured I2C adapter.
        rset: Configured RSET in kΩ.
        command_register: Canonical register as a hex string.
        integration_time: Active integration time name.
        refresh_time_ms: Wait applied before each read.
        read_count: Successful reads since construction.
        error_count: Failed reads since construction.
        enabled_since: ISO timestamp of the last successful enable().
    """

    state: str
    bus_state: str
    bus_number: int
    rset: float
    command_register: str
    integration_time: str
    refresh_time_ms: float
    read_count: int
    error_count: int
    enabled_since: str | None


class Sensor:
    """Async lifecycle for a VEML6070 UV sensor.

    Owns one canonical CommandRegister and, while enabled, one bus handle.
    Every register change is staged on a clone, written to the device, and
    adopted only once the write has succeeded, so the canonical register
    always matches what the device last acknowledged.

    Operations that touch the bus (enable, disable, read, setters) are
    serialized with a per-instance asyncio.Lock. Blocking bus calls run in
    the default executor so the event loop stays responsive.

    Example:
        sensor = await Sensor.initialize(SMBusOpener(), SensorConfig(rset=300))
        await sensor.set_integration_time(IntegrationTime.IT_2T)
        value = await sensor.read()
        await sensor.disable()
    """

    def __init__(
        self,
        opener: I2CBusOpener,
        config: SensorConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize a disabled sensor. No bus I/O happens here.

        Business context: Construction and enabling are separate so a
        caller can adjust configuration or inject a digital twin before
        the device is touched. Use Sensor.initialize() to do both at once.

        Args:
            opener: I2CBusOpener used by enable() to acquire the bus.
            config: Sensor configuration. None uses SensorConfig() defaults
                (bus 1, RSET 270 kΩ, ACK errors ignored).
            clock: Time source for the refresh wait. None uses SystemClock.

        Example:
            >>> sensor = Sensor(DigitalTwinBusOpener())
            >>> sensor.state
            <SensorState.DISABLED: 'disabled'>
        """
        self._opener = opener
        self._config = config or SensorConfig()
        self._clock: Clock = clock or SystemClock()
        self._register = CommandRegister()
        self._state = SensorState.DISABLED
        self._bus: I2CBus | None = None
        self._lock = asyncio.Lock()
        self._enabled_since: datetime | None = None
        self._last_value: SensorValue | None = None
        self._read_count = 0
        self._error_count = 0

    @classmethod
    async def initialize(
        cls,
        opener: I2CBusOpener,
        config: SensorConfig | None = None,
        clock: Clock | None = None,
    ) -> Sensor:
        """Create a sensor and enable it.

        Raises:
            SensorError: If the bus cannot be opened or the register
                cannot be written.
        """
        sensor = cls(opener, config, clock)
        await sensor.enable()
        return sensor

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> SensorState:
        return self._state

    @property
    def bus_state(self) -> BusState:
        return BusState.OPEN if self._bus is not None else BusState.CLOSED

    @property
    def config(self) -> SensorConfig:
        return self._config

    @property
    def command_register(self) -> CommandRegister:
        """Copy of the canonical register. Editing it has no effect."""
        return self._register.clone()

    @property
    def last_value(self) -> SensorValue | None:
        """Most recent successful measurement, or None."""
        return self._last_value

    def get_shutdown_mode(self) -> ShutdownMode:
        return self._register.get_shutdown_mode()

    def get_integration_time(self) -> IntegrationTime:
        return self._register.get_integration_time()

    def get_acknowledge_mode(self) -> AcknowledgeMode:
        return self._register.get_acknowledge_mode()

    def get_acknowledge_threshold(self) -> AcknowledgeThreshold:
        return self._register.get_acknowledge_threshold()

    def get_refresh_time(self) -> float:
        """Return the wait before each read, in milliseconds.

        Depends on RSET and the active integration time; 112.5 ms at the
        defaults. Callers polling in a loop can subtract it from their
        period to keep a fixed sample rate.
        """
        return refresh_time_ms(self._config.rset, self.get_integration_time())

    def get_status(self) -> SensorStatus:
        """Return a snapshot of state, configuration and counters.

        Never touches the bus.
        """
        return SensorStatus(
            state=self._state.value,
            bus_state=self.bus_state.value,
            bus_number=self._config.bus_number,
            rset=self._config.rset,
            command_register=f"0x{self._register.to_byte():02X}",
            integration_time=self.get_integration_time().name,
            refresh_time_ms=self.get_refresh_time(),
            read_count=self._read_count,
            error_count=self._error_count,
            enabled_since=(
                self._enabled_since.isoformat() if self._enabled_since else None
            ),
        )

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def enable(self) -> None:
        """Open the bus and take the device out of shutdown.

        Steps run strictly in order: open the bus, stage a register with
        shutdown disabled, commit it, then mark the sensor enabled.

        If the commit fails the freshly opened bus is closed again, so the
        sensor stays fully disabled (state DISABLED, bus CLOSED) and
        enable() can simply be retried.

        Business context: The device powers up active, but a previous
        process may have left it in shutdown. Writing the register on
        enable puts it in a known configuration.

        Raises:
            SensorError: If the sensor is already enabled, the bus cannot
                be opened, or the register commit fails. The original
                error is available as ``error.cause``.

        Example:
            >>> await sensor.enable()
            >>> sensor.state, sensor.bus_state
            (<SensorState.ENABLED: 'enabled'>, <BusState.OPEN: 'open'>)
        """
        async with self._lock:
            if self._state is not SensorState.DISABLED:
                raise SensorError(
                    f"Cannot enable sensor: invalid state {self._state.value}"
                )
            await self._enable_locked()

    async def disable(self) -> None:
        """Put the device into shutdown and release the bus.

        The bus is closed only after the shutdown command was written. If
        the write fails the sensor stays enabled with the bus open.

        Raises:
            SensorError: If the sensor is not enabled, the commit fails,
                or closing the bus fails. In the last case the sensor is
                still considered disabled.
        """
        async with self._lock:
            if self._state is not SensorState.ENABLED:
                raise SensorError(
                    f"Cannot disable sensor: invalid state {self._state.value}"
                )
            await self._disable_locked()

    async def _enable_locked(self) -> None:
        """Open, stage and commit. Caller holds the lock and checked DISABLED."""
        bus_number = self._config.bus_number
        with LogContext(bus=bus_number, operation="enable"):
            logger.info("Enabling sensor", rset=self._config.rset)

            try:
                self._bus = await self._run(self._opener.open, bus_number)
            except Exception as e:
                raise SensorError(f"Failed to open I2C bus {bus_number}") from e

            staged = self._register.clone()
            staged.set_shutdown_mode(ShutdownMode.DISABLED)
            try:
                await self._commit(staged)
            except SensorError:
                await self._release_bus_after_failure()
                raise

            self._state = SensorState.ENABLED
            self._enabled_since = datetime.now(UTC)
            logger.info(
                "Sensor enabled",
                register=f"0x{self._register.to_byte():02X}",
            )

    async def _disable_locked(self) -> None:
        """Commit shutdown and close. Caller holds the lock and checked ENABLED."""
        with LogContext(bus=self._config.bus_number, operation="disable"):
            staged = self._register.clone()
            staged.set_shutdown_mode(ShutdownMode.ENABLED)
            await self._commit(staged)

            bus = self._require_bus()
            self._bus = None
            self._state = SensorState.DISABLED
            self._enabled_since = None

            try:
                await self._run(bus.close)
            except Exception as e:
                raise SensorError(
                    f"Failed to close I2C bus {self._config.bus_number}"
                ) from e

            logger.info("Sensor disabled")

    async def read(self) -> SensorValue:
        """Take one measurement.

        Waits for one refresh interval (get_refresh_time()) so the device
        has a complete sample, then reads the MSB and LSB data bytes and
        converts them with the integration time active at that moment.

        Business context: The VEML6070 free-runs and exposes only its
        latest sample, so waiting a full refresh interval guarantees the
        value reflects the current configuration.

        Returns:
            SensorValue with raw value, normalized value, UV index and
            risk level.

        Raises:
            SensorError: If the sensor is not enabled (no bus I/O is
                performed), or any read fails. No partial value is
                returned.

        Example:
            >>> value = await sensor.read()
            >>> print(f"UV index {value.uv_index.value} ({value.risk_level.name})")
            UV index 3 (MODERATE)
        """
        async with self._lock:
            if self._state is not SensorState.ENABLED:
                raise SensorError(
                    f"Cannot read sensor: invalid state {self._state.value}"
                )

            bus = self._require_bus()
            integration_time = self._register.get_integration_time()
            delay_ms = refresh_time_ms(self._config.rset, integration_time)

            with LogContext(bus=self._config.bus_number, operation="read"):
                try:
                    await self._clock.sleep(delay_ms / 1000)
                    msb = await self._run(bus.read_byte, I2CAddress.DATA_MSB)
                    lsb = await self._run(bus.read_byte, I2CAddress.DATA_LSB)
                    value = SensorValue.from_raw(
                        ((msb & 0xFF) << 8) | (lsb & 0xFF),
                        integration_time,
                        self._config.rset,
                    )
                except Exception as e:
                    self._error_count += 1
                    raise SensorError("Failed to read UV sample") from e

                self._read_count += 1
                self._last_value = value
                logger.debug(
                    "Sample read",
                    raw=value.raw_value,
                    uv_index=value.uv_index.value,
                    delay_ms=delay_ms,
                )
                return value

    # ------------------------------------------------------------------ #
    # Live configuration
    # ------------------------------------------------------------------ #

    async def set_integration_time(self, code: IntegrationTime | int) -> None:
        """Change the integration time on the running device.

        Longer integration times raise sensitivity and the refresh time
        together. Readings are normalized back to 1T either way.

        Raises:
            SensorError: If the sensor is not enabled, the code is invalid
                (cause is CommandRegisterError), or the commit fails. The
                canonical register is unchanged in every failure case.
        """
        await self._update_register(
            "integration time", lambda staged: staged.set_integration_time(code)
        )

    async def set_acknowledge_mode(self, mode: AcknowledgeMode | int) -> None:
        """Enable or disable the device's ACK activity.

        Raises:
            SensorError: As for set_integration_time().
        """
        await self._update_register(
            "acknowledge mode", lambda staged: staged.set_acknowledge_mode(mode)
        )

    async def set_acknowledge_threshold(
        self, code: AcknowledgeThreshold | int
    ) -> None:
        await self._update_register(
            "acknowledge threshold",
            lambda staged: staged.set_acknowledge_threshold(code),
        )

    async def _update_register(
        self, field: str, mutate: Callable[[CommandRegister], None]
    ) -> None:
        """Clone, mutate, commit and adopt the register under the lock."""
        async with self._lock:
            if self._state is not SensorState.ENABLED:
                raise SensorError(
                    f"Cannot set {field}: invalid state {self._state.value}"
                )

            staged = self._register.clone()
            try:
                mutate(staged)
            except Exception as e:
                raise SensorError(f"Cannot set {field}") from e

            with LogContext(bus=self._config.bus_number, operation=f"set {field}"):
                await self._commit(staged)
                logger.info(
                    "Sensor configuration changed",
                    field=field,
                    register=f"0x{staged.to_byte():02X}",
                )

    # ------------------------------------------------------------------ #
    # Bus helpers
    # ------------------------------------------------------------------ #

    async def _run(self, func: Callable[..., _T], *args: object) -> _T:
        """Run a blocking bus call in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    def _require_bus(self) -> I2CBus:
        if self._bus is None:
            raise SensorError("I2C bus is not open")
        return self._bus

    async def _clear_ack_state(self, bus: I2CBus) -> None:
        """Read and discard one byte from the Alert Response address.

        Required before every command write on this device family.
        Failures are ignored unless config.ignore_ack_errors is False.
        """
        try:
            await self._run(bus.read_byte, I2CAddress.ARA)
        except Exception as e:
            if not self._config.ignore_ack_errors:
                raise SensorError("Failed to clear ACK state") from e
            logger.debug("ACK state read failed, ignoring", error=str(e))

    async def _commit(self, staged: CommandRegister) -> None:
        """Write a staged register and adopt it once the write succeeds.

        Raises:
            SensorError: If the bus is not open, ACK clearing fails (when
                not ignored), or the write fails. The canonical register is
                left untouched.
        """
        bus = self._require_bus()
        await self._clear_ack_state(bus)

        value = staged.to_byte()
        try:
            await self._run(bus.write_byte, I2CAddress.CMD, value)
        except Exception as e:
            raise SensorError(
                f"Failed to write command register value 0x{value:02X}"
            ) from e

        self._register = staged
        logger.debug("Command register committed", value=f"0x{value:02X}")

    async def _release_bus_after_failure(self) -> None:
        """Close the bus after a failed enable, keeping the sensor disabled."""
        bus, self._bus = self._bus, None
        if bus is None:
            return
        try:
            await self._run(bus.close)
        except Exception as e:
            logger.warning("Failed to close I2C bus after failed enable", error=str(e))

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> Sensor:
        """Enable the sensor if needed and return it.

        The state check and the enable run under one lock acquisition, so a
        concurrent disable() cannot slip in between.
        """
        async with self._lock:
            if self._state is SensorState.DISABLED:
                await self._enable_locked()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Disable the sensor if it is still enabled."""
        async with self._lock:
            if self._state is SensorState.ENABLED:
                await self._disable_locked()

    def __repr__(self) -> str:
        return (
            f"Sensor(bus={self._config.bus_number}, rset={self._config.rset}, "
            f"state={self._state.value}, register=0x{self._register.to_byte():02X})"
        )
