"""Error taxonomy for the VEML6070 driver.

All errors raised by this package derive from VEML6070Error, so callers can
catch a single type at their outermost boundary. Each concrete error also
derives from the closest built-in exception, which keeps ``except ValueError``
and ``except OSError`` handlers in calling code working as expected.

Hierarchy:
    VEML6070Error
    ├── LogicError            (ValueError)   invalid bit index/value
    ├── CommandRegisterError  (ValueError)   invalid named-field code
    ├── I2CError              (OSError)      bus transport failure
    └── SensorError           (RuntimeError) lifecycle failure

Wrapped causes use standard exception chaining::

    try:
        bus.write_byte(I2CAddress.CMD, register.to_byte())
    except Exception as e:
        raise SensorError("Failed to write command register") from e

The original error stays reachable through ``error.cause`` (an alias for
``__cause__``) for diagnostics.
"""

from __future__ import annotations

__all__ = [
    "VEML6070Error",
    "LogicError",
    "CommandRegisterError",
    "I2CError",
    "SensorError",
]


class VEML6070Error(Exception):
    """Base class for every error raised by the driver."""

    @property
    def cause(self) -> BaseException | None:
        """Return the wrapped error this one was raised from, if any.

        Returns:
            The chained ``__cause__`` exception, or None when the error was
            raised without ``from``.

        Example:
            >>> try:
            ...     await sensor.enable()
            ... except SensorError as e:
            ...     print(type(e.cause).__name__)
            I2CError
        """
        return self.__cause__


class LogicError(VEML6070Error, ValueError):
    """Invalid bit index or bit value passed to a BitRegister.

    Programming error; never retried.
    """


class CommandRegisterError(VEML6070Error, ValueError):
    """Invalid code passed to a named CommandRegister setter.

    Attributes:
        field: Name of the register field being set (e.g. "integration time").
        value: The rejected value, as passed by the caller.
    """

    def __init__(self, field: str, value: object, expected: str) -> None:
        """Build the error message from the offending field and value.

        Args:
            field: Human-readable field name.
            value: Rejected value.
            expected: Name of the enum whose members are accepted.
        """
        super().__init__(
            f"Invalid {field} provided: {value!r}, "
            f"expected a valid {expected} value"
        )
        self.field = field
        self.value = value


class I2CError(VEML6070Error, OSError):
    """Transport failure reported by an I2C bus implementation.

    Attributes:
        address: 7-bit device address of the failed transaction, or None
            for bus-level operations (open/close).
    """

    def __init__(self, message: str, address: int | None = None) -> None:
        super().__init__(message)
        self.address = address


class SensorError(VEML6070Error, RuntimeError):
    """Lifecycle-level failure (invalid state, failed commit, failed read)."""
