"""Bit-level model of the VEML6070 command register.

Key components:
- BitRegister: one byte with single-bit and bulk bit access
- CommandRegister: BitRegister with the datasheet's named fields

The command register is the only writable state on the device. Its layout,
least significant bit first::

    bit  7    6    5    4        3     2     1     0
         RES  RES  ACK  ACK_THD  IT_1  IT_0  1    SD

Example:
    from veml6070.register import CommandRegister
    from veml6070.types import IntegrationTime

    register = CommandRegister()
    register.set_integration_time(IntegrationTime.IT_2T)
    bus.write_byte(I2CAddress.CMD, register.to_byte())  # 0x0A
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import IntEnum
from typing import TypeVar

from veml6070.errors import CommandRegisterError, LogicError
from veml6070.types import (
    AcknowledgeMode,
    AcknowledgeThreshold,
    CommandRegisterBit,
    IntegrationTime,
    ShutdownMode,
)

__all__ = [
    "BitRegister",
    "CommandRegister",
    "BitValues",
    "BIT_COUNT",
]

BIT_COUNT = 8

#: Bulk bit values: either index -> value, or a sequence ordered by index.
BitValues = Mapping[int, int] | Sequence[int]

_RegisterT = TypeVar("_RegisterT", bound="BitRegister")
_EnumT = TypeVar("_EnumT", bound=IntEnum)


def _validate_bit(index: int, value: int) -> None:
    """Raise LogicError unless index is in [0, 7] and value is 0 or 1."""
    if not isinstance(index, int) or not 0 <= index < BIT_COUNT:
        raise LogicError(
            f"Invalid bit index provided: {index!r}, expected a value from 0 to 7"
        )
    if not isinstance(value, int) or value not in (0, 1):
        raise LogicError(f"Invalid bit value provided: {value!r}, expected 0 or 1")


class BitRegister:
    """A single byte with individually addressable bits.

    Bit indices run from 0 (least significant) to 7 (most significant).
    Mutations happen in place; reads never mutate.

    Example:
        >>> reg = BitRegister.from_hex(0x06)
        >>> reg.read_bits()
        (0, 1, 1, 0, 0, 0, 0, 0)
        >>> reg.write_bit(0, 1)
        >>> hex(reg.to_byte())
        '0x7'
    """

    __slots__ = ("_value",)

    def __init__(self, value: int = 0) -> None:
        """Create a register holding ``value``.

        Args:
            value: Initial raw byte, 0-255. Defaults to all bits cleared.

        Raises:
            LogicError: If value is not an integer in 0-255.
        """
        if not isinstance(value, int) or not 0 <= value <= 0xFF:
            raise LogicError(
                f"Invalid byte value provided: {value!r}, expected 0x00-0xFF"
            )
        self._value = value

    @classmethod
    def from_hex(cls: type[_RegisterT], value: int) -> _RegisterT:
        """Create a register from a raw byte value such as ``0x06``."""
        return cls(value)

    @classmethod
    def from_bits(cls: type[_RegisterT], bits: BitValues) -> _RegisterT:
        """Create a register with only the given bits set.

        Args:
            bits: Mapping of index to value, or a sequence of up to eight
                values ordered by index.

        Raises:
            LogicError: If any entry is invalid or more than 8 are supplied.
        """
        register = cls.from_hex(0)
        register.write_bits(bits)
        return register

    def read_bit(self, index: int) -> int:
        """Return the value (0 or 1) of the bit at ``index``.

        Raises:
            LogicError: If index is outside 0-7.
        """
        _validate_bit(index, 0)
        return (self._value >> index) & 1

    def read_bits(self) -> tuple[int, ...]:
        """Return all eight bit values ordered from index 0 to 7."""
        return tuple((self._value >> index) & 1 for index in range(BIT_COUNT))

    def write_bit(self, index: int, value: int) -> None:
        """Set the bit at ``index`` to ``value``.

        Args:
            index: Bit index, 0 (LSB) to 7 (MSB).
            value: 0 or 1. ``True``/``False`` are accepted.

        Raises:
            LogicError: If index or value is invalid. The register is left
                unchanged.
        """
        _validate_bit(index, value)
        if value:
            self._value |= 1 << index
        else:
            self._value &= ~(1 << index) & 0xFF

    def write_bits(self, bits: BitValues) -> None:
        """Write several bits at once with all-or-nothing semantics.

        Every entry is validated before any bit is written, so a rejected
        call never leaves the register half updated. Bits that are not
        supplied keep their current value.

        Args:
            bits: Mapping of index to value, or a sequence of up to eight
                values where the position is the bit index.

        Raises:
            LogicError: If more than 8 entries are supplied, or any index
                or value is invalid.

        Example:
            >>> reg = BitRegister()
            >>> reg.write_bits({2: 1, 3: 1})
            >>> reg.to_byte()
            12
        """
        items = list(bits.items() if isinstance(bits, Mapping) else enumerate(bits))
        if len(items) > BIT_COUNT:
            raise LogicError(
                f"Too many bit values provided: {len(items)}, expected at most 8"
            )
        for index, value in items:
            _validate_bit(index, value)
        for index, value in items:
            self.write_bit(index, value)

    def to_byte(self) -> int:
        """Return the raw byte value (0-255)."""
        return self._value

    def to_bytes(self) -> bytes:
        """Return the register as a one-byte ``bytes`` object."""
        return bytes([self._value])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitRegister):
            return NotImplemented
        return type(self) is type(other) and self._value == other._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}(0x{self._value:02X})"


class CommandRegister(BitRegister):
    """The VEML6070 command register with named field accessors.

    A fresh register holds the datasheet defaults: shutdown disabled (device
    active), reserved bit 1 set, integration time 1T. Raw value ``0x06``.

    Setters accept an enum member or its integer code. Anything else raises
    CommandRegisterError before a single bit is touched.

    Business context: The driver never edits the live register directly.
    It clones it, edits the clone, writes the clone to the device, and only
    then adopts it. clone() exists for that staging step.

    Example:
        >>> reg = CommandRegister()
        >>> reg.get_integration_time()
        <IntegrationTime.IT_1T: 1>
        >>> staged = reg.clone()
        >>> staged.set_shutdown_mode(ShutdownMode.ENABLED)
        >>> reg.get_shutdown_mode(), staged.get_shutdown_mode()
        (<ShutdownMode.DISABLED: 0>, <ShutdownMode.ENABLED: 1>)
    """

    __slots__ = ()

    def __init__(self, value: int | None = None) -> None:
        """Create a command register.

        Args:
            value: Raw byte to decode, as read back from a log or another
                register. None (default) applies the datasheet defaults.

        Raises:
            LogicError: If value is not an integer in 0-255.
        """
        if value is not None:
            super().__init__(value)
            return
        super().__init__()
        self.write_bits(
            {
                CommandRegisterBit.RESERVED_0: 1,
                CommandRegisterBit.IT_0: 1,  # 1T
            }
        )

    def clone(self) -> CommandRegister:
        """Return an independent register with the same bit pattern."""
        return CommandRegister.from_hex(self.to_byte())

    # ---- Shutdown mode ---- #

    def get_shutdown_mode(self) -> ShutdownMode:
        """Return the current shutdown mode (SD bit)."""
        return ShutdownMode(self.read_bit(CommandRegisterBit.SD))

    def set_shutdown_mode(self, mode: ShutdownMode | int) -> None:
        """Set the SD bit.

        Raises:
            CommandRegisterError: If mode is not a ShutdownMode code.
        """
        mode = _coerce(ShutdownMode, mode, "shutdown mode")
        self.write_bit(CommandRegisterBit.SD, mode.value)

    # ---- Integration time ---- #

    def get_integration_time(self) -> IntegrationTime:
        """Decode the two IT bits into an IntegrationTime.

        Every 2-bit pattern maps to a member, so this never fails. The
        fallback to 1T only guards against future layout changes.
        """
        code = (self.read_bit(CommandRegisterBit.IT_1) << 1) | self.read_bit(
            CommandRegisterBit.IT_0
        )
        try:
            return IntegrationTime(code)
        except ValueError:  # pragma: no cover - all four codes are members
            return IntegrationTime.IT_1T

    def set_integration_time(self, code: IntegrationTime | int) -> None:
        """Encode an integration time into the IT_0/IT_1 bits.

        Args:
            code: IntegrationTime member or its integer code (0-3).

        Raises:
            CommandRegisterError: If code is not an IntegrationTime code.
                The register is left unchanged.

        Example:
            >>> reg = CommandRegister()
            >>> reg.set_integration_time(IntegrationTime.IT_4T)
            >>> hex(reg.to_byte())
            '0xe'
        """
        code = _coerce(IntegrationTime, code, "integration time")
        self.write_bits(
            {
                CommandRegisterBit.IT_0: code.value & 1,
                CommandRegisterBit.IT_1: (code.value >> 1) & 1,
            }
        )

    # ---- Acknowledge ---- #

    def get_acknowledge_mode(self) -> AcknowledgeMode:
        return AcknowledgeMode(self.read_bit(CommandRegisterBit.ACK))

    def set_acknowledge_mode(self, mode: AcknowledgeMode | int) -> None:
        mode = _coerce(AcknowledgeMode, mode, "acknowledge mode")
        self.write_bit(CommandRegisterBit.ACK, mode.value)

    def get_acknowledge_threshold(self) -> AcknowledgeThreshold:
        return AcknowledgeThreshold(self.read_bit(CommandRegisterBit.ACK_THD))

    def set_acknowledge_threshold(self, code: AcknowledgeThreshold | int) -> None:
        code = _coerce(AcknowledgeThreshold, code, "acknowledge threshold")
        self.write_bit(CommandRegisterBit.ACK_THD, code.value)


def _coerce(enum_type: type[_EnumT], value: object, field: str) -> _EnumT:
    """Convert value to a member of enum_type or raise CommandRegisterError.

    Members of a different IntEnum and bools are rejected even when their
    integer value happens to be a valid code.
    """
    if isinstance(value, enum_type):
        return value
    if isinstance(value, bool) or isinstance(value, IntEnum) or not isinstance(
        value, int
    ):
        raise CommandRegisterError(field, value, enum_type.__name__)
    try:
        return enum_type(value)
    except ValueError as e:
        raise CommandRegisterError(field, value, enum_type.__name__) from e
