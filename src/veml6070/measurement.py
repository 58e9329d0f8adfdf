"""Measurement pipeline: raw sample to normalized value, UV index and risk.

All functions here are pure and hold no state. The formulas come from the
VEML6070 application note (Vishay doc. 84310, page 5):

- The refresh time of one sample at 1T with RSET = 270 kΩ is 112.5 ms and
  scales linearly with both RSET and the integration multiplier.
- At 1T and RSET = 270 kΩ one UV index step corresponds to 186.67 counts,
  also scaling linearly with RSET.

Example:
    >>> value = SensorValue.from_raw(600, IntegrationTime.IT_1T, rset=270)
    >>> value.uv_index.value, value.risk_level.name
    (3, 'MODERATE')
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime

from veml6070.types import IntegrationTime, UvIndexRiskLevel

__all__ = [
    "integration_multiplier",
    "normalized_value",
    "refresh_time_ms",
    "uv_index",
    "risk_level",
    "UvIndex",
    "SensorValue",
]

# Lower bound (inclusive) of each risk level, highest first.
_RISK_THRESHOLDS: tuple[tuple[int, UvIndexRiskLevel], ...] = (
    (11, UvIndexRiskLevel.EXTREME),
    (8, UvIndexRiskLevel.VERY_HIGH),
    (6, UvIndexRiskLevel.HIGH),
    (3, UvIndexRiskLevel.MODERATE),
)


def _check_rset(rset: float) -> None:
    if rset <= 0:
        raise ValueError(f"RSET must be positive (kΩ), got {rset}")


def integration_multiplier(code: IntegrationTime | int) -> float:
    """Return the multiplier of T for an integration time code.

    Raises:
        ValueError: If code is not a valid IntegrationTime code.
    """
    return IntegrationTime(code).multiplier


def normalized_value(raw: int, code: IntegrationTime | int) -> float:
    """Scale a raw sample back to its 1T equivalent."""
    return raw / integration_multiplier(code)


def refresh_time_ms(rset: float, code: IntegrationTime | int) -> float:
    """Return the time in milliseconds the device needs for one sample.

    Args:
        rset: RSET resistor value in kΩ.
        code: Active integration time.

    Returns:
        ``multiplier * rset * 125 / 300``; 112.5 ms for RSET = 270 kΩ at 1T.

    Raises:
        ValueError: If rset is not positive or code is invalid.
    """
    _check_rset(rset)
    return integration_multiplier(code) * rset * 125 / 300


def uv_index(rset: float, normalized: float) -> int:
    """Convert a normalized (1T) value into a UV index.

    The quotient is truncated toward zero and never negative.

    Raises:
        ValueError: If rset is not positive.
    """
    _check_rset(rset)
    return max(0, math.trunc(normalized / (rset * 186.67 / 270)))


def risk_level(index: int) -> UvIndexRiskLevel:
    """Classify a UV index: 0-2 LOW, 3-5 MODERATE, 6-7 HIGH, 8-10 VERY_HIGH, 11+ EXTREME."""
    for lower, level in _RISK_THRESHOLDS:
        if index >= lower:
            return level
    return UvIndexRiskLevel.LOW


@dataclass(frozen=True)
class UvIndex:
    """A UV index value and its risk classification.

    Attributes:
        value: Non-negative integer UV index.
    """

    value: int

    @classmethod
    def from_sensor_value(cls, rset: float, normalized: float) -> UvIndex:
        """Build a UvIndex from a normalized sample and the board's RSET."""
        return cls(uv_index(rset, normalized))

    @property
    def risk_level(self) -> UvIndexRiskLevel:
        return risk_level(self.value)


@dataclass(frozen=True)
class SensorValue:
    """One measurement taken from the sensor.

    Created fresh by every read and never mutated afterwards.

    Attributes:
        raw_value: Unsigned 16-bit sample, ``(msb << 8) | lsb``.
        normalized_value: raw_value divided by the integration multiplier.
        uv_index: UV index derived from normalized_value and rset.
        integration_time: Integration time active when the sample was taken.
        rset: RSET value (kΩ) used for the conversion.
        timestamp: When the value was created (UTC). Ignored by equality.
    """

    raw_value: int
    normalized_value: float
    uv_index: UvIndex
    integration_time: IntegrationTime
    rset: float
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(UTC), compare=False
    )

    @property
    def risk_level(self) -> UvIndexRiskLevel:
        """Risk level of this sample's UV index."""
        return self.uv_index.risk_level

    @classmethod
    def from_raw(
        cls,
        raw: int,
        integration_time: IntegrationTime | int,
        rset: float,
    ) -> SensorValue:
        """Run the full pipeline on a raw 16-bit sample.

        Args:
            raw: Raw sample, 0-65535.
            integration_time: Integration time active during the sample.
            rset: RSET resistor value in kΩ.

        Returns:
            SensorValue with normalized value, UV index and risk level.

        Raises:
            ValueError: If raw is outside 0-65535, rset is not positive,
                or integration_time is invalid.

        Example:
            >>> v = SensorValue.from_raw(2100, IntegrationTime.IT_1T, 270)
            >>> v.uv_index.value, v.risk_level.name
            (11, 'EXTREME')
        """
        if not 0 <= raw <= 0xFFFF:
            raise ValueError(f"Raw value must be 0-65535, got {raw}")
        code = IntegrationTime(integration_time)
        normalized = normalized_value(raw, code)
        return cls(
            raw_value=raw,
            normalized_value=normalized,
            uv_index=UvIndex.from_sensor_value(rset, normalized),
            integration_time=code,
            rset=rset,
        )

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation (used by the CLI)."""
        return {
            "raw_value": self.raw_value,
            "normalized_value": self.normalized_value,
            "uv_index": self.uv_index.value,
            "risk_level": self.risk_level.name,
            "integration_time": self.integration_time.name,
            "rset": self.rset,
            "timestamp": self.timestamp.isoformat(),
        }
