"""Tests for the measurement pipeline (refresh time, normalization, UV index)."""

from __future__ import annotations

import json
from datetime import datetime

import pytest

from veml6070.measurement import (
    SensorValue,
    UvIndex,
    integration_multiplier,
    normalized_value,
    refresh_time_ms,
    risk_level,
    uv_index,
)
from veml6070.types import IntegrationTime, UvIndexRiskLevel


class TestIntegrationMultiplier:
    """Tests for integration time multipliers and normalization."""

    @pytest.mark.parametrize(
        ("code", "multiplier"),
        [
            (IntegrationTime.IT_HALF_T, 0.5),
            (IntegrationTime.IT_1T, 1.0),
            (IntegrationTime.IT_2T, 2.0),
            (IntegrationTime.IT_4T, 4.0),
        ],
    )
    def test_multipliers(self, code, multiplier):
        """Verifies the code to multiplier table."""
        assert integration_multiplier(code) == multiplier
        assert code.multiplier == multiplier

    def test_invalid_code(self):
        """Verifies unknown codes raise ValueError."""
        with pytest.raises(ValueError):
            integration_multiplier(7)

    def test_normalized_value_scales_to_1t(self):
        """Verifies raw counts are divided by the multiplier."""
        assert normalized_value(1200, IntegrationTime.IT_2T) == 600.0
        assert normalized_value(300, IntegrationTime.IT_HALF_T) == 600.0
        assert normalized_value(2400, IntegrationTime.IT_4T) == 600.0


class TestRefreshTime:
    """Tests for refresh_time_ms."""

    def test_reference_board(self):
        """Verifies 112.5 ms at RSET 270 kΩ and 1T.

        Business context:
        This is the documented reference value; every other refresh time
        scales linearly from it.
        """
        assert refresh_time_ms(270, IntegrationTime.IT_1T) == 112.5

    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            (IntegrationTime.IT_HALF_T, 56.25),
            (IntegrationTime.IT_2T, 225.0),
            (IntegrationTime.IT_4T, 450.0),
        ],
    )
    def test_scales_with_integration_time(self, code, expected):
        """Verifies refresh time scales with the integration multiplier."""
        assert refresh_time_ms(270, code) == pytest.approx(expected)

    def test_scales_with_rset(self):
        """Verifies refresh time scales linearly with RSET."""
        assert refresh_time_ms(300, IntegrationTime.IT_1T) == pytest.approx(125.0)
        assert refresh_time_ms(540, IntegrationTime.IT_1T) == pytest.approx(225.0)

    @pytest.mark.parametrize("rset", [0, -270])
    def test_rejects_non_positive_rset(self, rset):
        """Verifies RSET must be positive."""
        with pytest.raises(ValueError, match="RSET must be positive"):
            refresh_time_ms(rset, IntegrationTime.IT_1T)


class TestUvIndex:
    """Tests for uv_index, risk_level and UvIndex."""

    @pytest.mark.parametrize(
        ("normalized", "expected"),
        [
            (0, 0),
            (186, 0),
            (187, 1),
            (400, 2),
            (600, 3),
            (2100, 11),
        ],
    )
    def test_index_at_reference_rset(self, normalized, expected):
        """Verifies index = trunc(normalized / 186.67) at RSET 270 kΩ."""
        assert uv_index(270, normalized) == expected

    def test_index_scales_with_rset(self):
        """Verifies a larger RSET needs proportionally more counts per step."""
        assert uv_index(540, 600) == 1
        assert uv_index(135, 600) == 6

    def test_index_never_negative(self):
        """Verifies negative inputs clamp to zero."""
        assert uv_index(270, -500) == 0

    def test_rejects_non_positive_rset(self):
        """Verifies RSET must be positive."""
        with pytest.raises(ValueError):
            uv_index(0, 600)

    @pytest.mark.parametrize(
        ("index", "level"),
        [
            (0, UvIndexRiskLevel.LOW),
            (2, UvIndexRiskLevel.LOW),
            (3, UvIndexRiskLevel.MODERATE),
            (5, UvIndexRiskLevel.MODERATE),
            (6, UvIndexRiskLevel.HIGH),
            (7, UvIndexRiskLevel.HIGH),
            (8, UvIndexRiskLevel.VERY_HIGH),
            (10, UvIndexRiskLevel.VERY_HIGH),
            (11, UvIndexRiskLevel.EXTREME),
            (40, UvIndexRiskLevel.EXTREME),
        ],
    )
    def test_risk_level_boundaries(self, index, level):
        """Verifies every risk band boundary on both sides."""
        assert risk_level(index) is level
        assert UvIndex(index).risk_level is level

    def test_from_sensor_value(self):
        """Verifies UvIndex.from_sensor_value applies the conversion."""
        index = UvIndex.from_sensor_value(270, 600)

        assert index == UvIndex(3)
        assert index.risk_level is UvIndexRiskLevel.MODERATE


class TestSensorValue:
    """Tests for SensorValue.from_raw and serialization."""

    @pytest.mark.parametrize(
        ("raw", "expected_index", "expected_level"),
        [
            (400, 2, UvIndexRiskLevel.LOW),
            (600, 3, UvIndexRiskLevel.MODERATE),
            (2100, 11, UvIndexRiskLevel.EXTREME),
        ],
    )
    def test_pipeline_at_1t(self, raw, expected_index, expected_level):
        """Verifies raw → normalized → index → risk at 1T and RSET 270 kΩ."""
        value = SensorValue.from_raw(raw, IntegrationTime.IT_1T, 270)

        assert value.raw_value == raw
        assert value.normalized_value == raw
        assert value.uv_index.value == expected_index
        assert value.risk_level is expected_level
        assert value.integration_time is IntegrationTime.IT_1T
        assert value.rset == 270

    def test_pipeline_normalizes_before_indexing(self):
        """Verifies the index is computed from the normalized value."""
        value = SensorValue.from_raw(1200, IntegrationTime.IT_2T, 270)

        assert value.normalized_value == 600.0
        assert value.uv_index.value == 3

    def test_accepts_integer_code(self):
        """Verifies an integer integration time code is converted."""
        value = SensorValue.from_raw(600, 3, 270)

        assert value.integration_time is IntegrationTime.IT_4T
        assert value.normalized_value == 150.0

    @pytest.mark.parametrize("raw", [-1, 0x10000])
    def test_rejects_out_of_range_raw(self, raw):
        """Verifies raw samples must fit in 16 bits."""
        with pytest.raises(ValueError, match="Raw value"):
            SensorValue.from_raw(raw, IntegrationTime.IT_1T, 270)

    def test_is_immutable(self):
        """Verifies SensorValue is frozen."""
        value = SensorValue.from_raw(600, IntegrationTime.IT_1T, 270)

        with pytest.raises(AttributeError):
            value.raw_value = 1  # type: ignore[misc]

    def test_equality_ignores_timestamp(self):
        """Verifies two identical samples compare equal regardless of time."""
        first = SensorValue.from_raw(600, IntegrationTime.IT_1T, 270)
        second = SensorValue.from_raw(600, IntegrationTime.IT_1T, 270)

        assert first == second

    def test_to_dict_is_json_serializable(self):
        """Verifies to_dict output round-trips through json."""
        value = SensorValue.from_raw(600, IntegrationTime.IT_1T, 270)

        data = json.loads(json.dumps(value.to_dict()))

        assert data["raw_value"] == 600
        assert data["normalized_value"] == 600.0
        assert data["uv_index"] == 3
        assert data["risk_level"] == "MODERATE"
        assert data["integration_time"] == "IT_1T"
        assert data["rset"] == 270
        assert datetime.fromisoformat(data["timestamp"]).tzinfo is not None
