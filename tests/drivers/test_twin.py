"""Tests for the digital twin I2C bus."""

from __future__ import annotations

import pytest

from veml6070.drivers.bus import I2CBus, I2CBusOpener
from veml6070.drivers.twin import (
    DigitalTwinBusOpener,
    DigitalTwinConfig,
    DigitalTwinI2CBus,
)
from veml6070.errors import I2CError
from veml6070.types import I2CAddress


class TestDigitalTwinBusOpener:
    """Tests for opening simulated buses."""

    def test_satisfies_protocols(self):
        """Verifies the twin implements both bus protocols."""
        opener = DigitalTwinBusOpener()
        bus = opener.open(1)

        assert isinstance(opener, I2CBusOpener)
        assert isinstance(bus, I2CBus)

    def test_open_records_buses(self):
        """Verifies every opened bus is tracked in order."""
        opener = DigitalTwinBusOpener()

        first = opener.open(0)
        second = opener.open(1)

        assert opener.buses == [first, second]
        assert opener.last_bus is second
        assert second.bus_number == 1

    def test_last_bus_none_before_open(self):
        """Verifies last_bus is None until a bus was opened."""
        assert DigitalTwinBusOpener().last_bus is None

    def test_unavailable_bus_raises(self):
        """Verifies opening a bus not in available_buses fails."""
        opener = DigitalTwinBusOpener(DigitalTwinConfig(available_buses=(1,)))

        with pytest.raises(I2CError, match="Failed to open I2C bus 3"):
            opener.open(3)

        assert opener.buses == []

    def test_fail_open(self):
        """Verifies fail_open makes every open fail."""
        opener = DigitalTwinBusOpener(DigitalTwinConfig(fail_open=True))

        with pytest.raises(I2CError):
            opener.open(1)

    def test_command_writes_span_buses(self):
        """Verifies command_writes aggregates across reopened buses."""
        opener = DigitalTwinBusOpener()
        opener.open(1).write_byte(I2CAddress.CMD, 0x06)
        opener.open(1).write_byte(I2CAddress.CMD, 0x07)

        assert opener.command_writes == [0x06, 0x07]

    def test_config_repr(self):
        """Verifies the config repr is compact."""
        config = DigitalTwinConfig(uv_counts=42, available_buses=(1,))

        assert repr(config) == "DigitalTwinConfig(uv_counts=42, buses=[1])"


class TestDigitalTwinI2CBus:
    """Tests for simulated device transactions."""

    @pytest.fixture
    def config(self) -> DigitalTwinConfig:
        return DigitalTwinConfig(uv_counts=600)

    @pytest.fixture
    def bus(self, config) -> DigitalTwinI2CBus:
        return DigitalTwinI2CBus(config, 1)

    def _read_sample(self, bus: DigitalTwinI2CBus) -> int:
        msb = bus.read_byte(I2CAddress.DATA_MSB)
        lsb = bus.read_byte(I2CAddress.DATA_LSB)
        return (msb << 8) | lsb

    def test_sample_zero_before_command(self, bus):
        """Verifies an unconfigured device reports zero counts."""
        assert self._read_sample(bus) == 0
        assert bus.command is None

    def test_sample_at_1t(self, bus):
        """Verifies uv_counts are returned unscaled at 1T (0x06)."""
        bus.write_byte(I2CAddress.CMD, 0x06)

        assert self._read_sample(bus) == 600

    @pytest.mark.parametrize(
        ("command", "expected"),
        [(0x02, 300), (0x0A, 1200), (0x0E, 2400)],
    )
    def test_sample_scales_with_integration_time(self, bus, command, expected):
        """Verifies counts scale with the latched integration time."""
        bus.write_byte(I2CAddress.CMD, command)

        assert self._read_sample(bus) == expected

    def test_sample_zero_in_shutdown(self, bus):
        """Verifies SD=1 stops measurements."""
        bus.write_byte(I2CAddress.CMD, 0x07)

        assert self._read_sample(bus) == 0

    def test_sample_clamped_to_16_bits(self, bus, config):
        """Verifies large intensities saturate at 0xFFFF."""
        config.uv_counts = 40000
        bus.write_byte(I2CAddress.CMD, 0x0E)

        assert self._read_sample(bus) == 0xFFFF

    def test_config_read_live(self, bus, config):
        """Verifies changes to the config affect an open bus."""
        bus.write_byte(I2CAddress.CMD, 0x06)
        config.uv_counts = 2100

        assert self._read_sample(bus) == 2100

    def test_ara_fails_by_default(self, bus):
        """Verifies ARA reads fail like on the real part."""
        with pytest.raises(I2CError) as exc:
            bus.read_byte(I2CAddress.ARA)

        assert exc.value.address == I2CAddress.ARA

    def test_ara_can_respond(self, config, bus):
        """Verifies ara_responds makes ARA reads succeed."""
        config.ara_responds = True

        assert bus.read_byte(I2CAddress.ARA) == 0

    def test_unknown_address_nacks(self, bus):
        """Verifies reads from unknown addresses fail."""
        with pytest.raises(I2CError, match="No device at 0x50"):
            bus.read_byte(0x50)

    def test_only_cmd_is_writable(self, bus):
        """Verifies writes to data addresses are rejected."""
        with pytest.raises(I2CError, match="not writable"):
            bus.write_byte(I2CAddress.DATA_MSB, 0x00)

        assert bus.writes == []

    def test_records_transactions(self, bus, config):
        """Verifies reads and writes are recorded in order."""
        config.ara_responds = True
        bus.read_byte(I2CAddress.ARA)
        bus.write_byte(I2CAddress.CMD, 0x06)

        assert bus.reads == [I2CAddress.ARA]
        assert bus.writes == [(I2CAddress.CMD, 0x06)]
        assert bus.command_writes == [0x06]
        assert bus.command == 0x06

    def test_injected_read_failure(self, bus, config):
        """Verifies fail_read_addresses makes reads at that address fail."""
        bus.write_byte(I2CAddress.CMD, 0x06)
        config.fail_read_addresses.add(I2CAddress.DATA_LSB)

        assert bus.read_byte(I2CAddress.DATA_MSB) == 600 >> 8
        with pytest.raises(I2CError, match="Simulated read failure at 0x33"):
            bus.read_byte(I2CAddress.DATA_LSB)

    def test_injected_write_failure(self, bus, config):
        """Verifies fail_write_addresses rejects writes without latching."""
        config.fail_write_addresses.add(I2CAddress.CMD)

        with pytest.raises(I2CError, match="Simulated write failure"):
            bus.write_byte(I2CAddress.CMD, 0x06)

        assert bus.command is None
        assert bus.writes == []

    def test_closed_bus_rejects_transactions(self, bus):
        """Verifies I/O after close fails."""
        bus.close()

        assert not bus.is_open
        with pytest.raises(I2CError, match="is closed"):
            bus.read_byte(I2CAddress.DATA_MSB)
        with pytest.raises(I2CError, match="is closed"):
            bus.write_byte(I2CAddress.CMD, 0x06)

    def test_close_is_idempotent(self, bus):
        """Verifies close can be called twice."""
        bus.close()
        bus.close()

        assert not bus.is_open

    def test_fail_close_still_closes(self, bus, config):
        """Verifies fail_close raises but leaves the bus closed."""
        config.fail_close = True

        with pytest.raises(I2CError, match="Simulated close failure"):
            bus.close()

        assert not bus.is_open
