"""CLI entry point for veml6070.

Provides the ``veml6070`` console script:

- ``read``: Take one or more measurements (default if no subcommand)

Usage::

    # One reading from /dev/i2c-1 with the default 270 kΩ RSET
    veml6070 read --mode hardware

    # Ten readings one second apart at 4T, as JSON lines
    veml6070 read --mode hardware --count 10 --interval 1 \\
        --integration-time 4 --json

    # Simulated sensor, no hardware required
    veml6070 read --twin-uv-counts 1500

Module Structure:
    - ``main()``: CLI entry point, parses arguments and dispatches
    - ``run_read()``: Measurement loop against the configured transport
    - ``format_value()``: Text or JSON rendering of one measurement
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import TextIO

from veml6070.devices.sensor import Sensor
from veml6070.drivers.config import DriverConfig, DriverMode, configure, get_factory
from veml6070.errors import VEML6070Error
from veml6070.measurement import SensorValue
from veml6070.observability import configure_logging, get_logger
from veml6070.types import DEFAULT_BUS_NUMBER, DEFAULT_RSET_KOHM, IntegrationTime

PROG_NAME = "veml6070"
COMMANDS = ("read",)

INTEGRATION_TIME_CHOICES: dict[str, IntegrationTime] = {
    "half": IntegrationTime.IT_HALF_T,
    "1": IntegrationTime.IT_1T,
    "2": IntegrationTime.IT_2T,
    "4": IntegrationTime.IT_4T,
}


def _positive_float(text: str) -> float:
    value = float(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {text}")
    return value


def _non_negative_float(text: str) -> float:
    value = float(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {text}")
    return value


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {text}")
    return value


def _non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {text}")
    return value


def format_value(value: SensorValue, *, as_json: bool = False) -> str:
    """Render one measurement as a text line or a JSON object.

    Example:
        >>> format_value(value)
        'raw=600 normalized=600.00 uv_index=3 risk=MODERATE'
    """
    if as_json:
        return json.dumps(value.to_dict())
    return (
        f"raw={value.raw_value} normalized={value.normalized_value:.2f} "
        f"uv_index={value.uv_index.value} risk={value.risk_level.name}"
    )


async def run_read(args: argparse.Namespace, out: TextIO | None = None) -> int:
    """Enable the sensor, take ``args.count`` readings and disable it.

    The interval between readings includes the sensor's own refresh wait,
    so ``--interval 1`` yields one reading per second.

    Args:
        args: Parsed ``read`` arguments.
        out: Stream for measurement lines; defaults to sys.stdout.

    Returns:
        Exit code 0.

    Raises:
        VEML6070Error: If the sensor cannot be enabled, configured or read.
    """
    stream = out if out is not None else sys.stdout

    configure(
        DriverConfig(
            mode=DriverMode(args.mode),
            bus_number=args.bus,
            rset=args.rset,
            twin_uv_counts=args.twin_uv_counts,
        )
    )
    factory = get_factory()
    sensor = Sensor(factory.create_bus_opener(), factory.create_sensor_config())

    async with sensor:
        integration_time = INTEGRATION_TIME_CHOICES[args.integration_time]
        if integration_time != sensor.get_integration_time():
            await sensor.set_integration_time(integration_time)

        pause = max(0.0, args.interval - sensor.get_refresh_time() / 1000)
        for index in range(args.count):
            value = await sensor.read()
            print(format_value(value, as_json=args.json), file=stream)
            if index < args.count - 1:
                await asyncio.sleep(pause)

    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate from main() for testing)."""
    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description="Read UV index measurements from a VEML6070 over I2C",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: WARNING)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    read_parser = subparsers.add_parser("read", help="Take measurements")
    _add_read_arguments(read_parser)
    return parser


def _add_read_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in DriverMode],
        default=DriverMode.DIGITAL_TWIN.value,
        help="Transport: real I2C bus or simulated sensor (default: digital_twin)",
    )
    parser.add_argument(
        "--bus",
        type=_non_negative_int,
        default=DEFAULT_BUS_NUMBER,
        help=f"I2C bus number (default: {DEFAULT_BUS_NUMBER})",
    )
    parser.add_argument(
        "--rset",
        type=_positive_float,
        default=DEFAULT_RSET_KOHM,
        help=f"RSET resistor in kΩ (default: {DEFAULT_RSET_KOHM:g})",
    )
    parser.add_argument(
        "--integration-time",
        choices=list(INTEGRATION_TIME_CHOICES),
        default="1",
        help="Integration time multiplier (default: 1)",
    )
    parser.add_argument(
        "--count",
        type=_positive_int,
        default=1,
        help="Number of readings (default: 1)",
    )
    parser.add_argument(
        "--interval",
        type=_non_negative_float,
        default=1.0,
        help="Seconds between readings (default: 1)",
    )
    parser.add_argument(
        "--twin-uv-counts",
        type=_non_negative_int,
        default=600,
        help="Simulated 1T counts in digital_twin mode (default: 600)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print measurements as JSON lines",
    )


def _with_default_command(argv: list[str]) -> list[str]:
    """Insert ``read`` after the global options when no subcommand is given.

    Lets ``veml6070 --count 3`` behave like ``veml6070 read --count 3``.
    """
    if any(arg in COMMANDS or arg in ("-h", "--help") for arg in argv):
        return argv
    index = 0
    while index < len(argv):
        arg = argv[index]
        if arg == "--log-level":
            index += 2
        elif arg == "--json-logs" or arg.startswith("--log-level="):
            index += 1
        else:
            break
    return [*argv[:index], "read", *argv[index:]]


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point for veml6070.

    Returns:
        Exit code: 0 on success, 1 on sensor or bus errors.

    Raises:
        SystemExit: On --help or argument parsing errors.
    """
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)
    args = parser.parse_args(_with_default_command(argv))

    configure_logging(level=args.log_level, json_format=args.json_logs, force=True)
    logger = get_logger(__name__)

    try:
        return asyncio.run(run_read(args))
    except VEML6070Error as e:
        logger.error(
            "Measurement failed",
            error=str(e),
            cause=repr(e.cause) if e.cause is not None else None,
        )
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
