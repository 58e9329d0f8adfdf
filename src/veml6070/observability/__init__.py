"""Observability module for the VEML6070 driver.

Provides structured logging for bus transactions and sensor lifecycle
events.

Example:
    from veml6070.observability import get_logger, LogContext

    logger = get_logger(__name__)

    logger.info("Sensor enabled", bus=1)

    with LogContext(bus=1, operation="read"):
        logger.debug("Waiting for refresh", delay_ms=112.5)
"""

from veml6070.observability.logging import (
    JSONFormatter,
    LogContext,
    StructuredFormatter,
    StructuredLogger,
    configure_logging,
    get_logger,
    reset_logging,
)

__all__ = [
    "JSONFormatter",
    "LogContext",
    "StructuredFormatter",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
    "reset_logging",
]
