"""Structured logging for the VEML6070 driver.

Builds on Python's standard logging module with:
- Structured data support (keyword arguments become key-value pairs)
- JSON formatting option for log aggregation
- Context management for tagging every record of an operation

All package loggers live under the ``veml6070`` logger, which does not
propagate to the root logger.

Example:
    logger = get_logger(__name__)

    logger.info("Sensor enabled")
    logger.info("Command register written", value="0x06", bus=1)

    with LogContext(bus=1, rset=270.0):
        logger.debug("Reading sample")  # includes bus and rset

    configure_logging(json_format=True, force=True)
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
import threading
from collections.abc import MutableMapping
from datetime import UTC, datetime
from typing import Any, cast

__all__ = [
    "ROOT_LOGGER_NAME",
    "StructuredLogger",
    "StructuredFormatter",
    "JSONFormatter",
    "LogContext",
    "configure_logging",
    "reset_logging",
    "get_logger",
]

ROOT_LOGGER_NAME = "veml6070"

_log_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar(
    "veml6070_log_context", default={}
)


# =============================================================================
# Structured Logger
# =============================================================================


class StructuredLogger(logging.Logger):
    """Logger whose level methods accept structured keyword arguments.

    Usage:
        logger = get_logger("veml6070.devices.sensor")
        logger.info("Sample read", raw=412, uv_index=2)

    Keyword arguments are merged over the active LogContext and attached to
    the record as ``record.structured_data``.
    """

    def _log(
        self,
        level: int,
        msg: object,
        args: tuple[Any, ...] | MutableMapping[str, Any],
        exc_info: Any = None,
        extra: MutableMapping[str, object] | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        **kwargs: Any,
    ) -> None:
        """Collect keyword arguments into structured data and log.

        Merge order is LogContext values first, explicit kwargs second, so
        per-call values override ambient context.
        """
        structured_data = {**_log_context.get(), **kwargs}
        extra = dict(extra) if extra else {}
        extra["structured_data"] = structured_data

        super()._log(
            level,
            msg,
            args,
            exc_info=exc_info,
            extra=extra,
            stack_info=stack_info,
            stacklevel=stacklevel + 1,
        )


# =============================================================================
# Formatters
# =============================================================================


def _format_value(value: Any) -> str:
    """Format one structured value for the key=value text format.

    None becomes ``null``, strings containing spaces are quoted, dicts and
    lists are JSON encoded, everything else goes through str().
    """
    if value is None:
        return "null"
    if isinstance(value, str):
        return f'"{value}"' if " " in value else value
    if isinstance(value, dict | list):
        return json.dumps(value, default=str)
    return str(value)


class StructuredFormatter(logging.Formatter):
    """Human-readable formatter.

    Format: ``timestamp - name - level - message | key=value key=value``
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        include_structured: bool = True,
    ) -> None:
        """Initialize the formatter.

        Args:
            fmt: Format string; defaults to
                ``%(asctime)s - %(name)s - %(levelname)s - %(message)s``.
            datefmt: Date format for ``%(asctime)s``.
            include_structured: Append `` | key=value`` pairs when True.
        """
        if fmt is None:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        super().__init__(fmt, datefmt)
        self.include_structured = include_structured

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        if not self.include_structured:
            return base

        structured = getattr(record, "structured_data", {})
        if not structured:
            return base

        pairs = " ".join(f"{k}={_format_value(v)}" for k, v in structured.items())
        return f"{base} | {pairs}"


class JSONFormatter(logging.Formatter):
    """One JSON object per line (NDJSON).

    Keys: timestamp (ISO 8601, UTC), level, logger, message, optional
    exception, plus every structured data key at top level.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_dict: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_dict.update(getattr(record, "structured_data", {}))

        if record.exc_info:
            log_dict["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_dict, default=str)


# =============================================================================
# Context Management
# =============================================================================


class LogContext:
    """Context manager adding key-value pairs to every record in scope.

    Backed by contextvars, so each asyncio task sees its own context.
    Nested contexts merge, inner values winning.

    Usage:
        with LogContext(bus=1):
            logger.info("Opening bus")  # bus=1
            with LogContext(operation="enable"):
                logger.info("Committing")  # bus=1 operation=enable
    """

    def __init__(self, **kwargs: Any) -> None:
        self._kwargs = kwargs
        self._token: contextvars.Token[dict[str, Any]] | None = None

    def __enter__(self) -> LogContext:
        current = _log_context.get()
        self._token = _log_context.set({**current, **self._kwargs})
        return self

    def __exit__(self, *args: Any) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None

    def __repr__(self) -> str:
        return f"LogContext({self._kwargs!r})"


# =============================================================================
# Configuration
# =============================================================================

_configured = False
_config_lock = threading.Lock()


def configure_logging(
    level: int | str = logging.INFO,
    json_format: bool = False,
    stream: Any = None,
    include_structured: bool = True,
    force: bool = False,
) -> None:
    """Configure the ``veml6070`` logger hierarchy.

    Idempotent: calls after the first are ignored unless ``force=True``.
    Thread-safe.

    Args:
        level: Minimum level, as int or name ("DEBUG", "INFO", ...).
        json_format: Use JSONFormatter instead of StructuredFormatter.
        stream: Output stream; defaults to sys.stderr.
        include_structured: Append structured data in text mode.
        force: Drop existing handlers and reconfigure.

    Example:
        >>> import io
        >>> buffer = io.StringIO()
        >>> configure_logging(level="DEBUG", stream=buffer, force=True)
    """
    with _config_lock:
        if force:
            _reset_logging_impl()
        _configure_logging_impl(level, json_format, stream, include_structured)


def _configure_logging_impl(
    level: int | str = logging.INFO,
    json_format: bool = False,
    stream: Any = None,
    include_structured: bool = True,
) -> None:
    """Internal implementation of configure_logging (assumes lock is held)."""
    global _configured

    if _configured:
        return

    logging.setLoggerClass(StructuredLogger)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    formatter: logging.Formatter
    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = StructuredFormatter(include_structured=include_structured)
    handler.setFormatter(formatter)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    root.addHandler(handler)
    root.propagate = False

    _configured = True


def _reset_logging_impl() -> None:
    """Internal implementation of reset_logging (assumes lock is held)."""
    global _configured

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    _configured = False


def reset_logging() -> None:
    """Remove all handlers and mark logging unconfigured (for tests)."""
    with _config_lock:
        _reset_logging_impl()


def get_logger(name: str) -> StructuredLogger:
    """Return a StructuredLogger, configuring defaults on first use.

    Args:
        name: Logger name, normally ``__name__``.

    Returns:
        StructuredLogger accepting ``logger.info("msg", key=value)``.
    """
    if not _configured:
        with _config_lock:
            if not _configured:  # pragma: no branch
                _configure_logging_impl()

    return cast(StructuredLogger, logging.getLogger(name))
