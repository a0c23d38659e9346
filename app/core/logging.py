"""Logging configuration."""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from app.core.config import Settings

# Attributes present on every LogRecord; anything else arrived through ``extra=``.
STANDARD_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "correlation_id"}

# Extra fields that could carry a raw credential.
REDACTED_FIELDS = frozenset({"api_key", "authorization", "token", "signing_key"})
REDACTED = "[redacted]"


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    """
    Collect the structured fields a caller passed via ``extra=``.

    Credential-bearing field names are masked.

    Args:
        record: Log record to inspect

    Returns:
        Mapping of field name to value
    """
    fields: dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key in STANDARD_RECORD_ATTRS:
            continue
        fields[key] = REDACTED if key in REDACTED_FIELDS else value
    return fields


class CorrelationIdFilter(logging.Filter):
    """Stamps records with the correlation ID of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        # Deferred: the middleware package imports this module.
        from app.api.middleware.correlation_id import get_correlation_id

        if getattr(record, "correlation_id", None) is None:
            record.correlation_id = get_correlation_id() or None
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            payload["correlation_id"] = correlation_id

        payload.update(extra_fields(record))

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter with a ``[correlation_id]`` prefix."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        correlation_id = getattr(record, "correlation_id", None)
        return f"[{correlation_id}] {line}" if correlation_id else line


def setup_logging(settings: Settings) -> None:
    """
    Send all application logging to stdout.

    Args:
        settings: Application settings; ``log_level`` and ``log_format`` are read
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(JSONFormatter() if settings.log_format == "json" else TextFormatter())

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Request lines come from CorrelationIdMiddleware.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
