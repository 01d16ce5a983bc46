"""Log formatters for JSON lines and human-readable development output."""

import json
import logging
from datetime import UTC, datetime
from typing import Any

# Record attributes injected by log_search_context and the engine's tier context
CONTEXT_FIELDS = ("search_id", "ride_id", "tier", "correlation_id")


def context_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Context attributes present on the record, in CONTEXT_FIELDS order."""
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shipping in deployed environments."""

    def __init__(self, environment: str = "development", service: str = "ridepool"):
        super().__init__()
        self.environment = environment
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service,
            "env": self.environment,
        }
        payload.update(context_fields(record))

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class DevFormatter(logging.Formatter):
    """Readable single-line format; search, ride and tier are appended when set."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)8s] %(name)s [%(correlation_id)s]: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = [
            f"{field}={value}"
            for field, value in context_fields(record).items()
            if field != "correlation_id"
        ]
        if extras:
            line = f"{line} ({' '.join(extras)})"
        return line
