"""Structured logging helpers for the try-on studio."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict

_RECORD_ATTRIBUTES = set(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}

# Image payloads are large base64 blobs; never put them in a log line.
_MAX_VALUE_LENGTH = 120


class JsonFormatter(logging.Formatter):
    """Emit one JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = super().format(record)
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "event": getattr(record, "event", message),
        }
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRIBUTES or key in payload:
                continue
            payload[key] = scrub_for_log(value)
        return json.dumps(payload, default=str)


def configure_logging(level: int | str | None = None) -> None:
    """Configure root logging with JSON output."""

    desired_level = level or os.getenv("LOG_LEVEL", "INFO")
    logging.root.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=desired_level, handlers=[handler])


def scrub_for_log(payload: Any) -> Any:
    """Shorten data URLs and other long strings before they reach a handler."""

    if payload is None or isinstance(payload, (int, float, bool)):
        return payload
    if isinstance(payload, str):
        if payload.startswith("data:"):
            header = payload.split(",", 1)[0]
            return f"{header},[{len(payload)} chars]"
        if len(payload) > _MAX_VALUE_LENGTH:
            return payload[:_MAX_VALUE_LENGTH] + "..."
        return payload
    if isinstance(payload, (list, tuple)):
        return [scrub_for_log(item) for item in payload]
    if isinstance(payload, dict):
        return {key: scrub_for_log(value) for key, value in payload.items()}
    return scrub_for_log(str(payload))


def get_logger(name: str) -> logging.Logger:
    """Return a module logger ensuring configuration is applied."""

    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Emit a structured log entry."""

    exc_info = fields.pop("exc_info", None)
    logger.log(
        level,
        event,
        exc_info=exc_info,
        extra={"event": event, **scrub_for_log(fields)},
    )


__all__ = [
    "JsonFormatter",
    "configure_logging",
    "get_logger",
    "log_event",
    "scrub_for_log",
]
