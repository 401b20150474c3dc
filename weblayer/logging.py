"""JSON logging for the request pipeline.

Request records carry their fields as ``extra=`` attributes; the formatter
nests the HTTP ones under ``"http"`` so a rejected XSRF check and the final
``request_completed`` line for the same request share one shape.
"""

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

HTTP_FIELDS = ("method", "path", "status", "scheme", "remote_addr")
TOP_LEVEL_FIELDS = ("request_id", "reason", "duration_ms")

# Server loggers that otherwise install their own plain-text handlers.
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "gunicorn.error")


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in TOP_LEVEL_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        http = {
            key: getattr(record, key)
            for key in HTTP_FIELDS
            if getattr(record, key, None) is not None
        }
        if http:
            payload["http"] = http
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def logging_config(level: str = "INFO") -> dict[str, Any]:
    """dictConfig schema shared by the app and ``gunicorn.conf.py``."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"json": {"()": JsonLogFormatter}},
        "handlers": {
            "default": {"class": "logging.StreamHandler", "formatter": "json"},
        },
        "loggers": {
            name: {"handlers": ["default"], "level": level.upper(), "propagate": False}
            for name in SERVER_LOGGERS
        },
        # uvicorn.access duplicates weblayer.asgi's request_completed line.
        "root": {"handlers": ["default"], "level": level.upper()},
    }


def configure_logging(level: str = "INFO") -> None:
    config = logging_config(level)
    config["loggers"]["uvicorn.access"] = {"level": "WARNING"}
    logging.config.dictConfig(config)
