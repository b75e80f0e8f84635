"""Structured JSON log formatter and logging config for WalletGuard."""

import json
import logging
from datetime import datetime, timezone


class JsonFormatter(logging.Formatter):
    """Emit each log record as a single-line JSON object.

    Standard fields:
        ts: ISO-8601 UTC timestamp
        level: DEBUG / INFO / WARNING / ERROR / CRITICAL
        logger: logger name
        msg: formatted message
        exc: exception traceback (only when an exception is present)

    Any keys passed via ``extra=`` are merged into the top-level object, so
    ``logger.info("evaluated", extra={"policy_id": "default"})`` keeps the
    policy id queryable.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        skip = logging.LogRecord.__dict__.keys() | _RESERVED
        for key, value in record.__dict__.items():
            if key not in skip and not key.startswith("_"):
                payload[key] = value

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


# Attributes every LogRecord instance carries that are not caller extras
_RESERVED = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "taskName", "message", "asctime",
}


def logging_config(level: str = "INFO") -> dict:
    """dictConfig payload routing everything through JsonFormatter."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "walletguard.logging_setup.JsonFormatter",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {
            "level": level.upper(),
            "handlers": ["console"],
        },
        "loggers": {
            "uvicorn.access": {"level": "WARNING"},   # suppress noisy access log
        },
    }
