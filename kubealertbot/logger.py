"""Logger setup for the local, development and production environments."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any

LOGGER_NAME = "kubealertbot"

_RESERVED = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {
    "message",
    "asctime",
}


class LogLevel(IntEnum):
    """Deployment environment that decides log format and verbosity."""

    ENV_LOCAL = 0
    ENV_DEV = 1
    ENV_PROD = 2


def _level_name(record: logging.LogRecord) -> str:
    return "WARN" if record.levelno == logging.WARNING else record.levelname


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, tz=timezone.utc).astimezone().isoformat()


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """Formats each record as one JSON object with time, level, msg and extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": _timestamp(record),
            "level": _level_name(record),
            "msg": record.getMessage(),
        }
        entry.update(_extras(record))
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class _TextFormatter(logging.Formatter):
    """Formats each record as space-separated key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        fields = {
            "time": _timestamp(record),
            "level": _level_name(record),
            "msg": record.getMessage(),
            **_extras(record),
        }
        line = " ".join(f"{key}={self._quote(value)}" for key, value in fields.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line

    @staticmethod
    def _quote(value: Any) -> str:
        text = str(value)
        if text == "" or any(ch.isspace() or ch in '"=' for ch in text):
            return json.dumps(text, ensure_ascii=False)
        return text


def setup_logger(level: LogLevel | int) -> logging.Logger:
    """Configure and return the package logger, writing to standard output."""
    env = LogLevel(level)
    if env is LogLevel.ENV_LOCAL:
        formatter: logging.Formatter = _TextFormatter()
        threshold = logging.DEBUG
    elif env is LogLevel.ENV_DEV:
        formatter = JsonFormatter()
        threshold = logging.DEBUG
    else:
        formatter = JsonFormatter()
        threshold = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(threshold)
    logger.propagate = False
    return logger