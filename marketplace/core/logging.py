"""
marketplace/core/logging.py

Purpose: Logging configuration

- JSON lines in production, coloured single lines elsewhere
- Request-scoped context (user_id, role, order_id, ...) attached to every record
- Third-party loggers held at WARNING
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict

from marketplace.core.config import settings

CONTEXT_FIELDS = ("user_id", "role", "order_id", "product_id", "seller_id")
NOISY_LOGGERS = ("httpx", "motor", "pymongo", "stripe", "passlib", "uvicorn.access")

_log_context: ContextVar[Dict[str, Any]] = ContextVar("marketplace_log_context", default={})


class ContextFilter(logging.Filter):
    """Copies the active LogContext values onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            setattr(record, key, value)
        return True


def _record_context(record: logging.LogRecord) -> Dict[str, str]:
    return {f: str(getattr(record, f)) for f in CONTEXT_FIELDS if getattr(record, f, None) is not None}


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line, for log shippers.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.utcfromtimestamp(record.created).isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        payload.update(_record_context(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class DevelopmentFormatter(logging.Formatter):
    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, "")
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{color}{clock} {record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"

        context = _record_context(record)
        if context:
            line += " (" + " ".join(f"{k}={v}" for k, v in context.items()) + ")"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging() -> logging.Logger:
    """
    Installs a single stdout handler on the root logger.
    Safe to call more than once.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if settings.is_production else DevelopmentFormatter())
    handler.addFilter(ContextFilter())

    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger("marketplace")
    logger.debug(f"Logging configured for {settings.ENVIRONMENT} at {settings.LOG_LEVEL}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Loggers live under the `marketplace` namespace."""
    if name == "marketplace" or name.startswith("marketplace."):
        return logging.getLogger(name)
    return logging.getLogger(f"marketplace.{name}")


class LogContext:
    """
    Adds fields to every record logged inside the block, including records
    from awaited code. Nested blocks merge their fields.

    Usage:
        with LogContext(user_id="123", order_id="ORD-1"):
            logger.info("Cancelling order")
    """

    def __init__(self, **fields):
        self.fields = fields
        self._token = None

    def __enter__(self):
        self._token = _log_context.set({**_log_context.get(), **self.fields})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _log_context.reset(self._token)
