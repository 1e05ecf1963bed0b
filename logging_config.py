from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Dict, Iterable, Tuple

from settings import read_log_level

# Context keys rendered first, in this order; any other extra follows alphabetically.
_LEADING_KEYS = ("message_id", "subscription", "row_key", "table", "topic")

_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}

# Client libraries that log every RPC at INFO.
_QUIET_LOGGERS = ("google", "grpc", "urllib3", "httpx", "httpcore")

_configured = False


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the ``extra=`` attributes attached to ``record``."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_ATTRS and not key.startswith("_") and value is not None
    }


class ContextualFormatter(logging.Formatter):
    """Render a record followed by its ``extra=`` context as ``key=value`` pairs."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        leading_keys: Iterable[str] = _LEADING_KEYS,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._leading_keys: Tuple[str, ...] = tuple(leading_keys)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = record_context(record)
        if not context:
            return message
        ordered = [key for key in self._leading_keys if key in context]
        ordered += sorted(key for key in context if key not in self._leading_keys)
        rendered = " ".join(f"{key}={self._render(context[key])}" for key in ordered)
        return f"{message} | {rendered}"

    @staticmethod
    def _render(value: Any) -> str:
        text = str(value)
        return repr(text) if " " in text else text


def configure_logging(level: str | int | None = None) -> None:
    """Install the contextual stream handler on the root logger, once per process."""
    global _configured
    if _configured:
        return

    log_level = level if level is not None else read_log_level()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": ContextualFormatter,
                    "fmt": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                }
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "contextual",
                }
            },
            "loggers": {name: {"level": "WARNING"} for name in _QUIET_LOGGERS},
            "root": {"handlers": ["stderr"], "level": log_level},
        }
    )
    _configured = True
