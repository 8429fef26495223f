"""
Logging utilities for modeller.

Every module logs through a child of the ``modeller`` logger. Model operations
log at DEBUG with the table and operation attached as record attributes, so
the JSON formatter can emit them as fields:

    from modeller.utils.logging import configure_logging, get_logger

    configure_logging(level="DEBUG", json_logs=True)
    log = get_logger(__name__)
    log.debug("get on movies", extra={"table": "movies", "operation": "get"})

Nothing is configured on import; applications that embed modeller keep their
own logging setup and the CLI calls :func:`configure_logging`.
"""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any, Dict, Optional

PACKAGE_LOGGER = "modeller"

# Attributes every LogRecord carries; anything else arrived through `extra=`.
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}


def _json_formatter(record: logging.LogRecord) -> str:
    """Render a log record as JSON string."""
    payload: Dict[str, Any] = {
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info

    for key, value in vars(record).items():
        if key in _STANDARD_RECORD_ATTRS or key in payload:
            continue
        if key == "extra" and isinstance(value, dict):
            payload.update(value)
            continue
        payload[key] = value
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with `extra=` attributes promoted to keys."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
    third_party_level: str = "WARNING",
) -> None:
    """
    Send modeller's logs to stderr.

    Parameters
    ----------
    level : str
        Level for the ``modeller`` loggers (e.g. "DEBUG" to see every query
        an operation issues).
    json_logs : bool
        Emit JSON objects instead of the pipe-separated console format.
    third_party_level : str
        Level for everything else, psycopg and its pool included.
    """
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
                    "datefmt": "%H:%M:%S",
                },
                "json": {"()": JsonFormatter},
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "json" if json_logs else "console",
                }
            },
            "loggers": {
                PACKAGE_LOGGER: {"level": level},
            },
            "root": {
                "handlers": ["stderr"],
                "level": third_party_level,
            },
        }
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger with the given name; defaults to the package logger.
    """
    return logging.getLogger(name or PACKAGE_LOGGER)


__all__ = ["PACKAGE_LOGGER", "configure_logging", "get_logger", "JsonFormatter"]
