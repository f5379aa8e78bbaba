"""Logging helpers shared by the engine, the loader and the drivers."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, TextIO

ROOT_LOGGER = "mini_table"
TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def get_logger(name: str = "") -> logging.Logger:
    """Return ``mini_table.<name>`` (or the package logger itself)."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def configure_logging(level: str = "WARNING", fmt: str = "text", stream: Optional[TextIO] = None) -> logging.Logger:
    """Install a single stream handler on the package logger.

    Calling it again replaces the handler, so the CLI and tests can
    reconfigure freely.
    """
    logger = get_logger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger


__all__ = ["JsonFormatter", "configure_logging", "get_logger"]
