"""Shared logging utilities for consistent client observability.

Usage example:
    from shop_client.observability.logging import format_event, get_logger

    logger = get_logger("shop_client.http")
    logger.info(format_event("response", method="GET", url="/cart", status=200))
"""

from __future__ import annotations

import logging
import time

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def get_logger(name: str) -> logging.Logger:
    """Return a standard logger configured for UTC timestamps.

    Args:
        name: Logger name (use a stable module-qualified name).

    Returns:
        A logger with a single stream handler and a consistent UTC format.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)
        formatter.converter = time.gmtime
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def format_event(event: str, **fields: object) -> str:
    """Render a structured log entry as `event key=value ...`.

    Fields with a value of None are omitted; values containing whitespace are quoted.
    """
    parts = [event]
    for key, value in fields.items():
        if value is None:
            continue
        text = str(value)
        if not text or any(ch.isspace() for ch in text):
            text = f'"{text}"'
        parts.append(f"{key}={text}")
    return " ".join(parts)
