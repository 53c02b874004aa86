"""Observability helpers."""

from .logging import format_event, get_logger

__all__ = ["format_event", "get_logger"]
