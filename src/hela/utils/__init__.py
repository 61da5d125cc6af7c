"""Utility helpers."""

from .logger import ContextLogger, get_context_logger, get_logger, set_logger

__all__ = ["ContextLogger", "get_context_logger", "get_logger", "set_logger"]
