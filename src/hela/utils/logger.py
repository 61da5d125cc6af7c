"""
Centralized logging configuration for hela.
"""

# Standard library imports
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

# ANSI color codes for console output
COLORS = {
    "DEBUG": "\033[36m",  # Cyan
    "INFO": "\033[32m",  # Green
    "WARNING": "\033[33m",  # Yellow
    "ERROR": "\033[31m",  # Red
    "CRITICAL": "\033[35m",  # Magenta
    "RESET": "\033[0m",  # Reset
}

# Marker attribute for handlers installed by set_logger
_HELA_HANDLER = "_hela_handler"


class ColoredFormatter(logging.Formatter):
    """Custom formatter adding colors to console output."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with color."""
        orig_levelname = record.levelname
        if record.levelname in COLORS:
            record.levelname = (
                f"{COLORS[record.levelname]}{record.levelname}{COLORS['RESET']}"
            )

        result = super().format(record)

        record.levelname = orig_levelname
        return result


def set_logger(
    log_file: Optional[Path] = None,
    max_bytes: int = 10_000_000,
    backup_count: int = 5,
    verbose: bool = False,
    debug: bool = False,
) -> logging.Logger:
    """Configure and return the package logger.

    Console output goes to stderr so it never mixes with the output of the
    commands hela runs. Calling this again replaces the handlers installed by
    the previous call.
    """
    logger = logging.getLogger("hela")

    base_level = (
        logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    )
    logger.setLevel(base_level)

    for handler in list(logger.handlers):
        if getattr(handler, _HELA_HANDLER, False):
            logger.removeHandler(handler)
            handler.close()

    console_formatter = ColoredFormatter(
        "%(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_formatter = logging.Formatter(
        (
            "%(asctime)s - %(name)s - %(levelname)s - "
            "%(filename)s:%(lineno)d - %(message)s"
        ),
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(console_formatter)
    setattr(console_handler, _HELA_HANDLER, True)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count
        )
        file_handler.setFormatter(file_formatter)
        setattr(file_handler, _HELA_HANDLER, True)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)


def get_context_logger(name: str, **context: Any) -> "ContextLogger":
    """Get a logger that appends ``context`` to every message."""
    return ContextLogger(get_logger(name), context)


class ContextLogger:
    """Logger that includes context with each log message."""

    def __init__(self, logger: logging.Logger, context: Dict[str, Any]):
        self.logger = logger
        self.context = context

    def bind(self, **context: Any) -> "ContextLogger":
        """Return a new logger with ``context`` added to the current one."""
        return ContextLogger(self.logger, {**self.context, **context})

    def _with_context(
        self, msg: str, extra: Optional[Dict[str, Any]], has_args: bool
    ) -> str:
        context = self.context.copy()
        if extra:
            context.update(extra)
        if not context:
            return msg
        context_str = " ".join(f"{k}={v!r}" for k, v in context.items())
        if has_args:
            # Context is appended to a %-style format string
            context_str = context_str.replace("%", "%%")
        return f"{msg} [{context_str}]"

    def debug(self, msg: str, *args, extra: Optional[Dict[str, Any]] = None, **kwargs):
        """Log a debug message with context."""
        self.logger.debug(self._with_context(msg, extra, bool(args)), *args, **kwargs)

    def info(self, msg: str, *args, extra: Optional[Dict[str, Any]] = None, **kwargs):
        """Log an info message with context."""
        self.logger.info(self._with_context(msg, extra, bool(args)), *args, **kwargs)

    def warning(
        self, msg: str, *args, extra: Optional[Dict[str, Any]] = None, **kwargs
    ):
        """Log a warning message with context."""
        self.logger.warning(self._with_context(msg, extra, bool(args)), *args, **kwargs)

    def error(self, msg: str, *args, extra: Optional[Dict[str, Any]] = None, **kwargs):
        """Log an error message with context."""
        self.logger.error(self._with_context(msg, extra, bool(args)), *args, **kwargs)
