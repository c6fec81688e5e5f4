"""
Logging utilities for the macro bot.
Uses Rich for colored console output.
"""

import logging
from typing import Optional, Set

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

CUSTOM_THEME = Theme({
    "logging.level.success": "green",
    "logging.level.command": "cyan",
    "logging.level.debug": "dim cyan",
})

console = Console(theme=CUSTOM_THEME)

# Level applied to loggers created without an explicit one
_default_level = logging.INFO
_managed_loggers: Set[str] = set()


def set_default_level(level: int) -> None:
    """
    Change the level of every logger set up without an explicit level.

    Args:
        level: Logging level
    """
    global _default_level
    _default_level = level

    for name in _managed_loggers:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


def setup_logging(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Set up a logger with RichHandler.

    Args:
        name: Logger name
        level: Logging level (default: INFO, DEBUG when enabled in config)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if level is None:
        level = _default_level
        _managed_loggers.add(name)

    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers = []

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="[%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    return logger


class LoggerMixin:
    """Mixin class that provides logger functionality."""

    def __init__(self, name: str):
        self._logger = setup_logging(name)

    @property
    def logger(self) -> logging.Logger:
        """Get the logger instance."""
        return self._logger

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._logger.warning(message, extra=kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._logger.error(message, extra=kwargs)

    def success(self, message: str, **kwargs) -> None:
        """Log success message (info level with a [SUCCESS] prefix)."""
        self._logger.info(f"[SUCCESS] {message}", extra=kwargs)


class SuccessLogger(logging.LoggerAdapter):
    """Logger adapter adding a `success` method."""

    def success(self, message: str, *args, **kwargs) -> None:
        self.info(f"[SUCCESS] {message}", *args, **kwargs)


def get_logger(name: str) -> SuccessLogger:
    """Get a logger instance."""
    return SuccessLogger(setup_logging(name), {})
