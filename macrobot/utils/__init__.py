"""
Utility modules for the macro bot.
"""

from .logger import LoggerMixin, get_logger, setup_logging
from .discord import DiscordUtils
from .validation import ValidationUtils, ValidationResult
from .error_handler import ErrorHandler, get_error_handler, setup_error_handler

__all__ = [
    "LoggerMixin",
    "get_logger",
    "setup_logging",
    "DiscordUtils",
    "ValidationUtils",
    "ValidationResult",
    "ErrorHandler",
    "get_error_handler",
    "setup_error_handler",
]
