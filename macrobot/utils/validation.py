"""
Validation Utilities
Helper functions for cleaning chat input and checking outgoing messages
"""

import re
from typing import Any, Optional

ZERO_WIDTH_REGEX = re.compile(r"[\u200B-\u200D\uFEFF]")
# Tab, newline and carriage return are kept; patterns stop at the line break
CONTROL_CHARS_REGEX = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F-\x9F]")

# Discord message limit
MAX_MESSAGE_LENGTH = 2000


class ValidationResult:
    """Result of a validation operation."""

    def __init__(
        self,
        valid: bool,
        error: Optional[str] = None,
        value: Optional[Any] = None,
    ):
        self.valid = valid
        self.error = error
        self.value = value

    def __bool__(self) -> bool:
        return self.valid


class ValidationUtils:
    """Utility class for input validation."""

    @staticmethod
    def sanitize_input(input_value: str) -> str:
        """
        Strip surrounding whitespace, zero-width and control characters
        other than tab and line breaks.

        Args:
            input_value: Input to sanitize

        Returns:
            Sanitized input string
        """
        if not isinstance(input_value, str):
            return ""

        sanitized = input_value.strip().replace("\r\n", "\n").replace("\r", "\n")
        sanitized = ZERO_WIDTH_REGEX.sub("", sanitized)
        sanitized = CONTROL_CHARS_REGEX.sub("", sanitized)

        return sanitized

    @staticmethod
    def validate_message_length(
        content: Optional[str],
        max_length: int = MAX_MESSAGE_LENGTH,
    ) -> ValidationResult:
        """
        Validate message content length.

        Args:
            content: Message content
            max_length: Maximum length (default: 2000 for Discord)

        Returns:
            ValidationResult with valid status and optional truncated content
        """
        if not content:
            return ValidationResult(valid=True)

        if len(content) > max_length:
            truncated = content[: max_length - 3] + "..."
            return ValidationResult(
                valid=False,
                error=f"Message too long ({len(content)}/{max_length})",
                value=truncated,
            )

        return ValidationResult(valid=True)
