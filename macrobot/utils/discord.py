"""
Discord Utilities
Helper functions for Discord interactions
"""

from typing import Any, Optional

from macrobot.utils.logger import get_logger
from macrobot.utils.validation import ValidationUtils

logger = get_logger("DiscordUtils")


class DiscordUtils:
    """Utility class for Discord-related helper functions."""

    @staticmethod
    async def safe_send(channel: Any, content: str) -> Optional[Any]:
        """
        Send a message to a channel, logging instead of raising on failure.

        Args:
            channel: Discord channel
            content: Message content

        Returns:
            Sent message or None if failed
        """
        if not channel or not hasattr(channel, "send"):
            return None

        length_check = ValidationUtils.validate_message_length(content)
        if not length_check:
            logger.debug(length_check.error)
            content = length_check.value

        try:
            return await channel.send(content)
        except Exception as e:
            logger.warning(f"Failed to send message: {e}")
            return None

    @staticmethod
    async def say(channel: Any, text: str, addressee: Optional[str] = None) -> Optional[Any]:
        """
        Send text to a channel, optionally directed at someone.

        Args:
            channel: Discord channel
            text: Message text
            addressee: Name to prefix the message with

        Returns:
            Sent message or None if failed
        """
        if addressee:
            text = f"{addressee}: {text}"
        return await DiscordUtils.safe_send(channel, text)

    @staticmethod
    def display_name(user: Any) -> str:
        """
        Get the name used for :nick substitution.

        Args:
            user: Discord user or member

        Returns:
            Display name, falling back to the account name
        """
        return getattr(user, "display_name", None) or getattr(user, "name", "") or str(user)
