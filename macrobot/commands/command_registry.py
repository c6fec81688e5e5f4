"""
Command Registry
Pattern-triggered command registration and lookup
"""

import re
from typing import Any, Awaitable, Callable, Dict, List, Tuple

from macrobot.utils.logger import get_logger

# (message, match, channel session) -> awaitable
CommandCallback = Callable[[Any, "re.Match[str]", Any], Awaitable[None]]


class CommandDefinition:
    """Definition of a command."""

    def __init__(self, name: str, pattern: str):
        self.name = name
        self.pattern = re.compile(pattern)


class Command:
    """Registered command with definition and handler."""

    def __init__(self, definition: CommandDefinition, handler: CommandCallback):
        self.definition = definition
        self.handler = handler

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def pattern(self) -> "re.Pattern[str]":
        return self.definition.pattern


class CommandRegistry:
    """Ordered set of pattern-triggered commands."""

    def __init__(self):
        self.logger = get_logger("CommandRegistry")
        self.commands: Dict[str, Command] = {}

    def register(
        self,
        config: Dict[str, Any],
        handler: CommandCallback,
    ) -> "CommandRegistry":
        """
        Register a command.

        Args:
            config: Command configuration dict with keys:
                - name: Command name (required)
                - pattern: Regex searched in each chat line (required)
            handler: Async function to handle the command

        Returns:
            Self for chaining
        """
        definition = CommandDefinition(
            name=config["name"],
            pattern=config["pattern"],
        )

        self.commands[definition.name.lower()] = Command(definition, handler)

        self.logger.debug(f"Registered command: {definition.name}")
        return self

    def get_all(self) -> List[Command]:
        """
        Get all registered commands in registration order.

        Returns:
            List of all commands
        """
        return list(self.commands.values())

    def match(self, content: str) -> List[Tuple[Command, "re.Match[str]"]]:
        """
        Find every command whose pattern matches a chat line.

        Args:
            content: Chat line

        Returns:
            (command, match) pairs in registration order
        """
        matches = []
        for command in self.commands.values():
            found = command.pattern.search(content)
            if found:
                matches.append((command, found))
        return matches
