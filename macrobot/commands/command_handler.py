"""
Command Handler
Matches chat lines against the registered commands and runs them
"""

from typing import Any, Dict, Optional

from macrobot.bot.config import config
from macrobot.commands import macros
from macrobot.commands.command_registry import CommandRegistry, Command
from macrobot.managers.channel_manager import ChannelManager, ChannelNotReadyError, ChannelSession
from macrobot.repositories.macro_repository import MacroStoreError
from macrobot.utils.discord import DiscordUtils
from macrobot.utils.error_handler import ErrorHandler, get_error_handler
from macrobot.utils.logger import get_logger
from macrobot.utils.validation import ValidationUtils

MACRO_COMMAND = "macro"


class CommandHandler:
    """Handles command parsing and execution."""

    def __init__(
        self,
        client: Any,
        managers: Dict[str, Any],
        owner: Optional[str] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.logger = get_logger("Command")
        self.client = client
        self.managers = managers
        self.channel_manager: ChannelManager = managers["channel_manager"]
        self.owner = config.OWNER if owner is None else owner
        self.error_handler = error_handler or get_error_handler()
        self.registry = CommandRegistry()

        self._register_commands()

    def _register_commands(self) -> None:
        """Register all commands, in the order they run for a matching line."""
        self.registry.register(
            {
                "name": MACRO_COMMAND,
                "pattern": macros.TRIGGER_REGEX.pattern,
            },
            self._cmd_invoke,
        )

        self.registry.register(
            {
                "name": "remember",
                "pattern": r"^!remember (\S+) is (.+)",
            },
            self._cmd_remember,
        )

        self.registry.register(
            {
                "name": "forget",
                "pattern": r"^!forget (\S+)",
            },
            self._cmd_forget,
        )

        self.registry.register(
            {
                "name": "show",
                "pattern": r"^!show (\S+)",
            },
            self._cmd_show,
        )

        self.logger.info(f"Registered {len(self.registry.get_all())} commands")

    # Command Handlers

    async def _cmd_invoke(self, message: Any, match: Any, session: ChannelSession) -> None:
        """Handle `[nick: ]!name [tokens]`."""
        try:
            table = await session.get_table()
        except ChannelNotReadyError as e:
            self.logger.debug(f"Macro skipped, channel not ready: {e}")
            return

        trigger = macros.Trigger.from_match(match)
        sender = DiscordUtils.display_name(message.author)

        text = macros.invoke(table, trigger.name, trigger.arguments, sender, trigger.addressee)
        if text is None:
            return

        self.logger.debug(f"Executing macro: {trigger.name}")
        await DiscordUtils.say(message.channel, text)

    async def _cmd_remember(self, message: Any, match: Any, session: ChannelSession) -> None:
        """Handle `!remember name is text`."""
        sender = DiscordUtils.display_name(message.author)
        table = await session.get_table()

        name = macros.define(table, match.group(1), match.group(2))

        try:
            await session.save()
        except MacroStoreError as e:
            self.logger.error(f"Failed to save command {name}: {e}")
            await self._report_failure(message.channel, f'Error saving "{name}": {e}', sender)
            return

        self.logger.info(f"Command {name} saved for channel {session.channel_id}")
        await DiscordUtils.say(message.channel, f'Command "{name}" saved!', sender)

    async def _cmd_forget(self, message: Any, match: Any, session: ChannelSession) -> None:
        """Handle `!forget name`."""
        sender = DiscordUtils.display_name(message.author)
        table = await session.get_table()

        name = macros.normalize_name(match.group(1))
        if not macros.forget(table, name):
            await DiscordUtils.say(message.channel, f"Command Not Found: {name}", sender)
            return

        try:
            await session.save()
        except MacroStoreError as e:
            self.logger.error(f"Failed to remove command {name}: {e}")
            await self._report_failure(message.channel, f'Error removing "{name}": {e}', sender)
            return

        self.logger.info(f"Command {name} forgotten for channel {session.channel_id}")
        await DiscordUtils.say(message.channel, f'Command "{name}" forgotten!', sender)

    async def _cmd_show(self, message: Any, match: Any, session: ChannelSession) -> None:
        """Handle `!show name`."""
        sender = DiscordUtils.display_name(message.author)
        table = await session.get_table()

        name = macros.normalize_name(match.group(1))
        templates = macros.show(table, name)
        if not templates:
            await DiscordUtils.say(message.channel, f"Command Not Found: {name}", sender)
            return

        for template in templates:
            await DiscordUtils.say(message.channel, template, sender)

    async def _report_failure(self, channel: Any, text: str, sender: str) -> None:
        await DiscordUtils.say(channel, text, sender)
        if self.owner:
            await DiscordUtils.say(channel, f"Please notify {self.owner}", sender)

    async def handle(self, message: Any) -> None:
        """
        Handle incoming message.

        Args:
            message: Discord message object
        """
        user = getattr(self.client, "user", None) if self.client else None
        if user is not None and message.author.id == user.id:
            return

        content = ValidationUtils.sanitize_input(message.content or "")
        matches = self.registry.match(content)
        if not matches:
            return

        session = self.channel_manager.get_session(str(message.channel.id))

        async with session.lock:
            for command, match in matches:
                await self._execute(command, message, match, session)

    async def _execute(self, command: Command, message: Any, match: Any, session: ChannelSession) -> None:
        # Failures are counted per command and channel
        context = f"{command.name}:{session.channel_id}"
        run = self.error_handler.wrap(context)(self._run_command)
        await run(command, message, match, session)

    async def _run_command(self, command: Command, message: Any, match: Any, session: ChannelSession) -> None:
        try:
            await command.handler(message, match, session)
        except ChannelNotReadyError as e:
            self.logger.warning(f"Commands unavailable for channel {session.channel_id}: {e}")
            await DiscordUtils.say(
                message.channel,
                f"Commands are not available right now: {e}",
                DiscordUtils.display_name(message.author),
            )
