"""
Discord client setup using discord.py-self.
"""

import asyncio
import logging
import signal
from typing import Optional

import discord

from macrobot.bot.config import config
from macrobot.bot.database import close_database, get_pool, init_database
from macrobot.bot.web_server import create_app, run_server
from macrobot.commands.command_handler import CommandHandler
from macrobot.managers.channel_manager import ChannelManager
from macrobot.repositories.macro_repository import MacroRepository
from macrobot.utils.error_handler import get_error_handler, setup_error_handler
from macrobot.utils.logger import get_logger, set_default_level

logger = get_logger("Client")


class MacroBot(discord.Client):
    """Discord client answering channel commands."""

    def __init__(self):
        super().__init__()

        # Initialized in setup_hook
        self.repository: Optional[MacroRepository] = None
        self.channel_manager: Optional[ChannelManager] = None
        self.command_handler: Optional[CommandHandler] = None
        self.web_task: Optional[asyncio.Task] = None

    async def setup_hook(self):
        """Called when bot is starting up."""
        logger.info("Setting up bot...")

        setup_error_handler()

        await init_database()
        self.repository = MacroRepository(await get_pool())
        self.channel_manager = ChannelManager(self.repository)
        self.command_handler = CommandHandler(
            self,
            {"channel_manager": self.channel_manager},
        )

        app = create_app(lambda: self.channel_manager)
        self.web_task = await run_server(app)

        logger.success("Bot setup complete")

    async def on_ready(self):
        """Called when bot is ready."""
        logger.success(f"Logged in as: {self.user}")

    async def on_message(self, message: discord.Message):
        """Handle incoming messages."""
        if self.command_handler:
            await self.command_handler.handle(message)

    async def close(self):
        """Clean shutdown."""
        logger.info("Shutting down bot...")

        if self.channel_manager:
            self.channel_manager.cleanup()

        if self.web_task and not self.web_task.done():
            self.web_task.cancel()

        await close_database()
        await get_error_handler().shutdown()

        await super().close()


# Global bot instance
bot: Optional[MacroBot] = None


def create_bot() -> MacroBot:
    """Create and return bot instance."""
    global bot
    bot = MacroBot()
    return bot


async def run_bot():
    """Run the bot."""
    global bot

    config.validate()

    if config.DEBUG:
        set_default_level(logging.DEBUG)

    bot = create_bot()

    loop = asyncio.get_running_loop()

    def shutdown_handler(sig: signal.Signals) -> None:
        logger.info(f"Received {sig.name}, shutting down...")
        asyncio.create_task(bot.close())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown_handler, sig)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    try:
        await bot.start(config.DISCORD_TOKEN)
    except Exception as e:
        logger.error(f"Bot error: {e}")
        raise
