"""
Test fixtures
=============
Chat messages and channels are plain namespaces; the channel's `send` is an
AsyncMock so tests can read back what the bot said.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from macrobot.commands.command_handler import CommandHandler
from macrobot.managers.channel_manager import ChannelManager
from macrobot.repositories.macro_repository import MacroRepository
from macrobot.utils.error_handler import ErrorHandler


class FakeChannel:
    def __init__(self, channel_id: int = 1234):
        self.id = channel_id
        self.send = AsyncMock()

    @property
    def said(self):
        return [call.args[0] for call in self.send.await_args_list]


def make_message(content: str, channel: FakeChannel, author: str = "alice", author_id: int = 42):
    return SimpleNamespace(
        content=content,
        channel=channel,
        author=SimpleNamespace(id=author_id, display_name=author, name=author),
    )


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def repository() -> MacroRepository:
    """Repository without a pool: tables live in memory, saves are skipped."""
    return MacroRepository(None)


@pytest.fixture
def channel_manager(repository) -> ChannelManager:
    return ChannelManager(repository)


@pytest.fixture
def handler(channel_manager) -> CommandHandler:
    return CommandHandler(
        None,
        {"channel_manager": channel_manager},
        owner="",
        error_handler=ErrorHandler(),
    )


@pytest.fixture
def say(handler, channel):
    """Send a chat line through the handler and return what the bot replied."""

    async def _say(content: str, author: str = "alice"):
        before = len(channel.send.await_args_list)
        await handler.handle(make_message(content, channel, author))
        return channel.said[before:]

    return _say


@pytest.fixture
def message_factory():
    return make_message


@pytest.fixture
def channel_factory():
    return FakeChannel
