"""
Channel session tests: loading, failure and retry of a channel's table.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from macrobot.commands.macros import MacroTable
from macrobot.managers.channel_manager import (
    ChannelManager,
    ChannelNotReadyError,
    SessionState,
)
from macrobot.repositories.macro_repository import MacroStoreError


def make_repository(**kwargs):
    repository = MagicMock()
    repository.get_or_create = AsyncMock(**kwargs)
    repository.save = AsyncMock()
    return repository


async def test_session_is_created_once():
    repository = make_repository(return_value=MacroTable(channel="c1"))
    manager = ChannelManager(repository)

    first = manager.get_session("c1")
    second = manager.get_session("c1")

    assert first is second
    await first.get_table()
    repository.get_or_create.assert_awaited_once_with("c1")


async def test_callers_wait_for_pending_load():
    release = asyncio.Event()

    async def slow_load(channel):
        await release.wait()
        return MacroTable(channel=channel, simple_commands={"hi": "there"})

    repository = make_repository(side_effect=slow_load)
    session = ChannelManager(repository).get_session("c1")
    assert session.state == SessionState.LOADING

    waiters = [asyncio.create_task(session.get_table()) for _ in range(3)]
    await asyncio.sleep(0)
    assert not any(task.done() for task in waiters)

    release.set()
    tables = await asyncio.gather(*waiters)

    assert session.state == SessionState.READY
    assert all(table is tables[0] for table in tables)
    assert tables[0].simple_commands == {"hi": "there"}


async def test_failed_load_rejects_then_retries():
    table = MacroTable(channel="c1")
    repository = make_repository(side_effect=[MacroStoreError("down"), table])
    manager = ChannelManager(repository)
    session = manager.get_session("c1")

    with pytest.raises(ChannelNotReadyError, match="down"):
        await session.get_table()
    assert session.state == SessionState.FAILED
    assert manager.get_loaded_table("c1") is None

    assert await session.get_table() is table
    assert session.state == SessionState.READY
    assert manager.get_loaded_table("c1") is table


async def test_save_uses_repository():
    table = MacroTable(channel="c1")
    repository = make_repository(return_value=table)
    session = ChannelManager(repository).get_session("c1")

    await session.get_table()
    await session.save()

    repository.save.assert_awaited_once_with(table)


async def test_save_error_propagates():
    table = MacroTable(channel="c1")
    repository = make_repository(return_value=table)
    repository.save.side_effect = MacroStoreError("nope")
    session = ChannelManager(repository).get_session("c1")
    await session.get_table()

    with pytest.raises(MacroStoreError):
        await session.save()


async def test_cleanup_drops_sessions():
    repository = make_repository(return_value=MacroTable(channel="c1"))
    manager = ChannelManager(repository)
    await manager.get_session("c1").get_table()

    manager.cleanup()

    assert manager.sessions == {}
