"""
Listing endpoint tests.
"""

from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from macrobot.bot.web_server import create_app
from macrobot.commands.macros import MacroTable
from macrobot.managers.channel_manager import ChannelManager
from macrobot.repositories.macro_repository import MacroRepository, MacroStoreError


def make_client(manager):
    return TestClient(create_app(lambda: manager))


def make_manager(**kwargs):
    repository = MagicMock()
    repository.is_connected.return_value = True
    repository.find_by_channel = AsyncMock(**kwargs)
    return ChannelManager(repository)


def test_listing_page():
    response = make_client(make_manager()).get("/commands")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "/commands/" in response.text


def test_channel_commands():
    table = MacroTable(channel="c1", simple_commands={"hi": "there"}, token_commands={"t": ":token1"})
    manager = make_manager(return_value=table)

    response = make_client(manager).get("/commands/c1")

    assert response.status_code == 200
    assert response.json() == {
        "channel": "c1",
        "simpleCommands": {"hi": "there"},
        "tokenCommands": {"t": ":token1"},
        "updatedAt": None,
    }
    manager.repository.find_by_channel.assert_awaited_once_with("c1")


def test_unknown_channel():
    response = make_client(make_manager(return_value=None)).get("/commands/nope")

    assert response.status_code == 200
    assert response.json() is None


def test_store_error():
    manager = make_manager(side_effect=MacroStoreError("connection refused"))

    response = make_client(manager).get("/commands/c1")

    assert response.status_code == 500
    assert response.json() == {"error": "connection refused"}


def test_before_setup():
    response = make_client(None).get("/commands/c1")

    assert response.status_code == 503


async def test_without_database_serves_loaded_tables(handler, channel, message_factory):
    await handler.handle(message_factory("!remember hello is hi :nick", channel))
    client = make_client(handler.channel_manager)

    response = client.get(f"/commands/{channel.id}")

    assert response.status_code == 200
    assert response.json()["simpleCommands"] == {"hello": "hi :nick"}
    assert client.get("/commands/never-seen").json() is None


def test_without_database_unknown_channel():
    response = make_client(ChannelManager(MacroRepository(None))).get("/commands/c1")

    assert response.status_code == 200
    assert response.json() is None
