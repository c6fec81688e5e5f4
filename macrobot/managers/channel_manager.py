"""
Channel Manager
Owns one macro table session per channel
"""

import asyncio
from enum import Enum
from typing import Dict, Optional

from macrobot.commands.macros import MacroTable
from macrobot.repositories.macro_repository import MacroRepository, MacroStoreError
from macrobot.utils.logger import LoggerMixin


class ChannelNotReadyError(Exception):
    """Raised when a channel's macro table could not be loaded."""


class SessionState(Enum):
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class ChannelSession(LoggerMixin):
    """
    Macro table handle of a single channel.

    Operations arriving while the table is loading wait for the load to
    finish. A failed load rejects them with ChannelNotReadyError; the next
    call to `get_table` starts a new load.
    """

    def __init__(self, channel_id: str, repository: MacroRepository):
        super().__init__("ChannelSession")
        self.channel_id = channel_id
        self.repository = repository
        self.state = SessionState.LOADING
        self.table: Optional[MacroTable] = None
        self.load_error: Optional[MacroStoreError] = None
        self._load_task: Optional[asyncio.Task] = None
        # One event at a time per channel
        self.lock = asyncio.Lock()

    def start_loading(self) -> asyncio.Task:
        """Start fetching the table from the store."""
        self.state = SessionState.LOADING
        self.load_error = None
        self._load_task = asyncio.create_task(self._load())
        return self._load_task

    async def _load(self) -> None:
        try:
            self.table = await self.repository.get_or_create(self.channel_id)
        except MacroStoreError as e:
            self.state = SessionState.FAILED
            self.load_error = e
            self.error(f"Failed to load commands for channel {self.channel_id}: {e}")
            return

        self.state = SessionState.READY
        self.debug(f"Commands loaded for channel {self.channel_id}")

    async def get_table(self) -> MacroTable:
        """
        Get the loaded table, waiting for a pending load.

        Returns:
            The channel's MacroTable

        Raises:
            ChannelNotReadyError: If the table could not be loaded
        """
        if self.state == SessionState.FAILED:
            self.start_loading()

        if self.state == SessionState.LOADING and self._load_task is not None:
            await asyncio.shield(self._load_task)

        if self.state != SessionState.READY or self.table is None:
            raise ChannelNotReadyError(str(self.load_error or "Commands not loaded"))

        return self.table

    async def save(self) -> None:
        """
        Save the in-memory table.

        Raises:
            MacroStoreError: If the write fails
        """
        if self.table is None:
            raise ChannelNotReadyError("Commands not loaded")
        await self.repository.save(self.table)


class ChannelManager(LoggerMixin):
    """Creates and caches ChannelSession objects."""

    def __init__(self, repository: MacroRepository):
        super().__init__("ChannelManager")
        self.repository = repository
        self.sessions: Dict[str, ChannelSession] = {}

    def get_session(self, channel_id: str) -> ChannelSession:
        """
        Get the session of a channel, starting its load on first use.

        Args:
            channel_id: Channel ID

        Returns:
            ChannelSession
        """
        session = self.sessions.get(channel_id)
        if session is None:
            session = ChannelSession(channel_id, self.repository)
            session.start_loading()
            self.sessions[channel_id] = session
            self.debug(f"Session opened for channel {channel_id}")
        return session

    def get_loaded_table(self, channel_id: str) -> Optional[MacroTable]:
        """
        Get a channel's table if it is already in memory.

        Args:
            channel_id: Channel ID

        Returns:
            MacroTable or None
        """
        session = self.sessions.get(channel_id)
        if session and session.state == SessionState.READY:
            return session.table
        return None

    def cleanup(self) -> None:
        """Cancel pending loads and drop all sessions."""
        for session in self.sessions.values():
            task = session._load_task
            if task and not task.done():
                task.cancel()
        self.sessions.clear()
        self.info("Channel sessions cleared")
