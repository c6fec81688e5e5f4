"""
Macro Repository
Stores one macro table document per channel
"""

import json
from typing import Any, Dict, List, Optional
import asyncpg

from macrobot.commands.macros import MacroTable
from macrobot.utils.logger import get_logger


class MacroStoreError(Exception):
    """Raised when the document store rejects a read or a write."""


class MacroRepository:
    """Repository for channel_macros table."""

    table_name = "channel_macros"

    def __init__(self, pool: Optional[asyncpg.Pool]):
        """
        Create MacroRepository instance.

        Args:
            pool: PostgreSQL connection pool (None when running without a database)
        """
        self.pool = pool
        self.logger = get_logger(self.__class__.__name__)

    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self.pool is not None

    async def query(self, sql: str, params: List[Any]) -> Optional[Dict[str, Any]]:
        """
        Execute a query returning at most one row.

        Args:
            sql: SQL query string
            params: Query parameters

        Returns:
            Row as dict or None

        Raises:
            MacroStoreError: If the query fails
        """
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(sql, *params)
        except Exception as e:
            self.logger.error(f"Query failed: {e}")
            raise MacroStoreError(str(e)) from e

        return dict(row) if row else None

    async def find_by_channel(self, channel: str) -> Optional[MacroTable]:
        """
        Get the stored macro table of a channel.

        Args:
            channel: Channel ID

        Returns:
            MacroTable or None if the channel has no record

        Raises:
            MacroStoreError: If the query fails or the record cannot be decoded
        """
        sql = f"SELECT * FROM {self.table_name} WHERE channel = $1"
        return self.row_to_table(await self.query(sql, [channel]))

    async def get_or_create(self, channel: str) -> MacroTable:
        """
        Get the macro table of a channel, creating an empty one on first use.

        Args:
            channel: Channel ID

        Returns:
            MacroTable

        Raises:
            MacroStoreError: If the store fails
        """
        if not self.is_connected():
            self.logger.warning(f"Database not connected, channel {channel} kept in memory")
            return MacroTable(channel=channel)

        table = await self.find_by_channel(channel)
        if table:
            return table

        sql = f"""
            INSERT INTO {self.table_name} (channel, simple_commands, token_commands)
            VALUES ($1, '{{}}'::jsonb, '{{}}'::jsonb)
            ON CONFLICT (channel) DO NOTHING
            RETURNING *
        """
        row = await self.query(sql, [channel])

        # Lost a race with another insert
        if row is None:
            return await self.find_by_channel(channel) or MacroTable(channel=channel)

        self.logger.info(f"Created macro table for channel {channel}")
        return self.row_to_table(row)

    async def save(self, table: MacroTable) -> None:
        """
        Save the whole macro table of a channel.

        Args:
            table: Macro table to store

        Raises:
            MacroStoreError: If the write fails
        """
        if not self.is_connected():
            self.logger.warning("Database not connected, save skipped")
            return

        sql = f"""
            INSERT INTO {self.table_name} (channel, simple_commands, token_commands)
            VALUES ($1, $2, $3)
            ON CONFLICT (channel)
            DO UPDATE SET
                simple_commands = EXCLUDED.simple_commands,
                token_commands = EXCLUDED.token_commands,
                updated_at = CURRENT_TIMESTAMP
            RETURNING *
        """
        row = await self.query(sql, [
            table.channel,
            json.dumps(table.simple_commands),
            json.dumps(table.token_commands),
        ])

        if row:
            table.updated_at = row.get("updated_at")

    def row_to_table(self, row: Optional[Dict[str, Any]]) -> Optional[MacroTable]:
        """
        Convert a database row to a MacroTable.

        Args:
            row: Database row

        Returns:
            MacroTable or None

        Raises:
            MacroStoreError: If a command column is not a JSON object
        """
        if not row:
            return None

        channel = row.get("channel")
        return MacroTable(
            channel=channel,
            simple_commands=self._load_mapping(channel, "simple_commands", row.get("simple_commands")),
            token_commands=self._load_mapping(channel, "token_commands", row.get("token_commands")),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    @staticmethod
    def _load_mapping(channel: str, column: str, value: Any) -> Dict[str, str]:
        """Decode a JSONB column (asyncpg returns it as text)."""
        if value is None:
            return {}
        if isinstance(value, dict):
            return dict(value)

        try:
            decoded = json.loads(value)
        except (json.JSONDecodeError, TypeError) as e:
            raise MacroStoreError(f"Corrupt {column} for channel {channel}: {e}") from e

        if not isinstance(decoded, dict):
            raise MacroStoreError(f"Corrupt {column} for channel {channel}: expected an object")

        return decoded
