"""
Database connection management using asyncpg.
"""

import asyncpg
from typing import Optional

from macrobot.bot.config import config
from macrobot.utils.logger import get_logger

logger = get_logger("Database")

_pool: Optional[asyncpg.Pool] = None


async def init_database() -> None:
    """Initialize database connection pool."""
    global _pool

    if not config.DATABASE_URL:
        logger.warning("DATABASE_URL not set - commands will not be stored")
        return

    try:
        _pool = await asyncpg.create_pool(
            config.DATABASE_URL,
            min_size=1,
            max_size=10,
            command_timeout=60,
        )
        logger.success("Database connected successfully")
        await _init_tables()
    except Exception as e:
        logger.error(f"Failed to connect to database: {e}")
        raise


async def _init_tables() -> None:
    """Initialize database tables if they don't exist."""
    if not _pool:
        return

    async with _pool.acquire() as conn:
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS channel_macros (
                channel VARCHAR(255) PRIMARY KEY,
                simple_commands JSONB NOT NULL DEFAULT '{}'::jsonb,
                token_commands JSONB NOT NULL DEFAULT '{}'::jsonb,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        logger.info("Database tables initialized")


async def close_database() -> None:
    """Close database connection pool."""
    global _pool

    if _pool:
        await _pool.close()
        _pool = None
        logger.info("Database connection closed")


def is_connected() -> bool:
    """Check if database is connected."""
    return _pool is not None


async def get_pool() -> Optional[asyncpg.Pool]:
    """Get the database connection pool."""
    return _pool
