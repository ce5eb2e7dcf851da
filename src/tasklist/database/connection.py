"""
Database connection and pool management
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import asyncpg

from tasklist.config.settings import (
    DATABASE_URL,
    DB_COMMAND_TIMEOUT,
    DB_POOL_MAX_SIZE,
    DB_POOL_MIN_SIZE,
)
from tasklist.utils.error_handling import redact_dsn
from tasklist.utils.errors import DatabaseError

logger = logging.getLogger(__name__)

# asyncio.TimeoutError (command_timeout) is only an OSError from Python 3.11 on
DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class Database:
    """
    Long-lived database handle backed by an asyncpg pool

    Construct once at startup, open it, pass it to whoever needs it, and
    close it on shutdown. Prefer ``async with Database(...) as db`` so the
    pool is released on every exit path.
    """

    def __init__(
        self,
        dsn: str = DATABASE_URL,
        min_size: int = DB_POOL_MIN_SIZE,
        max_size: int = DB_POOL_MAX_SIZE,
        command_timeout: float = DB_COMMAND_TIMEOUT,
    ):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self._pool: Optional[asyncpg.Pool] = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise DatabaseError("acquire database handle", RuntimeError("database is not open"))
        return self._pool

    async def open(self) -> "Database":
        """Create the pool and verify the connection"""
        if self._pool is not None:
            return self

        logger.info(f"Connecting to {redact_dsn(self.dsn)}")
        try:
            pool = await asyncpg.create_pool(
                self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout,
                statement_cache_size=0  # pgbouncer compatibility
            )
        except DRIVER_ERRORS as e:
            raise DatabaseError("open database", e) from e

        try:
            async with pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
        except DRIVER_ERRORS as e:
            await pool.close()
            raise DatabaseError("verify database connection", e) from e

        self._pool = pool
        logger.info("Database initialized successfully")
        return self

    async def close(self) -> None:
        """Close the pool; safe to call when never opened"""
        pool, self._pool = self._pool, None
        if pool is not None:
            await pool.close()
            logger.info("Database connections closed")

    async def __aenter__(self) -> "Database":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        """Borrow a pooled connection for the duration of the block"""
        async with self.pool.acquire() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Borrow a connection inside a transaction

        Commits when the block completes, rolls back when it raises.
        """
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                yield conn
