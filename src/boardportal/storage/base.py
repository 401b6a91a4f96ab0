"""
Base Storage

Pooled asyncpg access shared by the portal's table storages. Every storage
reads and writes one backend table; failures surface as one of
STORAGE_ERRORS and are turned into RemoteOperationError by the stores.
"""
import asyncio
import logging
import time
from typing import List, Optional

import asyncpg

from ..config import Config

logger = logging.getLogger("boardportal.storage")

# Server-side errors (constraint, row-level security, missing table),
# client protocol errors, network failures and timeouts.
STORAGE_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


class BaseStorage:
    """Table storage over an asyncpg pool"""

    def __init__(
        self,
        postgres_dsn: str = "postgresql://postgres@localhost/boardportal",
        min_size: int = Config.DB_POOL_MIN_SIZE,
        max_size: int = Config.DB_POOL_MAX_SIZE,
        command_timeout: float = Config.DB_COMMAND_TIMEOUT,
        connect_retries: int = Config.DB_CONNECT_RETRIES,
    ):
        self.pg_dsn = postgres_dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self.connect_retries = connect_retries
        self.pg_pool: Optional[asyncpg.Pool] = None

    @property
    def is_connected(self) -> bool:
        return self.pg_pool is not None

    async def init(self):
        """Open the pool, retrying while the backend is unreachable"""
        if self.pg_pool is not None:
            return

        name = type(self).__name__
        started = time.monotonic()
        for attempt in range(1, self.connect_retries + 1):
            try:
                pool = await asyncpg.create_pool(
                    self.pg_dsn,
                    min_size=self.min_size,
                    max_size=self.max_size,
                    command_timeout=self.command_timeout,
                )
            except STORAGE_ERRORS as e:
                logger.error(f"{name}: connection failed (attempt {attempt}/{self.connect_retries}): {e}")
                if attempt < self.connect_retries:
                    await asyncio.sleep(attempt)
                continue

            self.pg_pool = pool
            duration_ms = round((time.monotonic() - started) * 1000, 2)
            logger.info(f"{name} connected in {duration_ms}ms")
            return

        raise ConnectionError(f"{name}: could not reach the portal database")

    async def close(self):
        if self.pg_pool is not None:
            await self.pg_pool.close()
            self.pg_pool = None
            logger.info(f"{type(self).__name__} closed")

    async def execute(self, query: str, *args) -> str:
        """Run a write and return its command tag"""
        async with self.pg_pool.acquire() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args) -> List[asyncpg.Record]:
        async with self.pg_pool.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args) -> Optional[asyncpg.Record]:
        async with self.pg_pool.acquire() as conn:
            return await conn.fetchrow(query, *args)

    @staticmethod
    def affected_rows(status: str) -> int:
        """Row count from a command tag such as 'UPDATE 3' or 'DELETE 1'"""
        try:
            return int(status.split()[-1])
        except (ValueError, IndexError, AttributeError):
            return 0
