"""PostgreSQL-backed token store using ``asyncpg``.

asyncpg is asyncio-only while the store interface is synchronous, so each
store owns a private event loop running on a daemon thread. Callers submit
coroutines to that loop and block on the result.
"""

from __future__ import annotations

import asyncio
import re
import threading
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Awaitable, Optional, Tuple, TypeVar

import asyncpg

from ..errors import TokenNotFoundError, TokenStoreError
from ..utils.logging import get_logger
from .base import TokenStore

logger = get_logger(__name__)

T = TypeVar("T")

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")

_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError, OSError)


class PostgresTokenStore(TokenStore):
    """Token store persisted in a PostgreSQL table."""

    def __init__(
        self,
        dsn: str,
        *,
        table: str = "idempotence_tokens",
        min_size: int = 1,
        max_size: int = 4,
        timeout: float = 5.0,
    ) -> None:
        if not dsn:
            raise ValueError("`dsn` must be provided for PostgresTokenStore.")
        if not _IDENTIFIER_RE.match(table):
            raise ValueError(f"Invalid table name '{table}'.")
        self._dsn = dsn
        self._table = table
        self._min_size = min_size
        self._max_size = max_size
        self._timeout = timeout
        self._pool: Optional[asyncpg.Pool] = None
        self._pool_lock: Optional[asyncio.Lock] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._start_lock = threading.Lock()

        self._create_sql = (
            f"CREATE TABLE IF NOT EXISTS {table} ("
            "token TEXT PRIMARY KEY, "
            "value TEXT NOT NULL)"
        )
        self._select_sql = f"SELECT value FROM {table} WHERE token = $1"
        self._upsert_sql = (
            f"INSERT INTO {table} (token, value) VALUES ($1, $2) "
            "ON CONFLICT (token) DO UPDATE SET value = EXCLUDED.value"
        )
        self._delete_sql = f"DELETE FROM {table} WHERE token = $1 RETURNING token"

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._start_lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(target=loop.run_forever, name="idempotence-postgres", daemon=True)
                thread.start()
                self._loop = loop
                self._thread = thread
            return self._loop

    def _run(self, coro: Awaitable[T]) -> T:
        loop = self._ensure_loop()
        future = asyncio.run_coroutine_threadsafe(coro, loop)  # type: ignore[arg-type]
        try:
            return future.result(timeout=self._timeout)
        except FutureTimeoutError as e:
            future.cancel()
            raise TokenStoreError(f"Token store call timed out after {self._timeout}s") from e
        except _DRIVER_ERRORS as e:
            raise TokenStoreError(f"Token store call failed: {e}") from e

    async def _connect(self) -> asyncpg.Pool:
        if self._pool is not None:
            return self._pool
        if self._pool_lock is None:
            self._pool_lock = asyncio.Lock()
        async with self._pool_lock:
            if self._pool is None:
                pool = await asyncpg.create_pool(dsn=self._dsn, min_size=self._min_size, max_size=self._max_size)
                async with pool.acquire() as conn:
                    await conn.execute(self._create_sql)
                self._pool = pool
                logger.info("token_store_connected", backend="postgres", table=self._table)
        return self._pool

    async def _fetchrow(self, sql: str, *args: Any) -> Any:
        pool = await self._connect()
        async with pool.acquire() as conn:
            return await conn.fetchrow(sql, *args)

    async def _execute(self, sql: str, *args: Any) -> None:
        pool = await self._connect()
        async with pool.acquire() as conn:
            await conn.execute(sql, *args)

    def get(self, key: str) -> Tuple[Optional[str], bool]:
        row = self._run(self._fetchrow(self._select_sql, key))
        if row is None:
            return None, False
        return row["value"], True

    def put(self, key: str, value: str) -> None:
        self._run(self._execute(self._upsert_sql, key, value))

    def delete(self, key: str) -> None:
        row = self._run(self._fetchrow(self._delete_sql, key))
        if row is None:
            logger.debug("token_redeem_miss", backend="postgres")
            raise TokenNotFoundError(key)

    async def _close_pool(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
        self._pool_lock = None

    def close(self) -> None:
        """Close the pool and stop the loop thread."""
        with self._start_lock:
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None
        if loop is None:
            return
        future = asyncio.run_coroutine_threadsafe(self._close_pool(), loop)
        try:
            future.result(timeout=self._timeout)
        except FutureTimeoutError as e:
            future.cancel()
            raise TokenStoreError(f"Closing token store timed out after {self._timeout}s") from e
        except _DRIVER_ERRORS as e:
            raise TokenStoreError(f"Closing token store failed: {e}") from e
        finally:
            # The pool is bound to this loop; the next call starts a fresh loop and pool.
            self._pool = None
            self._pool_lock = None
            loop.call_soon_threadsafe(loop.stop)
            if thread is not None:
                thread.join(timeout=self._timeout)
            if thread is None or not thread.is_alive():
                loop.close()
