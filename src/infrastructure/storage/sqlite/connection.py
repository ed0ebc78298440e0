"""
Pooled aiosqlite connections for the ledger stores.

Every connection runs in autocommit mode (``isolation_level=None``) so
nothing is opened implicitly. Writers open their own transaction: the
unit of work takes ``BEGIN IMMEDIATE`` to hold the write lock from the
first stock read to the commit, and standalone store calls use a short
``get_transaction()``.

Stores accept an optional bound connection. ``use_connection`` and
``use_transaction`` hand that connection back untouched when a unit of
work owns it, and fall back to the global pool otherwise.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from enum import StrEnum
from pathlib import Path

import aiosqlite

from src.config import get_logger, get_settings

logger = get_logger(__name__)


class TransactionMode(StrEnum):
    DEFERRED = "DEFERRED"
    IMMEDIATE = "IMMEDIATE"
    EXCLUSIVE = "EXCLUSIVE"


async def open_connection(db_path: Path, busy_timeout: int) -> aiosqlite.Connection:
    """Open one autocommit connection with WAL, foreign keys and a busy wait."""
    conn = await aiosqlite.connect(db_path, isolation_level=None)
    for pragma in (
        "journal_mode=WAL",
        "synchronous=NORMAL",
        f"busy_timeout={int(busy_timeout)}",
        "foreign_keys=ON",
    ):
        await conn.execute(f"PRAGMA {pragma}")
    conn.row_factory = aiosqlite.Row
    return conn


class ConnectionPool:
    """
    Fixed-size pool of connections to one database file.

    All connections are opened on ``initialize()``; ``acquire()`` waits
    when every connection is checked out.
    """

    def __init__(self, db_path: Path, pool_size: int = 5, busy_timeout: int = 30000):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout
        self._pool: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def in_use(self) -> int:
        return len(self._connections) - self._pool.qsize()

    async def initialize(self) -> None:
        async with self._lock:
            if self._initialized:
                return
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            while len(self._connections) < self.pool_size:
                conn = await open_connection(self.db_path, self.busy_timeout)
                self._connections.append(conn)
                self._pool.put_nowait(conn)
            self._initialized = True
            logger.info("ledger_pool_opened", db_path=str(self.db_path), size=self.pool_size)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        if not self._initialized:
            await self.initialize()
        conn = await self._pool.get()
        try:
            yield conn
        finally:
            self._pool.put_nowait(conn)

    @asynccontextmanager
    async def transaction(
        self, mode: str = TransactionMode.DEFERRED
    ) -> AsyncIterator[aiosqlite.Connection]:
        """Checked-out connection inside ``BEGIN <mode>``; commit on exit, rollback on error."""
        begin = f"BEGIN {TransactionMode(mode.upper())}"
        async with self.acquire() as conn:
            await conn.execute(begin)
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    async def close(self) -> None:
        async with self._lock:
            while self._connections:
                await self._connections.pop().close()
            self._pool = asyncio.Queue(maxsize=self.pool_size)
            self._initialized = False
            logger.info("ledger_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Process-wide pool on the configured database, opened on first use."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(storage.db_path, storage.pool_size, storage.busy_timeout)
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        pool, _pool = _pool, None
        await pool.close()


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction(
    mode: str = TransactionMode.DEFERRED,
) -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.transaction(mode) as conn:
        yield conn


@asynccontextmanager
async def use_connection(
    conn: aiosqlite.Connection | None,
) -> AsyncIterator[aiosqlite.Connection]:
    """Yield ``conn`` when a unit of work bound one, else a pooled connection."""
    if conn is not None:
        yield conn
        return
    async with get_connection() as pooled:
        yield pooled


@asynccontextmanager
async def use_transaction(
    conn: aiosqlite.Connection | None,
) -> AsyncIterator[aiosqlite.Connection]:
    """
    Yield ``conn`` as-is when bound (its owner commits), else a pooled
    connection inside its own short transaction.
    """
    if conn is not None:
        yield conn
        return
    async with get_transaction() as pooled:
        yield pooled


def is_lock_error(error: BaseException) -> bool:
    """True for SQLite's "database is locked" and "database is busy" errors."""
    if not isinstance(error, aiosqlite.OperationalError):
        return False
    message = str(error).lower()
    return "locked" in message or "busy" in message
