"""
SQLite unit of work.

Opens ``BEGIN IMMEDIATE`` on a pooled connection, so the database write
lock is held from the first read to the commit. Every store is bound to
that connection for the duration of the block.
"""

from contextlib import AsyncExitStack
from types import TracebackType

import aiosqlite
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from src.config import get_logger, get_settings
from src.core.exceptions import StoreBusyError
from src.core.interfaces.unit_of_work import IUnitOfWork
from src.infrastructure.storage.sqlite.client_store import SQLiteClientStore
from src.infrastructure.storage.sqlite.connection import get_pool, is_lock_error
from src.infrastructure.storage.sqlite.ledger_store import (
    SQLiteMaterialConsumptionStore,
    SQLiteMaterialPurchaseStore,
)
from src.infrastructure.storage.sqlite.material_store import SQLiteMaterialStore
from src.infrastructure.storage.sqlite.product_store import SQLiteProductStore
from src.infrastructure.storage.sqlite.sales_store import SQLiteSaleStore

logger = get_logger(__name__)


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "write_lock_retry",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )


class SQLiteUnitOfWork(IUnitOfWork):
    """
    One SQLite transaction spanning the catalog, sale and ledger stores.

    Usage:
        async with SQLiteUnitOfWork() as uow:
            sale = await uow.sales.get_sale(1)
            ...
    """

    def __init__(self, lock_retries: int | None = None, lock_retry_delay: float | None = None):
        settings = get_settings()
        self._lock_retries = lock_retries or settings.storage.lock_retries
        self._lock_retry_delay = lock_retry_delay or settings.storage.lock_retry_delay
        self._stack: AsyncExitStack | None = None
        self._conn: aiosqlite.Connection | None = None

    async def __aenter__(self) -> "SQLiteUnitOfWork":
        pool = await get_pool()
        stack = AsyncExitStack()
        conn = await stack.enter_async_context(pool.acquire())
        try:
            await self._begin(conn)
        except aiosqlite.OperationalError as e:
            await stack.aclose()
            if is_lock_error(e):
                logger.error("write_lock_unavailable", attempts=self._lock_retries)
                raise StoreBusyError(self._lock_retries) from e
            raise
        except BaseException:
            await stack.aclose()
            raise

        self._stack = stack
        self._conn = conn
        self.products = SQLiteProductStore(conn)
        self.materials = SQLiteMaterialStore(conn)
        self.clients = SQLiteClientStore(conn)
        self.sales = SQLiteSaleStore(conn)
        self.purchases = SQLiteMaterialPurchaseStore(conn)
        self.consumptions = SQLiteMaterialConsumptionStore(conn)
        return self

    async def _begin(self, conn: aiosqlite.Connection) -> None:
        begin = retry(
            stop=stop_after_attempt(self._lock_retries),
            wait=wait_exponential(
                multiplier=self._lock_retry_delay,
                min=self._lock_retry_delay,
                max=self._lock_retry_delay * 8,
            ),
            retry=retry_if_exception(is_lock_error),
            before_sleep=_log_retry,
            reraise=True,
        )(conn.execute)
        await begin("BEGIN IMMEDIATE")

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._conn is None or self._stack is None:
            return
        try:
            if exc_type is None:
                try:
                    await self._conn.commit()
                except aiosqlite.Error:
                    await self._conn.rollback()
                    raise
            else:
                await self._conn.rollback()
                logger.info("unit_of_work_rolled_back", error=type(exc).__name__)
        finally:
            await self._stack.aclose()
            self._stack = None
            self._conn = None
