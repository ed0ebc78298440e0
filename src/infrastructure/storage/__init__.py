"""Storage infrastructure implementations."""

from src.infrastructure.storage.sqlite import (
    SQLiteClientStore,
    SQLiteMaterialConsumptionStore,
    SQLiteMaterialPurchaseStore,
    SQLiteMaterialStore,
    SQLiteProductStore,
    SQLiteSaleStore,
    SQLiteUnitOfWork,
    SQLiteUserStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteProductStore",
    "SQLiteMaterialStore",
    "SQLiteClientStore",
    "SQLiteSaleStore",
    "SQLiteMaterialPurchaseStore",
    "SQLiteMaterialConsumptionStore",
    "SQLiteUserStore",
    "SQLiteUnitOfWork",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
