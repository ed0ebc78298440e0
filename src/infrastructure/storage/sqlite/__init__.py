"""SQLite storage implementations."""

from src.infrastructure.storage.sqlite.client_store import SQLiteClientStore
from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from src.infrastructure.storage.sqlite.ledger_store import (
    SQLiteMaterialConsumptionStore,
    SQLiteMaterialPurchaseStore,
)
from src.infrastructure.storage.sqlite.material_store import SQLiteMaterialStore
from src.infrastructure.storage.sqlite.product_store import SQLiteProductStore
from src.infrastructure.storage.sqlite.sales_store import SQLiteSaleStore
from src.infrastructure.storage.sqlite.unit_of_work import SQLiteUnitOfWork
from src.infrastructure.storage.sqlite.user_store import SQLiteUserStore

# Singleton instances
_product_store: SQLiteProductStore | None = None
_material_store: SQLiteMaterialStore | None = None
_client_store: SQLiteClientStore | None = None
_sale_store: SQLiteSaleStore | None = None
_purchase_store: SQLiteMaterialPurchaseStore | None = None
_consumption_store: SQLiteMaterialConsumptionStore | None = None
_user_store: SQLiteUserStore | None = None


async def get_product_store() -> SQLiteProductStore:
    """Get singleton product store instance."""
    global _product_store
    if _product_store is None:
        _product_store = SQLiteProductStore()
    return _product_store


async def get_material_store() -> SQLiteMaterialStore:
    """Get singleton material store instance."""
    global _material_store
    if _material_store is None:
        _material_store = SQLiteMaterialStore()
    return _material_store


async def get_client_store() -> SQLiteClientStore:
    """Get singleton client store instance."""
    global _client_store
    if _client_store is None:
        _client_store = SQLiteClientStore()
    return _client_store


async def get_sale_store() -> SQLiteSaleStore:
    """Get singleton sale store instance."""
    global _sale_store
    if _sale_store is None:
        _sale_store = SQLiteSaleStore()
    return _sale_store


async def get_purchase_store() -> SQLiteMaterialPurchaseStore:
    """Get singleton material purchase store instance."""
    global _purchase_store
    if _purchase_store is None:
        _purchase_store = SQLiteMaterialPurchaseStore()
    return _purchase_store


async def get_consumption_store() -> SQLiteMaterialConsumptionStore:
    """Get singleton material consumption store instance."""
    global _consumption_store
    if _consumption_store is None:
        _consumption_store = SQLiteMaterialConsumptionStore()
    return _consumption_store


async def get_user_store() -> SQLiteUserStore:
    """Get singleton user store instance."""
    global _user_store
    if _user_store is None:
        _user_store = SQLiteUserStore()
    return _user_store


def get_unit_of_work() -> SQLiteUnitOfWork:
    """Create a fresh unit of work (one per operation, never shared)."""
    return SQLiteUnitOfWork()


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteProductStore",
    "SQLiteMaterialStore",
    "SQLiteClientStore",
    "SQLiteSaleStore",
    "SQLiteMaterialPurchaseStore",
    "SQLiteMaterialConsumptionStore",
    "SQLiteUserStore",
    "SQLiteUnitOfWork",
    # Factory functions
    "get_product_store",
    "get_material_store",
    "get_client_store",
    "get_sale_store",
    "get_purchase_store",
    "get_consumption_store",
    "get_user_store",
    "get_unit_of_work",
]
