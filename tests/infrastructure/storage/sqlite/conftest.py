"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from src.config import get_settings
from src.core.entities.client import Client
from src.core.entities.material import Material, MaterialCategory, MaterialUnit
from src.core.entities.product import Product
from src.infrastructure.storage.sqlite import (
    SQLiteClientStore,
    SQLiteMaterialConsumptionStore,
    SQLiteMaterialPurchaseStore,
    SQLiteMaterialStore,
    SQLiteProductStore,
    SQLiteSaleStore,
    SQLiteUserStore,
    close_pool,
)
from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def initialized_db(temp_db_path: Path) -> Path:
    """Create a temporary database with the full schema applied."""
    results = await initialize_database(db_path=temp_db_path, create_backup_before=False)
    assert all(r.success for r in results)
    return temp_db_path


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def ledger_db() -> AsyncGenerator[Path, None]:
    """
    Migrate the settings database and serve it through the global pool.

    The autouse settings fixture points the data dir at a per-test tmp dir.
    """
    db_path = get_settings().storage.db_path
    await initialize_database(create_backup_before=False)
    yield db_path
    await close_pool()


@pytest.fixture
def product_store(ledger_db) -> SQLiteProductStore:
    return SQLiteProductStore()


@pytest.fixture
def material_store(ledger_db) -> SQLiteMaterialStore:
    return SQLiteMaterialStore()


@pytest.fixture
def client_store(ledger_db) -> SQLiteClientStore:
    return SQLiteClientStore()


@pytest.fixture
def sale_store(ledger_db) -> SQLiteSaleStore:
    return SQLiteSaleStore()


@pytest.fixture
def purchase_store(ledger_db) -> SQLiteMaterialPurchaseStore:
    return SQLiteMaterialPurchaseStore()


@pytest.fixture
def consumption_store(ledger_db) -> SQLiteMaterialConsumptionStore:
    return SQLiteMaterialConsumptionStore()


@pytest.fixture
def user_store(ledger_db) -> SQLiteUserStore:
    return SQLiteUserStore()


@pytest.fixture
async def stored_product(product_store) -> Product:
    return await product_store.create_product(
        Product(name="Chocolate Cone", price=100.0, cost_price=40.0, stock=10)
    )


@pytest.fixture
async def stored_material(material_store) -> Material:
    return await material_store.create_material(
        Material(
            name="Chocolate Coating",
            category=MaterialCategory.COATING,
            unit=MaterialUnit.KG,
            cost_per_unit=20.0,
            quantity_in_stock=3.5,
            minimum_stock=1.0,
            supplier="Cocoa Ltd",
        )
    )


@pytest.fixture
async def stored_client(client_store) -> Client:
    return await client_store.create_client(Client(name="Maria", email="maria@example.com"))
