"""Pytest configuration and fixtures."""

from collections.abc import Generator
from pathlib import Path

import pytest

from src.config import reset_settings
from src.core.entities.material import Material, MaterialCategory, MaterialUnit
from src.core.entities.product import Product


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Point settings at a throwaway data dir and the console email dispatcher."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("AUTH_SECRET_KEY", "test-secret")
    monkeypatch.setenv("EMAIL_PROVIDER", "console")
    monkeypatch.setenv("STORAGE_LOCK_RETRY_DELAY", "0.01")
    reset_settings()

    from src.infrastructure.email import reset_email_dispatcher

    reset_email_dispatcher()
    yield
    reset_email_dispatcher()
    reset_settings()


@pytest.fixture
def cone_product() -> Product:
    """Stock 10, price 100, cost 40."""
    return Product(id=1, name="Chocolate Cone", price=100.0, cost_price=40.0, stock=10)


@pytest.fixture
def cone_material() -> Material:
    """A discrete material counted in units."""
    return Material(
        id=1,
        name="Waffle Cone",
        category=MaterialCategory.CONE,
        unit=MaterialUnit.UNIT,
        cost_per_unit=0.5,
        quantity_in_stock=5,
        supplier="Cone Co",
    )


@pytest.fixture
def syrup_material() -> Material:
    """A continuous material counted in kilograms."""
    return Material(
        id=2,
        name="Chocolate Coating",
        category=MaterialCategory.COATING,
        unit=MaterialUnit.KG,
        cost_per_unit=20.0,
        quantity_in_stock=3.5,
        minimum_stock=1.0,
    )
