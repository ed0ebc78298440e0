"""Integration tests: concurrent stock writers against one SQLite database."""

import asyncio

import pytest

from src.application.dto.requests import (
    CreateConsumptionRequest,
    CreateSaleRequest,
    MaterialUpdateRequest,
    ProductUpdateRequest,
    SaleItemRequest,
    UpdatePaymentStatusRequest,
)
from src.application.use_cases.catalog import UpdateMaterialUseCase, UpdateProductUseCase
from src.application.use_cases.create_sale import CreateSaleUseCase
from src.application.use_cases.material_consumptions import CreateConsumptionUseCase
from src.application.use_cases.update_payment_status import UpdatePaymentStatusUseCase
from src.core.entities.material import Material, MaterialCategory, MaterialUnit
from src.core.entities.product import Product
from src.core.entities.sale import PaymentMethod, PaymentStatus
from src.core.exceptions import InsufficientStockError
from src.infrastructure.storage.sqlite import SQLiteMaterialStore, SQLiteProductStore


@pytest.fixture
async def product(migrated_db) -> Product:
    return await SQLiteProductStore().create_product(
        Product(name="Chocolate Cone", price=100.0, cost_price=40.0, stock=5)
    )


@pytest.fixture
async def material(migrated_db) -> Material:
    return await SQLiteMaterialStore().create_material(
        Material(
            name="Chocolate Coating",
            category=MaterialCategory.COATING,
            unit=MaterialUnit.KG,
            cost_per_unit=20.0,
            quantity_in_stock=5.0,
            supplier="Cocoa Ltd",
        )
    )


def sell(product_id: int, quantity: int, method: PaymentMethod = PaymentMethod.CASH):
    return CreateSaleUseCase().execute(
        CreateSaleRequest(
            client_id=1,
            items=[SaleItemRequest(product_id=product_id, quantity=quantity)],
            payment_method=method,
        ),
        seller_id=1,
    )


def consume(material_id: int, quantity: float):
    return CreateConsumptionUseCase().execute(
        CreateConsumptionRequest(material_id=material_id, quantity=quantity), user_id=1
    )


async def product_stock(product_id: int) -> int:
    return (await SQLiteProductStore().get_product(product_id)).stock


async def material_stock(material_id: int) -> float:
    return (await SQLiteMaterialStore().get_material(material_id)).quantity_in_stock


class TestConcurrentSales:
    async def test_only_one_sale_fits_the_stock(self, product):
        results = await asyncio.gather(
            *(sell(product.id, 3) for _ in range(4)), return_exceptions=True
        )

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(results) - len(failures) == 1
        assert len(failures) == 3
        assert all(isinstance(f, InsufficientStockError) for f in failures)
        assert await product_stock(product.id) == 2

    async def test_repeated_pay_deducts_once(self, product):
        created = await sell(product.id, 3, method=PaymentMethod.PENDING)
        assert await product_stock(product.id) == 5

        paid = UpdatePaymentStatusRequest(payment_status=PaymentStatus.PAID)
        results = await asyncio.gather(
            *(UpdatePaymentStatusUseCase().execute(created.sale.id, paid) for _ in range(3))
        )

        assert sum(r.status_changed for r in results) == 1
        assert all(r.sale.payment_status is PaymentStatus.PAID for r in results)
        assert await product_stock(product.id) == 2


class TestConcurrentConsumptions:
    async def test_consumptions_never_overdraw(self, material):
        results = await asyncio.gather(
            *(consume(material.id, 2) for _ in range(3)), return_exceptions=True
        )

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], InsufficientStockError)
        assert await material_stock(material.id) == 1.0


class TestEditsDuringStockMoves:
    async def test_price_edit_keeps_concurrent_sale(self, product):
        await SQLiteProductStore().set_stock(product.id, 10)

        await asyncio.gather(
            sell(product.id, 3),
            UpdateProductUseCase().execute(product.id, ProductUpdateRequest(price=120.0)),
        )

        fetched = await SQLiteProductStore().get_product(product.id)
        assert fetched.stock == 7
        assert fetched.price == 120.0

    async def test_price_edit_from_stale_read_keeps_sale(self, product):
        await SQLiteProductStore().set_stock(product.id, 10)
        stale = await SQLiteProductStore().get_product(product.id)

        await sell(product.id, 3)
        await SQLiteProductStore().update_product(stale.model_copy(update={"price": 120.0}))

        assert await product_stock(product.id) == 7

    async def test_rename_keeps_concurrent_consumption(self, material):
        await asyncio.gather(
            consume(material.id, 2),
            UpdateMaterialUseCase().execute(
                material.id, MaterialUpdateRequest(name="Dark Coating")
            ),
        )

        fetched = await SQLiteMaterialStore().get_material(material.id)
        assert fetched.quantity_in_stock == 3.0
        assert fetched.name == "Dark Coating"

    async def test_rename_from_stale_read_keeps_consumption(self, material):
        stale = await SQLiteMaterialStore().get_material(material.id)

        await consume(material.id, 2)
        await SQLiteMaterialStore().update_material(stale.model_copy(update={"name": "Dark"}))

        assert await material_stock(material.id) == 3.0
