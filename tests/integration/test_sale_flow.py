"""Integration tests: purchase, consume, sell and settle against SQLite."""

from datetime import UTC, datetime, timedelta

import pytest

from src.application.dto.requests import (
    CreateConsumptionRequest,
    CreatePurchaseRequest,
    CreateSaleRequest,
    DateRangeRequest,
    MaterialUsageRequest,
    SaleItemRequest,
    UpdatePaymentStatusRequest,
)
from src.application.use_cases.create_sale import CreateSaleUseCase
from src.application.use_cases.material_consumption_report import (
    MaterialConsumptionReportUseCase,
)
from src.application.use_cases.material_consumptions import CreateConsumptionUseCase
from src.application.use_cases.material_purchases import CreatePurchaseUseCase
from src.application.use_cases.update_payment_status import UpdatePaymentStatusUseCase
from src.core.entities.material import Material, MaterialCategory, MaterialUnit
from src.core.entities.product import Product
from src.core.entities.sale import PaymentMethod, PaymentStatus
from src.core.exceptions import InsufficientStockError
from src.infrastructure.storage.sqlite import (
    SQLiteMaterialStore,
    SQLiteProductStore,
    SQLiteSaleStore,
)


@pytest.fixture
async def catalog(migrated_db):
    product = await SQLiteProductStore().create_product(
        Product(name="Chocolate Cone", price=100.0, cost_price=40.0, stock=10)
    )
    material = await SQLiteMaterialStore().create_material(
        Material(
            name="Chocolate Coating",
            category=MaterialCategory.COATING,
            unit=MaterialUnit.KG,
            cost_per_unit=20.0,
            quantity_in_stock=3.5,
            supplier="Cocoa Ltd",
        )
    )
    return product, material


async def stock_of(product_id: int, material_id: int) -> tuple[int, float]:
    product = await SQLiteProductStore().get_product(product_id)
    material = await SQLiteMaterialStore().get_material(material_id)
    return product.stock, material.quantity_in_stock


def sale_request(product_id: int, material_id: int, quantity: int, **kwargs) -> CreateSaleRequest:
    return CreateSaleRequest(
        client_id=1,
        items=[
            SaleItemRequest(
                product_id=product_id,
                quantity=quantity,
                materials_used=[MaterialUsageRequest(material_id=material_id, quantity=0.5)],
            )
        ],
        **kwargs,
    )


class TestSaleFlow:
    async def test_purchase_consume_sell_and_settle(self, catalog):
        product, material = catalog

        purchase = await CreatePurchaseUseCase().execute(
            CreatePurchaseRequest(material_id=material.id, quantity=2, unit_price=18.0),
            user_id=1,
        )
        assert purchase.material.quantity_in_stock == 5.5
        assert purchase.purchase.supplier == "Cocoa Ltd"

        await CreateConsumptionUseCase().execute(
            CreateConsumptionRequest(material_id=material.id, quantity=0.5), user_id=1
        )
        assert await stock_of(product.id, material.id) == (10, 5.0)

        created = await CreateSaleUseCase().execute(
            sale_request(product.id, material.id, 3, payment_method=PaymentMethod.CASH),
            seller_id=1,
        )
        sale = created.sale
        assert sale.payment_status is PaymentStatus.PAID
        assert sale.total_amount == 300.0
        assert sale.materials_cost == 27.0
        assert await stock_of(product.id, material.id) == (7, 3.5)

        await UpdatePaymentStatusUseCase().execute(
            sale.id, UpdatePaymentStatusRequest(payment_status=PaymentStatus.PENDING)
        )
        assert await stock_of(product.id, material.id) == (10, 5.0)

        window = DateRangeRequest(
            start=datetime.now(UTC) - timedelta(days=1),
            end=datetime.now(UTC) + timedelta(days=1),
        )
        report = await MaterialConsumptionReportUseCase().execute(window)
        assert [(line.sales_quantity, line.manual_quantity) for line in report.lines] == [
            (0.0, 0.5)
        ]

        settled = await UpdatePaymentStatusUseCase().execute(
            sale.id, UpdatePaymentStatusRequest(payment_status=PaymentStatus.PAID)
        )
        assert settled.sale.paid_at is not None
        assert await stock_of(product.id, material.id) == (7, 3.5)

        report = await MaterialConsumptionReportUseCase().execute(window)
        line = report.lines[0]
        assert line.sales_quantity == 1.5
        assert line.sales_count == 1
        assert line.manual_quantity == 0.5

    async def test_pending_sale_keeps_stock(self, catalog):
        product, material = catalog

        created = await CreateSaleUseCase().execute(
            sale_request(product.id, material.id, 2, payment_method=PaymentMethod.PENDING),
            seller_id=1,
        )

        assert created.sale.payment_status is PaymentStatus.PENDING
        assert created.stock_applied is False
        assert await stock_of(product.id, material.id) == (10, 3.5)

    async def test_insufficient_stock_rolls_everything_back(self, catalog):
        product, material = catalog
        request = CreateSaleRequest(
            client_id=1,
            items=[
                SaleItemRequest(product_id=product.id, quantity=4),
                SaleItemRequest(product_id=product.id, quantity=7),
            ],
        )

        with pytest.raises(InsufficientStockError) as exc_info:
            await CreateSaleUseCase().execute(request, seller_id=1)

        assert exc_info.value.details["available"] == 6
        assert exc_info.value.details["requested"] == 7
        assert await stock_of(product.id, material.id) == (10, 3.5)
        sales, total = await SQLiteSaleStore().list_sales()
        assert total == 0
