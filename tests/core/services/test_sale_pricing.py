"""Tests for the sale pricing engine."""

from unittest.mock import AsyncMock

import pytest

from src.core.entities.material import Material, MaterialCategory, MaterialUnit
from src.core.entities.product import Product
from src.core.entities.sale import PaymentMethod, PaymentStatus
from src.core.exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    MaterialNotFoundError,
    ProductNotFoundError,
)
from src.core.services.policy import LedgerPolicy
from src.core.services.sale_pricing import (
    MaterialLine,
    SaleLine,
    SalePricingEngine,
    compute_profit,
    resolve_payment_status,
)


@pytest.fixture
def catalog(cone_product, cone_material, syrup_material):
    products = {cone_product.id: cone_product}
    materials = {cone_material.id: cone_material, syrup_material.id: syrup_material}

    product_store = AsyncMock()
    product_store.get_product = AsyncMock(side_effect=lambda pid: products.get(pid))
    material_store = AsyncMock()
    material_store.get_material = AsyncMock(side_effect=lambda mid: materials.get(mid))
    return product_store, material_store


@pytest.fixture
def engine(catalog):
    product_store, material_store = catalog
    return SalePricingEngine(product_store, material_store, LedgerPolicy(tax_rate=0.15))


class TestResolvePaymentStatus:
    def test_explicit_status_wins(self):
        assert resolve_payment_status(PaymentStatus.PENDING, PaymentMethod.CASH) is PaymentStatus.PENDING
        assert resolve_payment_status(PaymentStatus.PAID, PaymentMethod.PENDING) is PaymentStatus.PAID

    def test_pending_method_defers(self):
        assert resolve_payment_status(None, PaymentMethod.PENDING) is PaymentStatus.PENDING

    def test_other_methods_pay(self):
        for method in (PaymentMethod.CASH, PaymentMethod.PIX, PaymentMethod.CREDIT_CARD):
            assert resolve_payment_status(None, method) is PaymentStatus.PAID


class TestComputeProfit:
    def test_tax_on_gross(self):
        assert compute_profit(300.0, 120.0, 0.15) == (180.0, 27.0, 153.0)

    def test_negative_gross_gives_negative_tax(self):
        gross, tax, net = compute_profit(10.0, 20.0, 0.15)
        assert gross == -10.0
        assert tax == -1.5
        assert net == -8.5


class TestSalePricingEngine:
    async def test_single_line_totals(self, engine):
        """Three cones at 100 with cost 40: total 300, cost 120, net 153."""
        priced = await engine.price_sale(
            [SaleLine(product_id=1, quantity=3)], PaymentMethod.CASH
        )

        assert priced.total_amount == 300.0
        assert priced.total_cost == 120.0
        assert priced.gross_profit == 180.0
        assert priced.tax == 27.0
        assert priced.net_profit == 153.0
        assert priced.payment_status is PaymentStatus.PAID
        assert priced.deductions.products == {1: -3}

        item = priced.items[0]
        assert item.unit_price == 100.0
        assert item.subtotal == 300.0
        assert item.cost == 120.0

    async def test_unit_price_override(self, engine):
        priced = await engine.price_sale(
            [SaleLine(product_id=1, quantity=2, unit_price=80.0)], PaymentMethod.PIX
        )

        assert priced.total_amount == 160.0
        assert priced.items[0].unit_price == 80.0

    async def test_material_usage_is_per_unit_sold(self, engine):
        priced = await engine.price_sale(
            [
                SaleLine(
                    product_id=1,
                    quantity=2,
                    materials_used=[
                        MaterialLine(material_id=1, quantity=1),
                        MaterialLine(material_id=2, quantity=0.25),
                    ],
                )
            ],
            PaymentMethod.CASH,
        )

        usages = {u.material_id: u for u in priced.items[0].materials_used}
        assert usages[1].quantity == 2
        assert usages[1].cost == 1.0
        assert usages[2].quantity == 0.5
        assert usages[2].cost == 10.0
        assert priced.materials_cost == 11.0
        assert priced.total_cost == 91.0
        assert priced.deductions.materials == {1: -2, 2: -0.5}

    async def test_pending_method_leaves_status_pending(self, engine):
        priced = await engine.price_sale(
            [SaleLine(product_id=1, quantity=1)], PaymentMethod.PENDING
        )

        assert priced.payment_status is PaymentStatus.PENDING

    async def test_stock_checked_across_lines(self, engine):
        """Two lines for the same product must fit the stock together."""
        with pytest.raises(InsufficientStockError) as exc_info:
            await engine.price_sale(
                [SaleLine(product_id=1, quantity=6), SaleLine(product_id=1, quantity=5)],
                PaymentMethod.CASH,
            )

        assert exc_info.value.details["available"] == 4

    async def test_insufficient_product_stock(self, engine):
        with pytest.raises(InsufficientStockError):
            await engine.price_sale([SaleLine(product_id=1, quantity=11)], PaymentMethod.CASH)

    async def test_insufficient_material_stock(self, engine):
        with pytest.raises(InsufficientStockError) as exc_info:
            await engine.price_sale(
                [
                    SaleLine(
                        product_id=1,
                        quantity=2,
                        materials_used=[MaterialLine(material_id=2, quantity=2)],
                    )
                ],
                PaymentMethod.CASH,
            )

        assert exc_info.value.details["unit"] == "kg"

    async def test_unknown_product(self, engine):
        with pytest.raises(ProductNotFoundError):
            await engine.price_sale([SaleLine(product_id=42, quantity=1)], PaymentMethod.CASH)

    async def test_unknown_material(self, engine):
        with pytest.raises(MaterialNotFoundError):
            await engine.price_sale(
                [
                    SaleLine(
                        product_id=1,
                        quantity=1,
                        materials_used=[MaterialLine(material_id=42, quantity=1)],
                    )
                ],
                PaymentMethod.CASH,
            )

    async def test_fractional_discrete_usage_rejected(self, engine):
        with pytest.raises(InvalidQuantityError):
            await engine.price_sale(
                [
                    SaleLine(
                        product_id=1,
                        quantity=1,
                        materials_used=[MaterialLine(material_id=1, quantity=0.5)],
                    )
                ],
                PaymentMethod.CASH,
            )

    async def test_pricing_never_writes_stock(self, engine, catalog):
        product_store, material_store = catalog

        await engine.price_sale([SaleLine(product_id=1, quantity=1)], PaymentMethod.CASH)

        product_store.set_stock.assert_not_called()
        material_store.set_stock.assert_not_called()

    async def test_zero_tax_rate(self, catalog):
        product_store, material_store = catalog
        engine = SalePricingEngine(product_store, material_store, LedgerPolicy(tax_rate=0.0))

        priced = await engine.price_sale([SaleLine(product_id=1, quantity=1)], PaymentMethod.CASH)

        assert priced.net_profit == priced.gross_profit == 60.0

    async def test_free_product(self):
        product_store = AsyncMock()
        product_store.get_product = AsyncMock(
            return_value=Product(id=5, name="Sample", price=0, cost_price=0, stock=3)
        )
        engine = SalePricingEngine(product_store, AsyncMock())

        priced = await engine.price_sale([SaleLine(product_id=5, quantity=3)], PaymentMethod.CASH)

        assert priced.total_amount == 0
        assert priced.net_profit == 0

    async def test_material_loaded_once_per_sale(self, catalog, engine):
        _, material_store = catalog

        await engine.price_sale(
            [
                SaleLine(product_id=1, quantity=1, materials_used=[MaterialLine(material_id=2, quantity=1)]),
                SaleLine(product_id=1, quantity=1, materials_used=[MaterialLine(material_id=2, quantity=1)]),
            ],
            PaymentMethod.CASH,
        )

        material_store.get_material.assert_awaited_once_with(2)

    async def test_cumulative_material_shortage(self):
        material = Material(
            id=3,
            name="Sprinkles",
            category=MaterialCategory.TOPPING,
            unit=MaterialUnit.KG,
            quantity_in_stock=1.0,
        )
        product_store = AsyncMock()
        product_store.get_product = AsyncMock(
            return_value=Product(id=1, name="Cone", price=10, cost_price=2, stock=100)
        )
        material_store = AsyncMock()
        material_store.get_material = AsyncMock(return_value=material)
        engine = SalePricingEngine(product_store, material_store)

        with pytest.raises(InsufficientStockError):
            await engine.price_sale(
                [
                    SaleLine(product_id=1, quantity=1, materials_used=[MaterialLine(material_id=3, quantity=0.6)]),
                    SaleLine(product_id=1, quantity=1, materials_used=[MaterialLine(material_id=3, quantity=0.6)]),
                ],
                PaymentMethod.CASH,
            )
