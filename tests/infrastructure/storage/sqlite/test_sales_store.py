"""Tests for SQLiteSaleStore."""

from datetime import UTC, datetime, timedelta

import pytest

from src.core.entities.sale import (
    MaterialUsage,
    PaymentMethod,
    PaymentStatus,
    Sale,
    SaleItem,
    SaleStatus,
)
from src.core.exceptions import SaleNotFoundError

BASE = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


def make_sale(
    sale_date: datetime = BASE,
    payment_status: PaymentStatus = PaymentStatus.PAID,
    status: SaleStatus = SaleStatus.COMPLETED,
) -> Sale:
    return Sale(
        client_id=1,
        seller_id=1,
        items=[
            SaleItem(
                product_id=1,
                quantity=2,
                unit_price=10.0,
                subtotal=20.0,
                cost=8.0,
                materials_used=[MaterialUsage(material_id=1, quantity=0.5, cost=2.5)],
            ),
            SaleItem(product_id=2, quantity=1, unit_price=5.0, subtotal=5.0, cost=1.0),
        ],
        total_amount=25.0,
        total_cost=11.5,
        materials_cost=2.5,
        gross_profit=13.5,
        net_profit=11.48,
        payment_method=PaymentMethod.PIX,
        payment_status=payment_status,
        paid_at=sale_date if payment_status is PaymentStatus.PAID else None,
        status=status,
        sale_date=sale_date,
    )


@pytest.mark.asyncio
class TestSQLiteSaleStore:
    async def test_create_and_get_round_trip(self, sale_store):
        created = await sale_store.create_sale(make_sale())

        fetched = await sale_store.get_sale(created.id)

        assert fetched.payment_method is PaymentMethod.PIX
        assert fetched.paid_at == BASE
        assert [i.product_id for i in fetched.items] == [1, 2]
        assert fetched.items[0].sale_id == created.id
        assert fetched.items[0].materials_used == [
            MaterialUsage(material_id=1, quantity=0.5, cost=2.5)
        ]
        assert fetched.items[0].materials_cost == 2.5
        assert fetched.items[1].materials_used == []
        assert fetched.net_profit == 11.48

    async def test_get_missing(self, sale_store):
        assert await sale_store.get_sale(999) is None

    async def test_update_payment(self, sale_store):
        sale = await sale_store.create_sale(make_sale(payment_status=PaymentStatus.PENDING))
        paid_at = BASE + timedelta(days=1)

        sale.payment_status = PaymentStatus.PAID
        sale.payment_method = PaymentMethod.CASH
        sale.paid_at = paid_at
        await sale_store.update_payment(sale)
        fetched = await sale_store.get_sale(sale.id)

        assert fetched.payment_status is PaymentStatus.PAID
        assert fetched.payment_method is PaymentMethod.CASH
        assert fetched.paid_at == paid_at

    async def test_update_payment_missing_raises(self, sale_store):
        sale = make_sale()
        sale.id = 999

        with pytest.raises(SaleNotFoundError):
            await sale_store.update_payment(sale)

    async def test_list_newest_first_with_range(self, sale_store):
        for offset in range(3):
            await sale_store.create_sale(make_sale(sale_date=BASE + timedelta(days=offset)))

        everything, total = await sale_store.list_sales()
        ranged, ranged_total = await sale_store.list_sales(
            start=BASE + timedelta(days=1), end=BASE + timedelta(days=2)
        )

        assert total == 3
        assert [s.sale_date for s in everything] == [
            BASE + timedelta(days=2),
            BASE + timedelta(days=1),
            BASE,
        ]
        assert len(everything[0].items) == 2
        assert ranged_total == 2

    async def test_list_pagination(self, sale_store):
        for offset in range(3):
            await sale_store.create_sale(make_sale(sale_date=BASE + timedelta(days=offset)))

        page, total = await sale_store.list_sales(limit=2, offset=2)

        assert total == 3
        assert [s.sale_date for s in page] == [BASE]

    async def test_list_paid_completed_filters(self, sale_store):
        kept = await sale_store.create_sale(make_sale())
        await sale_store.create_sale(make_sale(payment_status=PaymentStatus.PENDING))
        await sale_store.create_sale(make_sale(status=SaleStatus.CANCELLED))
        await sale_store.create_sale(make_sale(sale_date=BASE - timedelta(days=30)))

        sales = await sale_store.list_paid_completed(
            BASE - timedelta(days=1), BASE + timedelta(days=1)
        )

        assert [s.id for s in sales] == [kept.id]
        assert sales[0].items[0].materials_used[0].material_id == 1

    async def test_list_for_client_newest_first(self, sale_store):
        older = await sale_store.create_sale(make_sale())
        newer = await sale_store.create_sale(make_sale(sale_date=BASE + timedelta(days=1)))
        await sale_store.create_sale(make_sale().model_copy(update={"client_id": 2}))

        sales = await sale_store.list_sales_for_client(1)

        assert [s.id for s in sales] == [newer.id, older.id]
        assert len(sales[0].items) == 2
        assert await sale_store.list_sales_for_client(404) == []
