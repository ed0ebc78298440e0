"""Fixtures for use case tests: a dict-backed unit of work built from AsyncMocks."""

from itertools import count
from unittest.mock import AsyncMock

import pytest

from src.core.services.policy import LedgerPolicy


class FakeUnitOfWork:
    """
    Unit of work whose stores read and write plain dicts.

    Entering and leaving is recorded so tests can check commit/rollback.
    Writes are not undone on rollback; assert on ``rolled_back`` instead.
    """

    def __init__(self, products=None, materials=None, sales=None, purchases=None, consumptions=None):
        self.product_rows = {p.id: p for p in products or []}
        self.material_rows = {m.id: m for m in materials or []}
        self.sale_rows = {s.id: s for s in sales or []}
        self.purchase_rows = {p.id: p for p in purchases or []}
        self.consumption_rows = {c.id: c for c in consumptions or []}
        self.committed = False
        self.rolled_back = False
        self.entered = 0
        ids = count(100)

        def set_product_stock(product_id, stock):
            self.product_rows[product_id].stock = stock

        def set_material_stock(material_id, quantity_in_stock, cost_per_unit=None):
            material = self.material_rows[material_id]
            material.quantity_in_stock = quantity_in_stock
            if cost_per_unit is not None:
                material.cost_per_unit = cost_per_unit

        def insert(rows):
            def _insert(entity):
                saved = entity.model_copy(update={"id": next(ids)})
                rows[saved.id] = saved
                return saved

            return _insert

        def replace(rows):
            def _replace(entity):
                rows[entity.id] = entity
                return entity

            return _replace

        def delete(rows):
            def _delete(entity_id):
                return rows.pop(entity_id, None) is not None

            return _delete

        self.products = AsyncMock()
        self.products.get_product = AsyncMock(side_effect=self.product_rows.get)
        self.products.set_stock = AsyncMock(side_effect=set_product_stock)
        self.products.update_product = AsyncMock(side_effect=replace(self.product_rows))

        self.materials = AsyncMock()
        self.materials.get_material = AsyncMock(side_effect=self.material_rows.get)
        self.materials.set_stock = AsyncMock(side_effect=set_material_stock)
        self.materials.create_material = AsyncMock(side_effect=insert(self.material_rows))
        self.materials.update_material = AsyncMock(side_effect=replace(self.material_rows))

        self.clients = AsyncMock()

        self.sales = AsyncMock()
        self.sales.get_sale = AsyncMock(side_effect=self.sale_rows.get)
        self.sales.create_sale = AsyncMock(side_effect=insert(self.sale_rows))
        self.sales.update_payment = AsyncMock(side_effect=replace(self.sale_rows))

        self.purchases = AsyncMock()
        self.purchases.get_purchase = AsyncMock(side_effect=self.purchase_rows.get)
        self.purchases.create_purchase = AsyncMock(side_effect=insert(self.purchase_rows))
        self.purchases.update_purchase = AsyncMock(side_effect=replace(self.purchase_rows))
        self.purchases.delete_purchase = AsyncMock(side_effect=delete(self.purchase_rows))

        self.consumptions = AsyncMock()
        self.consumptions.get_consumption = AsyncMock(side_effect=self.consumption_rows.get)
        self.consumptions.create_consumption = AsyncMock(side_effect=insert(self.consumption_rows))
        self.consumptions.delete_consumption = AsyncMock(side_effect=delete(self.consumption_rows))

    async def __aenter__(self):
        self.entered += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.committed = True
        else:
            self.rolled_back = True


@pytest.fixture
def make_uow():
    """Build a FakeUnitOfWork and a factory returning it."""

    def _make(**rows):
        uow = FakeUnitOfWork(**rows)
        return uow, lambda: uow

    return _make


@pytest.fixture
def policy():
    return LedgerPolicy(tax_rate=0.15)
