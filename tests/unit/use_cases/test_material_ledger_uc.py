"""Unit tests for material purchase and consumption use cases."""

from unittest.mock import AsyncMock

import pytest

from src.application.dto.requests import (
    CreateConsumptionRequest,
    CreatePurchaseRequest,
    LedgerListRequest,
    UpdatePurchaseRequest,
)
from src.application.use_cases.material_consumptions import (
    CreateConsumptionUseCase,
    DeleteConsumptionUseCase,
    ListConsumptionsUseCase,
)
from src.application.use_cases.material_purchases import (
    CreatePurchaseUseCase,
    DeletePurchaseUseCase,
    ListPurchasesUseCase,
    UpdatePurchaseUseCase,
)
from src.core.entities.material_ledger import (
    ConsumptionReason,
    MaterialConsumption,
    MaterialPurchase,
)
from src.core.exceptions import (
    ConsumptionNotFoundError,
    InsufficientStockError,
    InvalidQuantityError,
    MaterialNotFoundError,
    PurchaseNotFoundError,
)


@pytest.fixture
def purchase():
    """Ten cones bought at 0.5."""
    return MaterialPurchase(
        id=1, material_id=1, quantity=10, unit_price=0.5, total_cost=5.0, purchased_by=1
    )


class TestCreatePurchaseUseCase:
    async def test_adds_stock_and_reprices(self, make_uow, cone_material):
        """10 units at 2.5: total 25, stock +10, cost per unit becomes 2.5."""
        uow, factory = make_uow(materials=[cone_material])
        use_case = CreatePurchaseUseCase(uow_factory=factory)

        result = await use_case.execute(
            CreatePurchaseRequest(material_id=1, quantity=10, unit_price=2.5), user_id=3
        )

        assert result.purchase.total_cost == 25.0
        assert result.purchase.purchased_by == 3
        assert result.material.quantity_in_stock == 15
        assert result.material.cost_per_unit == 2.5
        assert uow.material_rows[1].cost_per_unit == 2.5
        assert uow.committed

    async def test_supplier_defaults_to_material_supplier(self, make_uow, cone_material):
        _, factory = make_uow(materials=[cone_material])
        use_case = CreatePurchaseUseCase(uow_factory=factory)

        result = await use_case.execute(
            CreatePurchaseRequest(material_id=1, quantity=1, unit_price=0.5), user_id=1
        )

        assert result.purchase.supplier == "Cone Co"

    async def test_same_price_does_not_reprice(self, make_uow, cone_material):
        uow, factory = make_uow(materials=[cone_material])
        use_case = CreatePurchaseUseCase(uow_factory=factory)

        await use_case.execute(
            CreatePurchaseRequest(material_id=1, quantity=2, unit_price=0.5), user_id=1
        )

        uow.materials.set_stock.assert_awaited_once_with(1, 7)

    async def test_discrete_quantity_floored(self, make_uow, cone_material):
        _, factory = make_uow(materials=[cone_material])
        use_case = CreatePurchaseUseCase(uow_factory=factory)

        result = await use_case.execute(
            CreatePurchaseRequest(material_id=1, quantity=3.9, unit_price=0.5), user_id=1
        )

        assert result.purchase.quantity == 3
        assert result.material.quantity_in_stock == 8

    async def test_fraction_of_a_unit_rejected(self, make_uow, cone_material):
        _, factory = make_uow(materials=[cone_material])
        use_case = CreatePurchaseUseCase(uow_factory=factory)

        with pytest.raises(InvalidQuantityError):
            await use_case.execute(
                CreatePurchaseRequest(material_id=1, quantity=0.4, unit_price=0.5), user_id=1
            )

    async def test_unknown_material(self, make_uow):
        _, factory = make_uow()
        use_case = CreatePurchaseUseCase(uow_factory=factory)

        with pytest.raises(MaterialNotFoundError):
            await use_case.execute(
                CreatePurchaseRequest(material_id=9, quantity=1, unit_price=1), user_id=1
            )

    async def test_to_response(self, make_uow, syrup_material):
        _, factory = make_uow(materials=[syrup_material])
        use_case = CreatePurchaseUseCase(uow_factory=factory)

        result = await use_case.execute(
            CreatePurchaseRequest(material_id=2, quantity=1.25, unit_price=20), user_id=1
        )
        response = use_case.to_response(result)

        assert response.purchase.quantity == 1.25
        assert response.material.quantity_in_stock == 4.75
        assert response.material.stock_value == 95.0


class TestUpdatePurchaseUseCase:
    async def test_applies_quantity_difference(self, make_uow, cone_material, purchase):
        uow, factory = make_uow(materials=[cone_material], purchases=[purchase])
        use_case = UpdatePurchaseUseCase(uow_factory=factory)

        result = await use_case.execute(1, UpdatePurchaseRequest(quantity=12))

        assert result.material.quantity_in_stock == 7
        assert result.purchase.quantity == 12
        assert result.purchase.total_cost == 6.0
        assert result.material.cost_per_unit == 0.5

    async def test_shrinking_past_zero_floors(self, make_uow, cone_material, purchase):
        """Stock already used up: reducing the purchase floors stock at zero."""
        uow, factory = make_uow(materials=[cone_material], purchases=[purchase])
        use_case = UpdatePurchaseUseCase(uow_factory=factory)

        result = await use_case.execute(1, UpdatePurchaseRequest(quantity=2))

        assert result.material.quantity_in_stock == 0

    async def test_price_change_reprices(self, make_uow, cone_material, purchase):
        uow, factory = make_uow(materials=[cone_material], purchases=[purchase])
        use_case = UpdatePurchaseUseCase(uow_factory=factory)

        result = await use_case.execute(1, UpdatePurchaseRequest(unit_price=0.8, notes="corrected"))

        assert result.material.cost_per_unit == 0.8
        assert result.material.quantity_in_stock == 5
        assert result.purchase.total_cost == 8.0
        assert result.purchase.notes == "corrected"

    async def test_unknown_purchase(self, make_uow):
        _, factory = make_uow()
        use_case = UpdatePurchaseUseCase(uow_factory=factory)

        with pytest.raises(PurchaseNotFoundError):
            await use_case.execute(4, UpdatePurchaseRequest(quantity=1))


class TestDeletePurchaseUseCase:
    async def test_removes_quantity_floored(self, make_uow, cone_material, purchase):
        uow, factory = make_uow(materials=[cone_material], purchases=[purchase])
        use_case = DeletePurchaseUseCase(uow_factory=factory)

        material = await use_case.execute(1)

        assert material.quantity_in_stock == 0
        assert 1 not in uow.purchase_rows

    async def test_removes_quantity(self, make_uow, syrup_material):
        purchase = MaterialPurchase(
            id=2, material_id=2, quantity=1.5, unit_price=20, total_cost=30, purchased_by=1
        )
        _, factory = make_uow(materials=[syrup_material], purchases=[purchase])
        use_case = DeletePurchaseUseCase(uow_factory=factory)

        material = await use_case.execute(2)

        assert material.quantity_in_stock == 2.0

    async def test_unknown_purchase(self, make_uow):
        _, factory = make_uow()

        with pytest.raises(PurchaseNotFoundError):
            await DeletePurchaseUseCase(uow_factory=factory).execute(1)


class TestCreateConsumptionUseCase:
    async def test_discrete_quantity_floored(self, make_uow, cone_material):
        """Stock 5 units, consume 2.7: records 2, stock 3."""
        uow, factory = make_uow(materials=[cone_material])
        use_case = CreateConsumptionUseCase(uow_factory=factory)

        result = await use_case.execute(
            CreateConsumptionRequest(material_id=1, quantity=2.7, reason=ConsumptionReason.LOSS_BREAKAGE),
            user_id=4,
        )

        assert result.consumption.quantity == 2
        assert result.consumption.consumed_by == 4
        assert result.material.quantity_in_stock == 3
        assert uow.material_rows[1].quantity_in_stock == 3

    async def test_more_than_available_rejected(self, make_uow, syrup_material):
        uow, factory = make_uow(materials=[syrup_material])
        use_case = CreateConsumptionUseCase(uow_factory=factory)

        with pytest.raises(InsufficientStockError):
            await use_case.execute(CreateConsumptionRequest(material_id=2, quantity=4), user_id=1)

        uow.consumptions.create_consumption.assert_not_called()

    async def test_requested_amount_checked_before_flooring(self, make_uow, cone_material):
        """5.5 units requested against 5 in stock is refused even though 5 would fit."""
        _, factory = make_uow(materials=[cone_material])
        use_case = CreateConsumptionUseCase(uow_factory=factory)

        with pytest.raises(InsufficientStockError):
            await use_case.execute(CreateConsumptionRequest(material_id=1, quantity=5.5), user_id=1)

    async def test_consume_everything(self, make_uow, syrup_material):
        _, factory = make_uow(materials=[syrup_material])
        use_case = CreateConsumptionUseCase(uow_factory=factory)

        result = await use_case.execute(
            CreateConsumptionRequest(material_id=2, quantity=3.5), user_id=1
        )

        assert result.material.quantity_in_stock == 0
        assert use_case.to_response(result).material.is_low_stock

    async def test_unknown_material(self, make_uow):
        _, factory = make_uow()

        with pytest.raises(MaterialNotFoundError):
            await CreateConsumptionUseCase(uow_factory=factory).execute(
                CreateConsumptionRequest(material_id=1, quantity=1), user_id=1
            )


class TestDeleteConsumptionUseCase:
    async def test_restores_quantity(self, make_uow, cone_material):
        consumption = MaterialConsumption(id=7, material_id=1, quantity=2, consumed_by=1)
        uow, factory = make_uow(materials=[cone_material], consumptions=[consumption])

        material = await DeleteConsumptionUseCase(uow_factory=factory).execute(7)

        assert material.quantity_in_stock == 7
        assert 7 not in uow.consumption_rows

    async def test_unknown_consumption(self, make_uow):
        _, factory = make_uow()

        with pytest.raises(ConsumptionNotFoundError):
            await DeleteConsumptionUseCase(uow_factory=factory).execute(7)


class TestLedgerListing:
    async def test_list_purchases_passes_filters(self, purchase):
        store = AsyncMock()
        store.list_purchases = AsyncMock(return_value=([purchase], 11))
        use_case = ListPurchasesUseCase(purchase_store=store)

        result = await use_case.execute(LedgerListRequest(material_id=1, page=2, limit=5))
        response = use_case.to_response(result)

        store.list_purchases.assert_awaited_once_with(
            material_id=1, start=None, end=None, limit=5, offset=5
        )
        assert response.pagination.total == 11
        assert response.pagination.pages == 3
        assert response.purchases[0].id == 1

    async def test_list_consumptions(self):
        consumption = MaterialConsumption(id=3, material_id=1, quantity=1, consumed_by=1)
        store = AsyncMock()
        store.list_consumptions = AsyncMock(return_value=([consumption], 1))
        use_case = ListConsumptionsUseCase(consumption_store=store)

        response = use_case.to_response(await use_case.execute(LedgerListRequest()))

        assert response.consumptions[0].reason is ConsumptionReason.PRODUCTION_USE
        assert response.pagination.pages == 1
