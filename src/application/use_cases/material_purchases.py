"""
Material purchase use cases.

A purchase adds stock and may reprice the material. Editing applies the
quantity difference; deleting takes the quantity back out, floored at zero.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from src.application.dto.requests import (
    CreatePurchaseRequest,
    LedgerListRequest,
    UpdatePurchaseRequest,
)
from src.application.dto.responses import (
    MaterialResponse,
    PaginationMeta,
    PurchaseListResponse,
    PurchaseResponse,
    PurchaseResultResponse,
)
from src.application.use_cases.base import LedgerUseCase
from src.config import get_logger
from src.core.entities.material import Material
from src.core.entities.material_ledger import MaterialPurchase
from src.core.exceptions import MaterialNotFoundError, PurchaseNotFoundError
from src.core.interfaces.ledger_store import IMaterialPurchaseStore
from src.core.interfaces.unit_of_work import IUnitOfWork
from src.core.services.stock_ledger import (
    StockLedger,
    StockPlan,
    normalize_quantity,
    round2,
)

logger = get_logger(__name__)


@dataclass
class PurchaseResult:
    purchase: MaterialPurchase
    material: Material | None


def _purchase_response(result: PurchaseResult) -> PurchaseResultResponse:
    return PurchaseResultResponse(
        purchase=PurchaseResponse.model_validate(result.purchase),
        material=(
            MaterialResponse.model_validate(result.material)
            if result.material is not None
            else None
        ),
    )


async def _apply_material_delta(
    uow: IUnitOfWork,
    material: Material,
    delta: float,
    *,
    unit_price: float | None,
    reference: str,
) -> Material:
    """Move ``material`` stock by ``delta`` (floored) and reprice when asked."""
    plan = StockPlan()
    plan.add_material(material.id, delta)  # type: ignore[arg-type]
    applied = await StockLedger(uow.products, uow.materials).apply(
        plan, reject_shortfall=False, reference=reference
    )
    quantity = applied.materials.get(material.id, material.quantity_in_stock)  # type: ignore[arg-type]

    if unit_price is not None and unit_price != material.cost_per_unit:
        await uow.materials.set_stock(material.id, quantity, cost_per_unit=unit_price)  # type: ignore[arg-type]
        logger.info(
            "material_repriced",
            material_id=material.id,
            old_cost=material.cost_per_unit,
            new_cost=unit_price,
            reference=reference,
        )
        material.cost_per_unit = unit_price

    material.quantity_in_stock = quantity
    return material


class CreatePurchaseUseCase(LedgerUseCase):
    """Record a purchase and add it to the material's stock."""

    async def execute(self, request: CreatePurchaseRequest, user_id: int) -> PurchaseResult:
        async with self._new_uow() as uow:
            material = await uow.materials.get_material(request.material_id)
            if material is None:
                raise MaterialNotFoundError(request.material_id)

            quantity = normalize_quantity(request.quantity, material.unit)
            unit_price = round2(request.unit_price)
            purchase = MaterialPurchase(
                material_id=request.material_id,
                quantity=quantity,
                unit_price=unit_price,
                total_cost=round2(quantity * unit_price),
                supplier=request.supplier or material.supplier,
                purchased_by=user_id,
                purchase_date=request.purchase_date or datetime.now(UTC),
                notes=request.notes,
            )
            purchase = await uow.purchases.create_purchase(purchase)
            material = await _apply_material_delta(
                uow,
                material,
                quantity,
                unit_price=unit_price,
                reference=f"purchase:{purchase.id}",
            )

        logger.info(
            "purchase_recorded",
            purchase_id=purchase.id,
            material_id=purchase.material_id,
            quantity=purchase.quantity,
            total_cost=purchase.total_cost,
        )
        return PurchaseResult(purchase=purchase, material=material)

    def to_response(self, result: PurchaseResult) -> PurchaseResultResponse:
        return _purchase_response(result)


class UpdatePurchaseUseCase(LedgerUseCase):
    """
    Edit a purchase.

    Stock moves by the quantity difference and is floored at zero when
    the material has already been used up. The material is repriced only
    when the purchase price itself changed.
    """

    async def execute(self, purchase_id: int, request: UpdatePurchaseRequest) -> PurchaseResult:
        async with self._new_uow() as uow:
            purchase = await uow.purchases.get_purchase(purchase_id)
            if purchase is None:
                raise PurchaseNotFoundError(purchase_id)
            material = await uow.materials.get_material(purchase.material_id)
            if material is None:
                raise MaterialNotFoundError(purchase.material_id)

            old_quantity = purchase.quantity
            old_price = purchase.unit_price
            quantity = (
                normalize_quantity(request.quantity, material.unit)
                if request.quantity is not None
                else old_quantity
            )
            unit_price = round2(request.unit_price) if request.unit_price is not None else old_price

            material = await _apply_material_delta(
                uow,
                material,
                round2(quantity - old_quantity),
                unit_price=unit_price if unit_price != old_price else None,
                reference=f"purchase:{purchase_id}",
            )

            purchase.quantity = quantity
            purchase.unit_price = unit_price
            purchase.total_cost = round2(quantity * unit_price)
            if request.supplier is not None:
                purchase.supplier = request.supplier
            if request.notes is not None:
                purchase.notes = request.notes
            if request.purchase_date is not None:
                purchase.purchase_date = request.purchase_date
            purchase = await uow.purchases.update_purchase(purchase)

        logger.info(
            "purchase_updated",
            purchase_id=purchase_id,
            old_quantity=old_quantity,
            new_quantity=quantity,
            unit_price=unit_price,
        )
        return PurchaseResult(purchase=purchase, material=material)

    def to_response(self, result: PurchaseResult) -> PurchaseResultResponse:
        return _purchase_response(result)


class DeletePurchaseUseCase(LedgerUseCase):
    """Remove a purchase and take its quantity back out of stock."""

    async def execute(self, purchase_id: int) -> Material:
        async with self._new_uow() as uow:
            purchase = await uow.purchases.get_purchase(purchase_id)
            if purchase is None:
                raise PurchaseNotFoundError(purchase_id)
            material = await uow.materials.get_material(purchase.material_id)
            if material is None:
                raise MaterialNotFoundError(purchase.material_id)

            material = await _apply_material_delta(
                uow,
                material,
                -purchase.quantity,
                unit_price=None,
                reference=f"purchase:{purchase_id}",
            )
            await uow.purchases.delete_purchase(purchase_id)

        logger.info(
            "purchase_deleted",
            purchase_id=purchase_id,
            material_id=material.id,
            quantity_in_stock=material.quantity_in_stock,
        )
        return material


@dataclass
class ListPurchasesResult:
    purchases: list[MaterialPurchase]
    total: int
    page: int
    limit: int


class ListPurchasesUseCase:
    def __init__(self, purchase_store: IMaterialPurchaseStore | None = None):
        self._store = purchase_store

    async def _get_store(self) -> IMaterialPurchaseStore:
        if self._store is None:
            from src.infrastructure.storage.sqlite import get_purchase_store

            self._store = await get_purchase_store()
        return self._store

    async def execute(self, request: LedgerListRequest) -> ListPurchasesResult:
        store = await self._get_store()
        purchases, total = await store.list_purchases(
            material_id=request.material_id,
            start=request.start,
            end=request.end,
            limit=request.limit,
            offset=request.offset,
        )
        return ListPurchasesResult(
            purchases=purchases, total=total, page=request.page, limit=request.limit
        )

    def to_response(self, result: ListPurchasesResult) -> PurchaseListResponse:
        return PurchaseListResponse(
            purchases=[PurchaseResponse.model_validate(p) for p in result.purchases],
            pagination=PaginationMeta.build(result.page, result.limit, result.total),
        )
