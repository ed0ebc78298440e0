"""Material consumption use cases: record, reverse and list manual stock usage."""

from dataclasses import dataclass
from datetime import UTC, datetime

from src.application.dto.requests import CreateConsumptionRequest, LedgerListRequest
from src.application.dto.responses import (
    ConsumptionListResponse,
    ConsumptionResponse,
    ConsumptionResultResponse,
    MaterialResponse,
    PaginationMeta,
)
from src.application.use_cases.base import LedgerUseCase
from src.config import get_logger
from src.core.entities.material import Material
from src.core.entities.material_ledger import MaterialConsumption
from src.core.exceptions import (
    ConsumptionNotFoundError,
    InsufficientStockError,
    MaterialNotFoundError,
)
from src.core.interfaces.ledger_store import IMaterialConsumptionStore
from src.core.services.stock_ledger import (
    StockLedger,
    StockPlan,
    normalize_quantity,
    round2,
)

logger = get_logger(__name__)


@dataclass
class ConsumptionResult:
    consumption: MaterialConsumption
    material: Material


class CreateConsumptionUseCase(LedgerUseCase):
    """
    Record material leaving stock outside of a sale.

    The requested quantity must be available. For the discrete unit only
    the whole part is recorded and deducted (2.7 units -> 2).
    """

    async def execute(
        self, request: CreateConsumptionRequest, user_id: int
    ) -> ConsumptionResult:
        async with self._new_uow() as uow:
            material = await uow.materials.get_material(request.material_id)
            if material is None:
                raise MaterialNotFoundError(request.material_id)

            quantity = normalize_quantity(request.quantity, material.unit)
            requested = round2(request.quantity)
            if material.quantity_in_stock < requested:
                raise InsufficientStockError(
                    entity="material",
                    name=material.name,
                    requested=requested,
                    available=material.quantity_in_stock,
                    unit=material.unit.value,
                )

            consumption = MaterialConsumption(
                material_id=material.id,  # type: ignore[arg-type]
                quantity=quantity,
                reason=request.reason,
                reason_description=request.reason_description,
                consumed_by=user_id,
                consumption_date=request.consumption_date or datetime.now(UTC),
                notes=request.notes,
            )
            consumption = await uow.consumptions.create_consumption(consumption)

            plan = StockPlan()
            plan.add_material(material.id, -quantity)  # type: ignore[arg-type]
            applied = await StockLedger(uow.products, uow.materials).apply(
                plan, reject_shortfall=True, reference=f"consumption:{consumption.id}"
            )
            material.quantity_in_stock = applied.materials[material.id]  # type: ignore[index]

        logger.info(
            "consumption_recorded",
            consumption_id=consumption.id,
            material_id=material.id,
            requested=requested,
            recorded=quantity,
            reason=consumption.reason.value,
        )
        return ConsumptionResult(consumption=consumption, material=material)

    def to_response(self, result: ConsumptionResult) -> ConsumptionResultResponse:
        return ConsumptionResultResponse(
            consumption=ConsumptionResponse.model_validate(result.consumption),
            material=MaterialResponse.model_validate(result.material),
        )


class DeleteConsumptionUseCase(LedgerUseCase):
    """Remove a consumption and put its quantity back into stock."""

    async def execute(self, consumption_id: int) -> Material:
        async with self._new_uow() as uow:
            consumption = await uow.consumptions.get_consumption(consumption_id)
            if consumption is None:
                raise ConsumptionNotFoundError(consumption_id)
            material = await uow.materials.get_material(consumption.material_id)
            if material is None:
                raise MaterialNotFoundError(consumption.material_id)

            plan = StockPlan()
            plan.add_material(material.id, consumption.quantity)  # type: ignore[arg-type]
            applied = await StockLedger(uow.products, uow.materials).apply(
                plan, reference=f"consumption:{consumption_id}"
            )
            await uow.consumptions.delete_consumption(consumption_id)
            material.quantity_in_stock = applied.materials.get(
                material.id, material.quantity_in_stock  # type: ignore[arg-type]
            )

        logger.info(
            "consumption_deleted",
            consumption_id=consumption_id,
            material_id=material.id,
            restored=consumption.quantity,
        )
        return material


@dataclass
class ListConsumptionsResult:
    consumptions: list[MaterialConsumption]
    total: int
    page: int
    limit: int


class ListConsumptionsUseCase:
    def __init__(self, consumption_store: IMaterialConsumptionStore | None = None):
        self._store = consumption_store

    async def _get_store(self) -> IMaterialConsumptionStore:
        if self._store is None:
            from src.infrastructure.storage.sqlite import get_consumption_store

            self._store = await get_consumption_store()
        return self._store

    async def execute(self, request: LedgerListRequest) -> ListConsumptionsResult:
        store = await self._get_store()
        consumptions, total = await store.list_consumptions(
            material_id=request.material_id,
            start=request.start,
            end=request.end,
            limit=request.limit,
            offset=request.offset,
        )
        return ListConsumptionsResult(
            consumptions=consumptions, total=total, page=request.page, limit=request.limit
        )

    def to_response(self, result: ListConsumptionsResult) -> ConsumptionListResponse:
        return ConsumptionListResponse(
            consumptions=[ConsumptionResponse.model_validate(c) for c in result.consumptions],
            pagination=PaginationMeta.build(result.page, result.limit, result.total),
        )
