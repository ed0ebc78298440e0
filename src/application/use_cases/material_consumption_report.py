"""Material Consumption Report Use Case."""

from src.application.dto.requests import DateRangeRequest
from src.application.dto.responses import (
    ConsumptionReportResponse,
    MaterialConsumptionLineResponse,
)
from src.config import get_logger
from src.core.interfaces.catalog_store import IMaterialStore
from src.core.interfaces.ledger_store import IMaterialConsumptionStore
from src.core.interfaces.sale_store import ISaleStore
from src.core.services.consumption_report import (
    ConsumptionReport,
    build_consumption_report,
)

logger = get_logger(__name__)


class MaterialConsumptionReportUseCase:
    """
    Material usage per material over a date range.

    Combines what paid, completed sales recorded in ``materials_used`` with
    manual consumption entries, costed at the current material price.
    """

    def __init__(
        self,
        sale_store: ISaleStore | None = None,
        consumption_store: IMaterialConsumptionStore | None = None,
        material_store: IMaterialStore | None = None,
    ):
        self._sale_store = sale_store
        self._consumption_store = consumption_store
        self._material_store = material_store

    async def _get_sale_store(self) -> ISaleStore:
        if self._sale_store is None:
            from src.infrastructure.storage.sqlite import get_sale_store

            self._sale_store = await get_sale_store()
        return self._sale_store

    async def _get_consumption_store(self) -> IMaterialConsumptionStore:
        if self._consumption_store is None:
            from src.infrastructure.storage.sqlite import get_consumption_store

            self._consumption_store = await get_consumption_store()
        return self._consumption_store

    async def _get_material_store(self) -> IMaterialStore:
        if self._material_store is None:
            from src.infrastructure.storage.sqlite import get_material_store

            self._material_store = await get_material_store()
        return self._material_store

    async def execute(self, request: DateRangeRequest) -> ConsumptionReport:
        sale_store = await self._get_sale_store()
        consumption_store = await self._get_consumption_store()
        material_store = await self._get_material_store()

        sales = await sale_store.list_paid_completed(request.start, request.end)
        consumptions = await consumption_store.list_between(request.start, request.end)
        materials = {
            m.id: m
            for m in await material_store.list_all_materials()
            if m.id is not None
        }

        report = build_consumption_report(
            request.start, request.end, sales, consumptions, materials
        )
        logger.info(
            "consumption_report_built",
            start=request.start.isoformat(),
            end=request.end.isoformat(),
            sales=len(sales),
            consumptions=len(consumptions),
            materials=len(report.lines),
        )
        return report

    def to_response(self, report: ConsumptionReport) -> ConsumptionReportResponse:
        return ConsumptionReportResponse(
            start=report.start,
            end=report.end,
            total_materials_used=len(report.lines),
            total_sales_cost=report.total_sales_cost,
            total_manual_cost=report.total_manual_cost,
            total_cost=report.total_cost,
            consumption=[
                MaterialConsumptionLineResponse.model_validate(line) for line in report.lines
            ],
        )
