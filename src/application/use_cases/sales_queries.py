"""Read-only sale use cases: get, list, client history and the period report."""

from dataclasses import dataclass

from src.application.dto.requests import DateRangeRequest, ListSalesRequest
from src.application.dto.responses import (
    ClientPurchasesResponse,
    PaginationMeta,
    SaleListResponse,
    SaleResponse,
    SalesReportResponse,
)
from src.config import get_logger
from src.core.entities.sale import Sale
from src.core.exceptions import ClientNotFoundError, SaleNotFoundError
from src.core.interfaces.catalog_store import IClientStore
from src.core.interfaces.sale_store import ISaleStore
from src.core.services.consumption_report import SalesReport, build_sales_report

logger = get_logger(__name__)


class _SaleStoreMixin:
    _sale_store: ISaleStore | None

    async def _get_sale_store(self) -> ISaleStore:
        if self._sale_store is None:
            from src.infrastructure.storage.sqlite import get_sale_store

            self._sale_store = await get_sale_store()
        return self._sale_store


class GetSaleUseCase(_SaleStoreMixin):
    def __init__(self, sale_store: ISaleStore | None = None):
        self._sale_store = sale_store

    async def execute(self, sale_id: int) -> Sale:
        store = await self._get_sale_store()
        sale = await store.get_sale(sale_id)
        if sale is None:
            raise SaleNotFoundError(sale_id)
        return sale

    def to_response(self, sale: Sale) -> SaleResponse:
        return SaleResponse.model_validate(sale)


@dataclass
class ListSalesResult:
    sales: list[Sale]
    total: int
    page: int
    limit: int


class ListSalesUseCase(_SaleStoreMixin):
    def __init__(self, sale_store: ISaleStore | None = None):
        self._sale_store = sale_store

    async def execute(self, request: ListSalesRequest) -> ListSalesResult:
        store = await self._get_sale_store()
        sales, total = await store.list_sales(
            start=request.start,
            end=request.end,
            limit=request.limit,
            offset=request.offset,
        )
        return ListSalesResult(sales=sales, total=total, page=request.page, limit=request.limit)

    def to_response(self, result: ListSalesResult) -> SaleListResponse:
        return SaleListResponse(
            sales=[SaleResponse.model_validate(s) for s in result.sales],
            pagination=PaginationMeta.build(result.page, result.limit, result.total),
        )


class ClientPurchasesUseCase(_SaleStoreMixin):
    """Purchase history of one client, newest first."""

    def __init__(
        self,
        sale_store: ISaleStore | None = None,
        client_store: IClientStore | None = None,
    ):
        self._sale_store = sale_store
        self._client_store = client_store

    async def _get_client_store(self) -> IClientStore:
        if self._client_store is None:
            from src.infrastructure.storage.sqlite import get_client_store

            self._client_store = await get_client_store()
        return self._client_store

    async def execute(self, client_id: int) -> list[Sale]:
        clients = await self._get_client_store()
        if await clients.get_client(client_id) is None:
            raise ClientNotFoundError(client_id)
        store = await self._get_sale_store()
        return await store.list_sales_for_client(client_id)

    def to_response(self, sales: list[Sale]) -> ClientPurchasesResponse:
        return ClientPurchasesResponse(sales=[SaleResponse.model_validate(s) for s in sales])


class SalesReportUseCase(_SaleStoreMixin):
    """Totals over paid, completed sales in a date range."""

    def __init__(self, sale_store: ISaleStore | None = None):
        self._sale_store = sale_store

    async def execute(self, request: DateRangeRequest) -> SalesReport:
        store = await self._get_sale_store()
        sales = await store.list_paid_completed(request.start, request.end)
        report = build_sales_report(request.start, request.end, sales)
        logger.info(
            "sales_report_built",
            start=request.start.isoformat(),
            end=request.end.isoformat(),
            sales_count=report.sales_count,
        )
        return report

    def to_response(self, report: SalesReport) -> SalesReportResponse:
        return SalesReportResponse(
            start=report.start,
            end=report.end,
            sales_count=report.sales_count,
            total_amount=report.total_amount,
            total_cost=report.total_cost,
            materials_cost=report.materials_cost,
            gross_profit=report.gross_profit,
            net_profit=report.net_profit,
            sales=[SaleResponse.model_validate(s) for s in report.sales],
        )
