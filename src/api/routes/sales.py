"""Sales endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    Actor,
    get_create_sale_use_case,
    get_current_actor,
    get_get_sale_use_case,
    get_list_sales_use_case,
    get_sales_report_use_case,
    get_update_payment_status_use_case,
    require_admin,
    require_staff,
)
from src.application.dto.requests import (
    CreateSaleRequest,
    DateRangeRequest,
    ListSalesRequest,
    UpdatePaymentStatusRequest,
)
from src.application.dto.responses import ApiResponse
from src.application.use_cases.create_sale import CreateSaleUseCase
from src.application.use_cases.sales_queries import (
    GetSaleUseCase,
    ListSalesUseCase,
    SalesReportUseCase,
)
from src.application.use_cases.update_payment_status import UpdatePaymentStatusUseCase

router = APIRouter(prefix="/api/sales", tags=["sales"])


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_sale(
    request: CreateSaleRequest,
    actor: Actor = Depends(require_staff),
    use_case: CreateSaleUseCase = Depends(get_create_sale_use_case),
) -> ApiResponse:
    """
    Record a sale.

    Paid sales deduct product and material stock immediately; pending sales
    deduct nothing until they are marked paid.
    """
    result = await use_case.execute(request, seller_id=actor.user_id)
    return ApiResponse(message="Sale recorded", data=use_case.to_response(result))


@router.get("", response_model=ApiResponse)
async def list_sales(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    _: Actor = Depends(get_current_actor),
    use_case: ListSalesUseCase = Depends(get_list_sales_use_case),
) -> ApiResponse:
    request = ListSalesRequest(page=page, limit=limit, start=start, end=end)
    result = await use_case.execute(request)
    return ApiResponse(data=use_case.to_response(result))


@router.get("/reports/period", response_model=ApiResponse)
async def sales_report(
    start: datetime = Query(...),
    end: datetime = Query(..., description="A bare date covers the whole day"),
    _: Actor = Depends(require_admin),
    use_case: SalesReportUseCase = Depends(get_sales_report_use_case),
) -> ApiResponse:
    """Totals over paid, completed sales in the period."""
    report = await use_case.execute(DateRangeRequest(start=start, end=end))
    return ApiResponse(data=use_case.to_response(report))


@router.get("/{sale_id}", response_model=ApiResponse)
async def get_sale(
    sale_id: int,
    _: Actor = Depends(get_current_actor),
    use_case: GetSaleUseCase = Depends(get_get_sale_use_case),
) -> ApiResponse:
    sale = await use_case.execute(sale_id)
    return ApiResponse(data=use_case.to_response(sale))


@router.put("/{sale_id}/payment", response_model=ApiResponse)
async def update_payment_status(
    sale_id: int,
    request: UpdatePaymentStatusRequest,
    _: Actor = Depends(require_staff),
    use_case: UpdatePaymentStatusUseCase = Depends(get_update_payment_status_use_case),
) -> ApiResponse:
    """
    Mark a sale paid or pending.

    Paying deducts the recorded stock, reverting to pending restores it, and
    repeating the current status changes nothing.
    """
    result = await use_case.execute(sale_id, request)
    message = (
        "Payment status updated"
        if result.status_changed
        else "Payment status unchanged"
    )
    return ApiResponse(message=message, data=use_case.to_response(result))
