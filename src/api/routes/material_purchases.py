"""Material purchase endpoints and the material consumption report."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    Actor,
    get_consumption_report_use_case,
    get_create_purchase_use_case,
    get_current_actor,
    get_delete_purchase_use_case,
    get_list_purchases_use_case,
    get_update_purchase_use_case,
    require_admin,
    require_staff,
)
from src.application.dto.requests import (
    CreatePurchaseRequest,
    DateRangeRequest,
    LedgerListRequest,
    UpdatePurchaseRequest,
)
from src.application.dto.responses import ApiResponse, MaterialResponse
from src.application.use_cases.material_consumption_report import (
    MaterialConsumptionReportUseCase,
)
from src.application.use_cases.material_purchases import (
    CreatePurchaseUseCase,
    DeletePurchaseUseCase,
    ListPurchasesUseCase,
    UpdatePurchaseUseCase,
)

router = APIRouter(prefix="/api/material-purchases", tags=["material-ledger"])


@router.get("", response_model=ApiResponse)
async def list_purchases(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    material_id: int | None = Query(default=None),
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    _: Actor = Depends(get_current_actor),
    use_case: ListPurchasesUseCase = Depends(get_list_purchases_use_case),
) -> ApiResponse:
    request = LedgerListRequest(
        page=page, limit=limit, material_id=material_id, start=start, end=end
    )
    result = await use_case.execute(request)
    return ApiResponse(data=use_case.to_response(result))


@router.get("/consumption-report", response_model=ApiResponse)
async def consumption_report(
    start: datetime = Query(...),
    end: datetime = Query(..., description="A bare date covers the whole day"),
    _: Actor = Depends(get_current_actor),
    use_case: MaterialConsumptionReportUseCase = Depends(get_consumption_report_use_case),
) -> ApiResponse:
    """Material usage by sales and manual consumption over the period."""
    report = await use_case.execute(DateRangeRequest(start=start, end=end))
    return ApiResponse(data=use_case.to_response(report))


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_purchase(
    request: CreatePurchaseRequest,
    actor: Actor = Depends(require_staff),
    use_case: CreatePurchaseUseCase = Depends(get_create_purchase_use_case),
) -> ApiResponse:
    result = await use_case.execute(request, actor.user_id)
    return ApiResponse(message="Purchase recorded", data=use_case.to_response(result))


@router.put("/{purchase_id}", response_model=ApiResponse)
async def update_purchase(
    purchase_id: int,
    request: UpdatePurchaseRequest,
    _: Actor = Depends(require_staff),
    use_case: UpdatePurchaseUseCase = Depends(get_update_purchase_use_case),
) -> ApiResponse:
    result = await use_case.execute(purchase_id, request)
    return ApiResponse(message="Purchase updated", data=use_case.to_response(result))


@router.delete("/{purchase_id}", response_model=ApiResponse)
async def delete_purchase(
    purchase_id: int,
    _: Actor = Depends(require_admin),
    use_case: DeletePurchaseUseCase = Depends(get_delete_purchase_use_case),
) -> ApiResponse:
    material = await use_case.execute(purchase_id)
    return ApiResponse(
        message="Purchase deleted, stock adjusted",
        data={"material": MaterialResponse.model_validate(material)},
    )
