"""Material consumption endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    Actor,
    get_create_consumption_use_case,
    get_current_actor,
    get_delete_consumption_use_case,
    get_list_consumptions_use_case,
    require_admin,
    require_staff,
)
from src.application.dto.requests import CreateConsumptionRequest, LedgerListRequest
from src.application.dto.responses import ApiResponse, MaterialResponse
from src.application.use_cases.material_consumptions import (
    CreateConsumptionUseCase,
    DeleteConsumptionUseCase,
    ListConsumptionsUseCase,
)

router = APIRouter(prefix="/api/material-consumptions", tags=["material-ledger"])


@router.get("", response_model=ApiResponse)
async def list_consumptions(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    material_id: int | None = Query(default=None),
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    _: Actor = Depends(get_current_actor),
    use_case: ListConsumptionsUseCase = Depends(get_list_consumptions_use_case),
) -> ApiResponse:
    request = LedgerListRequest(
        page=page, limit=limit, material_id=material_id, start=start, end=end
    )
    result = await use_case.execute(request)
    return ApiResponse(data=use_case.to_response(result))


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_consumption(
    request: CreateConsumptionRequest,
    actor: Actor = Depends(require_staff),
    use_case: CreateConsumptionUseCase = Depends(get_create_consumption_use_case),
) -> ApiResponse:
    """Record material used, lost or discarded outside of a sale."""
    result = await use_case.execute(request, actor.user_id)
    return ApiResponse(message="Consumption recorded", data=use_case.to_response(result))


@router.delete("/{consumption_id}", response_model=ApiResponse)
async def delete_consumption(
    consumption_id: int,
    _: Actor = Depends(require_admin),
    use_case: DeleteConsumptionUseCase = Depends(get_delete_consumption_use_case),
) -> ApiResponse:
    material = await use_case.execute(consumption_id)
    return ApiResponse(
        message="Consumption deleted, stock restored",
        data={"material": MaterialResponse.model_validate(material)},
    )
