"""
Materials catalog endpoints.

Stock levels are not edited here: they move through purchases,
consumptions and sales.
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    Actor,
    get_create_material_use_case,
    get_current_actor,
    get_mat_store,
    get_material_stats_use_case,
    get_update_material_use_case,
    require_admin,
    require_staff,
)
from src.application.dto.requests import MaterialCreateRequest, MaterialUpdateRequest
from src.application.dto.responses import (
    ApiResponse,
    MaterialListResponse,
    MaterialResponse,
    PaginationMeta,
)
from src.application.use_cases.catalog import (
    CreateMaterialUseCase,
    MaterialStatsUseCase,
    UpdateMaterialUseCase,
)
from src.config import get_logger
from src.core.entities.material import MaterialCategory
from src.core.exceptions import MaterialNotFoundError
from src.infrastructure.storage.sqlite import SQLiteMaterialStore

logger = get_logger(__name__)

router = APIRouter(prefix="/api/materials", tags=["materials"])


@router.get("", response_model=ApiResponse)
async def list_materials(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str | None = Query(default=None, description="Name, description or supplier contains"),
    category: MaterialCategory | None = Query(default=None),
    _: Actor = Depends(get_current_actor),
    store: SQLiteMaterialStore = Depends(get_mat_store),
) -> ApiResponse:
    """List materials with optional filtering and search."""
    materials, total = await store.list_materials(
        search=search, category=category, limit=limit, offset=(page - 1) * limit
    )
    return ApiResponse(
        data=MaterialListResponse(
            materials=[MaterialResponse.model_validate(m) for m in materials],
            pagination=PaginationMeta.build(page, limit, total),
        )
    )


@router.get("/stats", response_model=ApiResponse)
async def material_stats(
    _: Actor = Depends(get_current_actor),
    use_case: MaterialStatsUseCase = Depends(get_material_stats_use_case),
) -> ApiResponse:
    """Stock value, low-stock materials and per-category totals."""
    stats = await use_case.execute()
    return ApiResponse(data=use_case.to_response(stats))


@router.get("/{material_id}", response_model=ApiResponse)
async def get_material(
    material_id: int,
    _: Actor = Depends(get_current_actor),
    store: SQLiteMaterialStore = Depends(get_mat_store),
) -> ApiResponse:
    material = await store.get_material(material_id)
    if material is None:
        raise MaterialNotFoundError(material_id)
    return ApiResponse(data=MaterialResponse.model_validate(material))


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_material(
    request: MaterialCreateRequest,
    actor: Actor = Depends(require_staff),
    use_case: CreateMaterialUseCase = Depends(get_create_material_use_case),
) -> ApiResponse:
    result = await use_case.execute(request, actor.user_id)
    return ApiResponse(message="Material created", data=use_case.to_response(result))


@router.put("/{material_id}", response_model=ApiResponse)
async def update_material(
    material_id: int,
    request: MaterialUpdateRequest,
    _: Actor = Depends(require_staff),
    use_case: UpdateMaterialUseCase = Depends(get_update_material_use_case),
) -> ApiResponse:
    material = await use_case.execute(material_id, request)
    return ApiResponse(message="Material updated", data=use_case.to_response(material))


@router.delete("/{material_id}", response_model=ApiResponse)
async def delete_material(
    material_id: int,
    _: Actor = Depends(require_admin),
    store: SQLiteMaterialStore = Depends(get_mat_store),
) -> ApiResponse:
    if not await store.delete_material(material_id):
        raise MaterialNotFoundError(material_id)
    logger.info("material_deleted", material_id=material_id)
    return ApiResponse(message="Material deleted")
