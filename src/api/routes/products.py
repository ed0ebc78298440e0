"""Product catalog endpoints."""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    Actor,
    get_current_actor,
    get_prod_store,
    get_update_product_use_case,
    require_admin,
    require_staff,
)
from src.application.dto.requests import ProductCreateRequest, ProductUpdateRequest
from src.application.dto.responses import (
    ApiResponse,
    PaginationMeta,
    ProductListResponse,
    ProductResponse,
)
from src.application.use_cases.catalog import UpdateProductUseCase
from src.config import get_logger
from src.core.entities.product import Product
from src.core.exceptions import ProductNotFoundError
from src.infrastructure.storage.sqlite import SQLiteProductStore

logger = get_logger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=ApiResponse)
async def list_products(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str | None = Query(default=None, description="Name or description contains"),
    _: Actor = Depends(get_current_actor),
    store: SQLiteProductStore = Depends(get_prod_store),
) -> ApiResponse:
    products, total = await store.list_products(
        search=search, limit=limit, offset=(page - 1) * limit
    )
    return ApiResponse(
        data=ProductListResponse(
            products=[ProductResponse.model_validate(p) for p in products],
            pagination=PaginationMeta.build(page, limit, total),
        )
    )


@router.get("/{product_id}", response_model=ApiResponse)
async def get_product(
    product_id: int,
    _: Actor = Depends(get_current_actor),
    store: SQLiteProductStore = Depends(get_prod_store),
) -> ApiResponse:
    product = await store.get_product(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return ApiResponse(data=ProductResponse.model_validate(product))


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    request: ProductCreateRequest,
    _: Actor = Depends(require_staff),
    store: SQLiteProductStore = Depends(get_prod_store),
) -> ApiResponse:
    product = await store.create_product(Product(**request.model_dump()))
    logger.info("product_created", product_id=product.id, stock=product.stock)
    return ApiResponse(message="Product created", data=ProductResponse.model_validate(product))


@router.put("/{product_id}", response_model=ApiResponse)
async def update_product(
    product_id: int,
    request: ProductUpdateRequest,
    _: Actor = Depends(require_staff),
    use_case: UpdateProductUseCase = Depends(get_update_product_use_case),
) -> ApiResponse:
    """Partial edit. ``stock`` is overwritten only when the body sets it."""
    product = await use_case.execute(product_id, request)
    return ApiResponse(message="Product updated", data=use_case.to_response(product))


@router.delete("/{product_id}", response_model=ApiResponse)
async def delete_product(
    product_id: int,
    _: Actor = Depends(require_admin),
    store: SQLiteProductStore = Depends(get_prod_store),
) -> ApiResponse:
    if not await store.delete_product(product_id):
        raise ProductNotFoundError(product_id)
    logger.info("product_deleted", product_id=product_id)
    return ApiResponse(message="Product deleted")
