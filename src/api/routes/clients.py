"""Client endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    Actor,
    get_cli_store,
    get_client_purchases_use_case,
    get_current_actor,
    require_admin,
)
from src.application.dto.requests import ClientCreateRequest, ClientUpdateRequest
from src.application.dto.responses import (
    ApiResponse,
    ClientListResponse,
    ClientResponse,
    PaginationMeta,
)
from src.application.use_cases.sales_queries import ClientPurchasesUseCase
from src.config import get_logger
from src.core.entities.client import Client
from src.core.exceptions import ClientNotFoundError
from src.infrastructure.storage.sqlite import SQLiteClientStore

logger = get_logger(__name__)

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.get("", response_model=ApiResponse)
async def list_clients(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str | None = Query(default=None, description="Name, email or phone contains"),
    _: Actor = Depends(get_current_actor),
    store: SQLiteClientStore = Depends(get_cli_store),
) -> ApiResponse:
    clients, total = await store.list_clients(
        search=search, limit=limit, offset=(page - 1) * limit
    )
    return ApiResponse(
        data=ClientListResponse(
            clients=[ClientResponse.model_validate(c) for c in clients],
            pagination=PaginationMeta.build(page, limit, total),
        )
    )


@router.get("/{client_id}", response_model=ApiResponse)
async def get_client(
    client_id: int,
    _: Actor = Depends(get_current_actor),
    store: SQLiteClientStore = Depends(get_cli_store),
) -> ApiResponse:
    client = await store.get_client(client_id)
    if client is None:
        raise ClientNotFoundError(client_id)
    return ApiResponse(data=ClientResponse.model_validate(client))


@router.get("/{client_id}/purchases", response_model=ApiResponse)
async def client_purchases(
    client_id: int,
    _: Actor = Depends(get_current_actor),
    use_case: ClientPurchasesUseCase = Depends(get_client_purchases_use_case),
) -> ApiResponse:
    """Every sale made to the client, newest first."""
    sales = await use_case.execute(client_id)
    return ApiResponse(data=use_case.to_response(sales))


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    request: ClientCreateRequest,
    _: Actor = Depends(get_current_actor),
    store: SQLiteClientStore = Depends(get_cli_store),
) -> ApiResponse:
    client = await store.create_client(Client(**request.model_dump()))
    logger.info("client_created", client_id=client.id)
    return ApiResponse(message="Client created", data=ClientResponse.model_validate(client))


@router.put("/{client_id}", response_model=ApiResponse)
async def update_client(
    client_id: int,
    request: ClientUpdateRequest,
    _: Actor = Depends(get_current_actor),
    store: SQLiteClientStore = Depends(get_cli_store),
) -> ApiResponse:
    client = await store.get_client(client_id)
    if client is None:
        raise ClientNotFoundError(client_id)

    changes = request.model_dump(exclude_unset=True)
    client = client.model_copy(update={**changes, "updated_at": datetime.now(UTC)})
    client = await store.update_client(client)
    return ApiResponse(message="Client updated", data=ClientResponse.model_validate(client))


@router.delete("/{client_id}", response_model=ApiResponse)
async def delete_client(
    client_id: int,
    _: Actor = Depends(require_admin),
    store: SQLiteClientStore = Depends(get_cli_store),
) -> ApiResponse:
    if not await store.delete_client(client_id):
        raise ClientNotFoundError(client_id)
    logger.info("client_deleted", client_id=client_id)
    return ApiResponse(message="Client deleted")
