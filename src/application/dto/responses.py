"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
Entity-backed responses read attributes directly (``from_attributes``).
"""

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.core.entities.material import MaterialCategory, MaterialUnit
from src.core.entities.material_ledger import ConsumptionReason
from src.core.entities.sale import PaymentMethod, PaymentStatus, SaleStatus
from src.core.entities.user import UserRole

# --- Envelope ---


class ApiResponse(BaseModel):
    """Success envelope shared by every endpoint."""

    success: bool = True
    message: str | None = None
    data: Any = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    success: bool = False
    message: str = Field(..., description="Human-readable error description")
    error: str = Field(..., description="Machine-readable error code")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: Any = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


class ComponentHealth(BaseModel):
    """Health of one dependency."""

    name: str
    available: bool
    latency_ms: float | None = None
    schema_version: str | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealth | None = None


# --- Accounts ---


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole
    phone: str | None = None
    email_verified: bool
    created_at: datetime


class RegisterResponse(BaseModel):
    user: UserResponse
    requires_verification: bool = True
    email_sent: bool = True
    verification_url: str | None = Field(
        default=None, description="Only returned when email delivery is in dev mode"
    )


class SessionResponse(BaseModel):
    """Signed-in user and bearer token."""

    user: UserResponse
    token: str
    token_type: str = "bearer"


class PasswordResetRequestedResponse(BaseModel):
    dev_mode: bool = False
    reset_url: str | None = None


class VerificationResentResponse(BaseModel):
    dev_mode: bool = False
    verification_url: str | None = None


class UserListResponse(BaseModel):
    users: list[UserResponse]
    pagination: PaginationMeta


# --- Catalog ---


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    price: float
    cost_price: float
    stock: int
    created_at: datetime
    updated_at: datetime


class MaterialResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    category: MaterialCategory
    unit: MaterialUnit
    cost_per_unit: float
    quantity_in_stock: float
    minimum_stock: float
    stock_value: float
    is_low_stock: bool
    supplier: str | None = None
    supplier_phone: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class ClientResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    pagination: PaginationMeta


class MaterialListResponse(BaseModel):
    materials: list[MaterialResponse]
    pagination: PaginationMeta


class ClientListResponse(BaseModel):
    clients: list[ClientResponse]
    pagination: PaginationMeta


class CategoryStatsResponse(BaseModel):
    category: str
    count: int
    total_value: float


class MaterialStatsResponse(BaseModel):
    total_materials: int
    total_stock_value: float
    low_stock_count: int
    low_stock_materials: list[MaterialResponse]
    by_category: list[CategoryStatsResponse]


class MaterialCreatedResponse(BaseModel):
    material: MaterialResponse
    initial_purchase_id: int | None = None


# --- Sales ---


class MaterialUsageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    material_id: int
    quantity: float
    cost: float


class SaleItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    product_id: int
    quantity: int
    unit_price: float
    subtotal: float
    cost: float
    materials_cost: float
    materials_used: list[MaterialUsageResponse] = Field(default_factory=list)


class SaleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    seller_id: int
    items: list[SaleItemResponse]
    total_amount: float
    total_cost: float
    materials_cost: float
    gross_profit: float
    net_profit: float
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    paid_at: datetime | None = None
    status: SaleStatus
    sale_date: datetime
    created_at: datetime


class SaleListResponse(BaseModel):
    sales: list[SaleResponse]
    pagination: PaginationMeta


class ClientPurchasesResponse(BaseModel):
    sales: list[SaleResponse]


class SalesReportResponse(BaseModel):
    start: datetime
    end: datetime
    sales_count: int
    total_amount: float
    total_cost: float
    materials_cost: float
    gross_profit: float
    net_profit: float
    sales: list[SaleResponse]


# --- Material ledger ---


class PurchaseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    material_id: int
    quantity: float
    unit_price: float
    total_cost: float
    supplier: str | None = None
    purchased_by: int
    purchase_date: datetime
    notes: str | None = None
    created_at: datetime


class ConsumptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    material_id: int
    quantity: float
    reason: ConsumptionReason
    reason_description: str | None = None
    consumed_by: int
    consumption_date: datetime
    notes: str | None = None
    created_at: datetime


class PurchaseResultResponse(BaseModel):
    """Purchase plus the material's stock after the change."""

    purchase: PurchaseResponse
    material: MaterialResponse | None = None


class ConsumptionResultResponse(BaseModel):
    consumption: ConsumptionResponse
    material: MaterialResponse | None = None


class PurchaseListResponse(BaseModel):
    purchases: list[PurchaseResponse]
    pagination: PaginationMeta


class ConsumptionListResponse(BaseModel):
    consumptions: list[ConsumptionResponse]
    pagination: PaginationMeta


class MaterialConsumptionLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    material_id: int
    material_name: str
    unit: str | None = None
    sales_quantity: float
    sales_cost: float
    sales_count: int
    manual_quantity: float
    manual_cost: float
    total_quantity: float
    total_cost: float


class ConsumptionReportResponse(BaseModel):
    start: datetime
    end: datetime
    total_materials_used: int
    total_sales_cost: float
    total_manual_cost: float
    total_cost: float
    consumption: list[MaterialConsumptionLineResponse]
