"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import datetime, time, timedelta

from pydantic import BaseModel, Field, field_validator, model_validator

from src.core.entities.material import MaterialCategory, MaterialUnit
from src.core.entities.material_ledger import ConsumptionReason
from src.core.entities.sale import PaymentMethod, PaymentStatus
from src.core.entities.user import UserRole

# --- Shared ---


class PageRequest(BaseModel):
    """Offset pagination, 1-based page."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class DateRangeRequest(BaseModel):
    """Inclusive date range.

    A bare date for ``end`` (midnight exactly) covers that whole day.
    """

    start: datetime
    end: datetime

    @field_validator("end")
    @classmethod
    def end_of_day(cls, v: datetime) -> datetime:
        if v.time() == time(0, 0):
            return v + timedelta(days=1) - timedelta(microseconds=1)
        return v

    @model_validator(mode="after")
    def check_order(self) -> "DateRangeRequest":
        if self.start > self.end:
            raise ValueError("start must not be after end")
        return self


# --- Accounts ---


class RegisterRequest(BaseModel):
    """Public self-registration; always creates a customer account."""

    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=254, pattern=r"^\S+@\S+\.\S+$")
    password: str = Field(..., min_length=1, max_length=128)
    phone: str | None = Field(default=None, max_length=40)


class CreateUserRequest(RegisterRequest):
    """Admin-created account with an explicit role; starts verified."""

    role: UserRole = UserRole.SELLER


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., min_length=3)


class ResendVerificationRequest(BaseModel):
    email: str = Field(..., min_length=3)


class ResetPasswordRequest(BaseModel):
    password: str = Field(..., min_length=1, max_length=128)


class ListUsersRequest(PageRequest):
    """Admin user listing. ``search`` matches name, email or phone."""

    search: str | None = None
    role: UserRole | None = None


# --- Catalog ---


class ProductCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    price: float = Field(..., ge=0, description="Sale unit price")
    cost_price: float = Field(..., ge=0, description="Unit cost")
    stock: int = Field(default=0, ge=0)


class ProductUpdateRequest(BaseModel):
    """Partial product update. Omitted fields keep their value."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    cost_price: float | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)


class MaterialCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    category: MaterialCategory
    unit: MaterialUnit = MaterialUnit.UNIT
    cost_per_unit: float = Field(default=0.0, ge=0)
    quantity_in_stock: float = Field(default=0.0, ge=0)
    minimum_stock: float = Field(default=0.0, ge=0)
    supplier: str | None = None
    supplier_phone: str | None = None
    notes: str | None = None
    initial_purchase: bool = Field(
        default=False,
        description="Record the initial stock as a purchase ledger entry",
    )


class MaterialUpdateRequest(BaseModel):
    """Partial material update. Stock moves only through the ledger."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    category: MaterialCategory | None = None
    unit: MaterialUnit | None = None
    cost_per_unit: float | None = Field(default=None, ge=0)
    minimum_stock: float | None = Field(default=None, ge=0)
    supplier: str | None = None
    supplier_phone: str | None = None
    notes: str | None = None


class ClientCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str | None = Field(default=None, pattern=r"^\S+@\S+\.\S+$")
    phone: str | None = None
    address: str | None = None
    notes: str | None = None


class ClientUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: str | None = Field(default=None, pattern=r"^\S+@\S+\.\S+$")
    phone: str | None = None
    address: str | None = None
    notes: str | None = None


class CatalogListRequest(PageRequest):
    search: str | None = None
    category: MaterialCategory | None = None


# --- Sales ---


class MaterialUsageRequest(BaseModel):
    """Material consumed per unit of the product sold."""

    material_id: int
    quantity: float = Field(..., gt=0, description="Quantity per unit sold")


class SaleItemRequest(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)
    unit_price: float | None = Field(
        default=None, ge=0, description="Overrides the product price"
    )
    materials_used: list[MaterialUsageRequest] = Field(default_factory=list)


class CreateSaleRequest(BaseModel):
    client_id: int
    items: list[SaleItemRequest] = Field(..., min_length=1)
    payment_method: PaymentMethod | None = Field(
        default=None, description="Defaults to the configured payment method"
    )
    payment_status: PaymentStatus | None = Field(
        default=None,
        description="Explicit status; otherwise derived from the payment method",
    )
    sale_date: datetime | None = None


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: PaymentStatus
    payment_method: PaymentMethod | None = None


class ListSalesRequest(PageRequest):
    start: datetime | None = None
    end: datetime | None = None


# --- Material ledger ---


class CreatePurchaseRequest(BaseModel):
    material_id: int
    quantity: float = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)
    supplier: str | None = Field(
        default=None, description="Defaults to the material's supplier"
    )
    purchase_date: datetime | None = None
    notes: str | None = None


class UpdatePurchaseRequest(BaseModel):
    quantity: float | None = Field(default=None, gt=0)
    unit_price: float | None = Field(default=None, ge=0)
    supplier: str | None = None
    purchase_date: datetime | None = None
    notes: str | None = None


class CreateConsumptionRequest(BaseModel):
    material_id: int
    quantity: float = Field(..., gt=0)
    reason: ConsumptionReason = ConsumptionReason.PRODUCTION_USE
    reason_description: str | None = None
    consumption_date: datetime | None = None
    notes: str | None = None


class LedgerListRequest(PageRequest):
    material_id: int | None = None
    start: datetime | None = None
    end: datetime | None = None
