"""Material purchase and consumption ledger entries."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class ConsumptionReason(str, Enum):
    """Why material left stock outside of a sale."""

    PRODUCTION_USE = "production_use"
    LOSS_BREAKAGE = "loss_breakage"
    EXPIRY = "expiry"
    QUALITY_TEST = "quality_test"
    OTHER = "other"


class MaterialPurchase(BaseModel):
    """Records stock bought from a supplier (increases stock)."""

    id: int | None = None
    material_id: int
    quantity: float = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)
    total_cost: float = 0.0  # round2(quantity * unit_price)
    supplier: str | None = None
    purchased_by: int
    purchase_date: datetime = Field(default_factory=lambda: datetime.now(UTC))
    notes: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class MaterialConsumption(BaseModel):
    """Records stock used, lost or discarded (decreases stock)."""

    id: int | None = None
    material_id: int
    quantity: float = Field(..., gt=0)
    reason: ConsumptionReason = ConsumptionReason.PRODUCTION_USE
    reason_description: str | None = None
    consumed_by: int
    consumption_date: datetime = Field(default_factory=lambda: datetime.now(UTC))
    notes: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
