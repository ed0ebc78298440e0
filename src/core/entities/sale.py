"""Sale domain entities."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class PaymentMethod(str, Enum):
    """Accepted payment methods. ``PENDING`` defers payment."""

    CASH = "cash"
    DEBIT_CARD = "debit_card"
    CREDIT_CARD = "credit_card"
    PIX = "pix"
    BANK_SLIP = "bank_slip"
    PENDING = "pending"


class PaymentStatus(str, Enum):
    """Whether the sale's stock effects are committed (paid) or deferred."""

    PAID = "paid"
    PENDING = "pending"


class SaleStatus(str, Enum):
    """Sale workflow status."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MaterialUsage(BaseModel):
    """Material consumed by one sale line (total for the line, not per unit)."""

    material_id: int
    quantity: float
    cost: float = 0.0


class SaleItem(BaseModel):
    """A single line of a sale."""

    id: int | None = None
    sale_id: int | None = None
    product_id: int
    quantity: int = Field(..., ge=1)
    unit_price: float
    subtotal: float = 0.0  # unit_price * quantity
    cost: float = 0.0  # product cost_price * quantity
    materials_used: list[MaterialUsage] = Field(default_factory=list)

    @property
    def materials_cost(self) -> float:
        return sum(m.cost for m in self.materials_used)


class Sale(BaseModel):
    """
    A priced sale.

    Invariant: product and material stock deductions for this sale are
    applied if and only if ``payment_status`` is ``PAID``.
    """

    id: int | None = None
    client_id: int
    seller_id: int
    items: list[SaleItem] = Field(default_factory=list)
    total_amount: float = 0.0
    total_cost: float = 0.0
    materials_cost: float = 0.0
    gross_profit: float = 0.0
    net_profit: float = 0.0
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_status: PaymentStatus = PaymentStatus.PAID
    paid_at: datetime | None = None
    status: SaleStatus = SaleStatus.COMPLETED
    sale_date: datetime = Field(default_factory=lambda: datetime.now(UTC))
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_paid(self) -> bool:
        return self.payment_status is PaymentStatus.PAID
