"""Product domain entity."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class Product(BaseModel):
    """A finished good sold to clients.

    ``stock`` is a whole number and never negative; it moves only through
    sales, payment-status transitions and explicit edits.
    """

    id: int | None = None
    name: str
    description: str | None = None
    price: float = Field(default=0.0, ge=0)  # sale unit price
    cost_price: float = Field(default=0.0, ge=0)  # unit cost
    stock: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
