"""
Material domain entity.

Raw materials and supplies consumed when producing what is sold
(cones, toppings, packaging...).
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class MaterialCategory(str, Enum):
    """Material categories."""

    CONE = "cone"
    COATING = "coating"
    TOPPING = "topping"
    PACKAGING = "packaging"
    UTENSIL = "utensil"
    OTHER = "other"


class MaterialUnit(str, Enum):
    """Units of measure. ``UNIT`` is the only discrete one."""

    UNIT = "unit"
    KG = "kg"
    LITER = "liter"
    PACK = "pack"
    BOX = "box"

    @property
    def is_discrete(self) -> bool:
        return self is MaterialUnit.UNIT


class Material(BaseModel):
    """
    A stocked material.

    ``quantity_in_stock`` is kept at 2 decimals and never negative;
    ``minimum_stock`` drives low-stock reporting.
    """

    id: int | None = None
    name: str
    description: str | None = None
    category: MaterialCategory
    unit: MaterialUnit = MaterialUnit.UNIT
    cost_per_unit: float = Field(default=0.0, ge=0)
    quantity_in_stock: float = Field(default=0.0, ge=0)
    minimum_stock: float = Field(default=0.0, ge=0)
    supplier: str | None = None
    supplier_phone: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def stock_value(self) -> float:
        """Stock value = quantity * cost per unit."""
        return self.quantity_in_stock * self.cost_per_unit

    @property
    def is_low_stock(self) -> bool:
        """True when a threshold is set and stock is at or below it."""
        return self.minimum_stock > 0 and self.quantity_in_stock <= self.minimum_stock
