"""
Stock ledger primitives.

Every change to ``Product.stock`` and ``Material.quantity_in_stock`` goes
through :func:`adjust_stock`:

* quantities are rounded to 2 decimals (half-up);
* discrete units move in whole numbers only;
* a negative result is clamped to zero (floor-at-zero).

:class:`StockLedger` applies a batch of signed deltas against the stores.
Callers are expected to run it inside a unit of work so the reads and the
writes happen under the same write lock.
"""

import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from src.config import get_logger
from src.core.entities.material import Material, MaterialUnit
from src.core.entities.product import Product
from src.core.exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    MaterialNotFoundError,
    ProductNotFoundError,
)
from src.core.interfaces.catalog_store import IMaterialStore, IProductStore

logger = get_logger(__name__)

_CENT = Decimal("0.01")


def round2(value: float) -> float:
    """Round to 2 decimals, half away from zero (1.005 -> 1.01)."""
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def whole(value: float) -> float:
    """Drop the fractional part, keeping the sign (2.7 -> 2, -2.7 -> -2)."""
    return math.copysign(math.floor(abs(value)), value)


def adjust_stock(
    current: float, delta: float, unit: MaterialUnit = MaterialUnit.KG
) -> float:
    """
    Apply ``delta`` to ``current`` and return the new stock level.

    For the discrete unit the delta is truncated to a whole number first.
    Never raises for going negative: the result is floored at zero.
    """
    if unit.is_discrete:
        delta = whole(delta)
        result = whole(current + delta)
    else:
        result = round2(current + delta)
    return max(result, 0.0)


def stock_shortfall(
    current: float, delta: float, unit: MaterialUnit = MaterialUnit.KG
) -> float:
    """Amount that :func:`adjust_stock` would discard by flooring at zero."""
    if unit.is_discrete:
        delta = whole(delta)
    raw = round2(current + delta)
    return round2(-raw) if raw < 0 else 0.0


def normalize_quantity(quantity: float, unit: MaterialUnit) -> float:
    """
    Round a requested quantity for ``unit``.

    Raises:
        InvalidQuantityError: the quantity is not positive once rounded
    """
    if unit.is_discrete:
        normalized = whole(quantity)
        if normalized <= 0:
            raise InvalidQuantityError(
                quantity, "discrete units need a whole quantity greater than zero"
            )
        return normalized

    normalized = round2(quantity)
    if normalized <= 0:
        raise InvalidQuantityError(quantity, "quantity must be greater than zero")
    return normalized


@dataclass
class StockPlan:
    """Signed stock deltas per product and per material."""

    products: dict[int, int] = field(default_factory=dict)
    materials: dict[int, float] = field(default_factory=dict)

    def add_product(self, product_id: int, delta: int) -> None:
        self.products[product_id] = self.products.get(product_id, 0) + delta

    def add_material(self, material_id: int, delta: float) -> None:
        self.materials[material_id] = round2(self.materials.get(material_id, 0.0) + delta)

    def reversed(self) -> "StockPlan":
        return StockPlan(
            products={pid: -d for pid, d in self.products.items()},
            materials={mid: -d for mid, d in self.materials.items()},
        )

    @property
    def is_empty(self) -> bool:
        return not any(self.products.values()) and not any(self.materials.values())


@dataclass
class StockApplication:
    """What a :class:`StockLedger` run actually did."""

    products: dict[int, int] = field(default_factory=dict)  # new stock levels
    materials: dict[int, float] = field(default_factory=dict)
    skipped_products: list[int] = field(default_factory=list)
    skipped_materials: list[int] = field(default_factory=list)


class StockLedger:
    """Applies :class:`StockPlan` batches through the catalog stores."""

    def __init__(self, product_store: IProductStore, material_store: IMaterialStore):
        self._products = product_store
        self._materials = material_store

    async def apply(
        self,
        plan: StockPlan,
        *,
        reject_shortfall: bool = True,
        skip_missing: bool = False,
        reference: str | None = None,
    ) -> StockApplication:
        """
        Apply every delta in ``plan``.

        All entities are loaded and checked before the first write.

        Args:
            plan: signed deltas to apply
            reject_shortfall: raise InsufficientStockError instead of flooring
                when a decrement exceeds the available stock
            skip_missing: ignore products/materials that no longer exist
                instead of raising
            reference: free text for the log lines (e.g. "sale:12")

        Raises:
            ProductNotFoundError / MaterialNotFoundError: when not skip_missing
            InsufficientStockError: when reject_shortfall and stock is short
        """
        result = StockApplication()
        products: list[tuple[Product, int]] = []
        materials: list[tuple[Material, float]] = []

        for product_id, delta in plan.products.items():
            if not delta:
                continue
            product = await self._products.get_product(product_id)
            if product is None:
                if not skip_missing:
                    raise ProductNotFoundError(product_id)
                logger.warning("stock_skipped_missing_product", product_id=product_id, reference=reference)
                result.skipped_products.append(product_id)
                continue
            if reject_shortfall and product.stock + delta < 0:
                raise InsufficientStockError(
                    entity="product",
                    name=product.name,
                    requested=-delta,
                    available=product.stock,
                )
            products.append((product, delta))

        for material_id, delta in plan.materials.items():
            if not delta:
                continue
            material = await self._materials.get_material(material_id)
            if material is None:
                if not skip_missing:
                    raise MaterialNotFoundError(material_id)
                logger.warning("stock_skipped_missing_material", material_id=material_id, reference=reference)
                result.skipped_materials.append(material_id)
                continue
            if reject_shortfall and round2(material.quantity_in_stock + delta) < 0:
                raise InsufficientStockError(
                    entity="material",
                    name=material.name,
                    requested=-delta,
                    available=material.quantity_in_stock,
                    unit=material.unit.value,
                )
            materials.append((material, delta))

        for product, delta in products:
            shortfall = stock_shortfall(product.stock, delta, MaterialUnit.UNIT)
            if shortfall:
                logger.warning(
                    "stock_floored",
                    product_id=product.id,
                    shortfall=shortfall,
                    reference=reference,
                )
            new_stock = int(adjust_stock(product.stock, delta, MaterialUnit.UNIT))
            await self._products.set_stock(product.id, new_stock)  # type: ignore[arg-type]
            result.products[product.id] = new_stock  # type: ignore[index]

        for material, delta in materials:
            shortfall = stock_shortfall(material.quantity_in_stock, delta, material.unit)
            if shortfall:
                logger.warning(
                    "stock_floored",
                    material_id=material.id,
                    shortfall=shortfall,
                    reference=reference,
                )
            new_qty = adjust_stock(material.quantity_in_stock, delta, material.unit)
            await self._materials.set_stock(material.id, new_qty)  # type: ignore[arg-type]
            result.materials[material.id] = new_qty  # type: ignore[index]

        logger.info(
            "stock_plan_applied",
            reference=reference,
            products=len(result.products),
            materials=len(result.materials),
        )
        return result
