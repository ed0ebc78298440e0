"""
Sale pricing engine.

Turns a sale request into a fully priced sale: per-line subtotal and cost,
material usage, totals, gross and net profit. Stock is validated here but
never written; the returned :class:`StockPlan` carries the deductions the
caller applies when the sale is paid.
"""

from dataclasses import dataclass, field

from src.config import get_logger
from src.core.entities.material import Material
from src.core.entities.product import Product
from src.core.entities.sale import (
    MaterialUsage,
    PaymentMethod,
    PaymentStatus,
    SaleItem,
)
from src.core.exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    MaterialNotFoundError,
    ProductNotFoundError,
)
from src.core.interfaces.catalog_store import IMaterialStore, IProductStore
from src.core.services.policy import LedgerPolicy
from src.core.services.stock_ledger import StockPlan, round2, whole

logger = get_logger(__name__)


@dataclass
class MaterialLine:
    """Material usage as requested: quantity per unit sold."""

    material_id: int
    quantity: float


@dataclass
class SaleLine:
    """One requested line of a sale."""

    product_id: int
    quantity: int
    unit_price: float | None = None
    materials_used: list[MaterialLine] = field(default_factory=list)


@dataclass
class PricedSale:
    """Result of pricing a sale request."""

    items: list[SaleItem]
    total_amount: float
    total_cost: float
    materials_cost: float
    gross_profit: float
    tax: float
    net_profit: float
    payment_status: PaymentStatus
    deductions: StockPlan
    products: dict[int, Product] = field(default_factory=dict)
    materials: dict[int, Material] = field(default_factory=dict)


def resolve_payment_status(
    explicit: PaymentStatus | None, method: PaymentMethod
) -> PaymentStatus:
    """Explicit status wins, else a ``pending`` method defers payment."""
    if explicit is not None:
        return explicit
    if method is PaymentMethod.PENDING:
        return PaymentStatus.PENDING
    return PaymentStatus.PAID


def compute_profit(
    total_amount: float, total_cost: float, tax_rate: float
) -> tuple[float, float, float]:
    """Return ``(gross_profit, tax, net_profit)`` rounded to 2 decimals."""
    gross = round2(total_amount - total_cost)
    tax = round2(gross * tax_rate)
    return gross, tax, round2(gross - tax)


class SalePricingEngine:
    """
    Prices sale requests against the current catalog.

    Lines are resolved in input order; the first missing entity or stock
    shortage aborts pricing. Stock is checked cumulatively, so a product
    listed on two lines must cover both.
    """

    def __init__(
        self,
        product_store: IProductStore,
        material_store: IMaterialStore,
        policy: LedgerPolicy | None = None,
    ):
        self._products = product_store
        self._materials = material_store
        self._policy = policy or LedgerPolicy()

    async def price_sale(
        self,
        lines: list[SaleLine],
        payment_method: PaymentMethod,
        payment_status: PaymentStatus | None = None,
    ) -> PricedSale:
        """
        Price every line and build the stock deductions.

        Raises:
            ProductNotFoundError / MaterialNotFoundError: unknown id
            InsufficientStockError: stock cannot cover the requested quantity
            InvalidQuantityError: fractional usage of a discrete material
        """
        plan = StockPlan()
        products: dict[int, Product] = {}
        materials: dict[int, Material] = {}
        items: list[SaleItem] = []

        total_amount = 0.0
        total_cost = 0.0
        materials_cost = 0.0

        for line in lines:
            product = products.get(line.product_id)
            if product is None:
                product = await self._products.get_product(line.product_id)
                if product is None:
                    raise ProductNotFoundError(line.product_id)
                products[line.product_id] = product

            reserved = -plan.products.get(line.product_id, 0)
            if product.stock - reserved < line.quantity:
                raise InsufficientStockError(
                    entity="product",
                    name=product.name,
                    requested=line.quantity,
                    available=product.stock - reserved,
                )
            plan.add_product(line.product_id, -line.quantity)

            unit_price = line.unit_price if line.unit_price is not None else product.price
            subtotal = round2(unit_price * line.quantity)
            item_cost = round2(product.cost_price * line.quantity)

            usages: list[MaterialUsage] = []
            for usage in line.materials_used:
                material = materials.get(usage.material_id)
                if material is None:
                    material = await self._materials.get_material(usage.material_id)
                    if material is None:
                        raise MaterialNotFoundError(usage.material_id)
                    materials[usage.material_id] = material

                needed = round2(usage.quantity * line.quantity)
                if needed <= 0:
                    raise InvalidQuantityError(needed, "material usage must be greater than zero")
                if material.unit.is_discrete and needed != whole(needed):
                    raise InvalidQuantityError(
                        needed, f"'{material.name}' is counted in whole units"
                    )

                reserved_material = -plan.materials.get(usage.material_id, 0.0)
                available = round2(material.quantity_in_stock - reserved_material)
                if available < needed:
                    raise InsufficientStockError(
                        entity="material",
                        name=material.name,
                        requested=needed,
                        available=available,
                        unit=material.unit.value,
                    )
                plan.add_material(usage.material_id, -needed)

                usages.append(
                    MaterialUsage(
                        material_id=usage.material_id,
                        quantity=needed,
                        cost=round2(material.cost_per_unit * needed),
                    )
                )

            line_materials_cost = round2(sum(u.cost for u in usages))
            items.append(
                SaleItem(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=unit_price,
                    subtotal=subtotal,
                    cost=item_cost,
                    materials_used=usages,
                )
            )

            total_amount += subtotal
            total_cost += item_cost + line_materials_cost
            materials_cost += line_materials_cost

        total_amount = round2(total_amount)
        total_cost = round2(total_cost)
        gross, tax, net = compute_profit(total_amount, total_cost, self._policy.tax_rate)

        status = resolve_payment_status(payment_status, payment_method)
        logger.debug(
            "sale_priced",
            lines=len(items),
            total_amount=total_amount,
            total_cost=total_cost,
            payment_status=status.value,
        )

        return PricedSale(
            items=items,
            total_amount=total_amount,
            total_cost=total_cost,
            materials_cost=round2(materials_cost),
            gross_profit=gross,
            tax=tax,
            net_profit=net,
            payment_status=status,
            deductions=plan,
            products=products,
            materials=materials,
        )
