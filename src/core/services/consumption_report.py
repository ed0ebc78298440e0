"""
Period reports over the sale and material ledgers.

Only paid, completed sales count. Manual consumptions are costed at the
material's current ``cost_per_unit``.
"""

from dataclasses import dataclass, field
from datetime import datetime

from src.core.entities.material import Material, MaterialCategory
from src.core.entities.material_ledger import MaterialConsumption
from src.core.entities.sale import Sale, SaleStatus
from src.core.services.stock_ledger import round2


@dataclass
class MaterialConsumptionLine:
    material_id: int
    material_name: str
    unit: str | None
    sales_quantity: float = 0.0
    sales_cost: float = 0.0
    sales_count: int = 0
    manual_quantity: float = 0.0
    manual_cost: float = 0.0

    @property
    def total_quantity(self) -> float:
        return round2(self.sales_quantity + self.manual_quantity)

    @property
    def total_cost(self) -> float:
        return round2(self.sales_cost + self.manual_cost)


@dataclass
class ConsumptionReport:
    start: datetime
    end: datetime
    lines: list[MaterialConsumptionLine] = field(default_factory=list)

    @property
    def total_sales_cost(self) -> float:
        return round2(sum(line.sales_cost for line in self.lines))

    @property
    def total_manual_cost(self) -> float:
        return round2(sum(line.manual_cost for line in self.lines))

    @property
    def total_cost(self) -> float:
        return round2(self.total_sales_cost + self.total_manual_cost)


def _counts(sale: Sale) -> bool:
    return sale.is_paid and sale.status is SaleStatus.COMPLETED


def build_consumption_report(
    start: datetime,
    end: datetime,
    sales: list[Sale],
    consumptions: list[MaterialConsumption],
    materials: dict[int, Material],
) -> ConsumptionReport:
    """
    Aggregate material usage by material for ``[start, end]``.

    Usage referencing a material that no longer exists is reported under
    its id with an empty name.
    """
    lines: dict[int, MaterialConsumptionLine] = {}

    def line_for(material_id: int) -> MaterialConsumptionLine:
        line = lines.get(material_id)
        if line is None:
            material = materials.get(material_id)
            line = MaterialConsumptionLine(
                material_id=material_id,
                material_name=material.name if material else "",
                unit=material.unit.value if material else None,
            )
            lines[material_id] = line
        return line

    for sale in sales:
        if not _counts(sale):
            continue
        seen: set[int] = set()
        for item in sale.items:
            for usage in item.materials_used:
                line = line_for(usage.material_id)
                line.sales_quantity = round2(line.sales_quantity + usage.quantity)
                line.sales_cost = round2(line.sales_cost + usage.cost)
                # Distinct sales, not usage rows: a sale using the material on
                # several items counts once.
                if usage.material_id not in seen:
                    line.sales_count += 1
                    seen.add(usage.material_id)

    for consumption in consumptions:
        line = line_for(consumption.material_id)
        line.manual_quantity = round2(line.manual_quantity + consumption.quantity)
        material = materials.get(consumption.material_id)
        if material is not None:
            line.manual_cost = round2(line.manual_quantity * material.cost_per_unit)

    ordered = sorted(lines.values(), key=lambda line: line.total_cost, reverse=True)
    return ConsumptionReport(start=start, end=end, lines=ordered)


@dataclass
class SalesReport:
    start: datetime
    end: datetime
    sales: list[Sale]
    sales_count: int
    total_amount: float
    total_cost: float
    materials_cost: float
    gross_profit: float
    net_profit: float


def build_sales_report(start: datetime, end: datetime, sales: list[Sale]) -> SalesReport:
    counted = [sale for sale in sales if _counts(sale)]
    return SalesReport(
        start=start,
        end=end,
        sales=counted,
        sales_count=len(counted),
        total_amount=round2(sum(s.total_amount for s in counted)),
        total_cost=round2(sum(s.total_cost for s in counted)),
        materials_cost=round2(sum(s.materials_cost for s in counted)),
        gross_profit=round2(sum(s.gross_profit for s in counted)),
        net_profit=round2(sum(s.net_profit for s in counted)),
    )


@dataclass
class CategoryStats:
    count: int = 0
    total_value: float = 0.0


@dataclass
class MaterialStats:
    total_materials: int
    total_stock_value: float
    low_stock: list[Material]
    by_category: dict[MaterialCategory, CategoryStats]


def build_material_stats(materials: list[Material]) -> MaterialStats:
    by_category: dict[MaterialCategory, CategoryStats] = {}
    for material in materials:
        stats = by_category.setdefault(material.category, CategoryStats())
        stats.count += 1
        stats.total_value = round2(stats.total_value + material.stock_value)

    return MaterialStats(
        total_materials=len(materials),
        total_stock_value=round2(sum(m.stock_value for m in materials)),
        low_stock=[m for m in materials if m.is_low_stock],
        by_category=by_category,
    )
