"""
Payment-status transitions for sales.

Two steady states, ``paid`` and ``pending``. Moving between them applies or
reverses the sale's stock effects; asking for the current state changes no
stock.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from src.core.entities.sale import PaymentStatus, Sale
from src.core.services.stock_ledger import StockPlan


@dataclass
class PaymentTransition:
    """What moving ``sale`` to a target status requires."""

    source: PaymentStatus
    target: PaymentStatus
    stock: StockPlan
    paid_at: datetime | None

    @property
    def changes_status(self) -> bool:
        return self.source is not self.target

    @property
    def deducts(self) -> bool:
        return self.target is PaymentStatus.PAID and self.changes_status


def sale_stock_plan(sale: Sale) -> StockPlan:
    """Deductions a paid sale has applied: product quantities and recorded material usage."""
    plan = StockPlan()
    for item in sale.items:
        plan.add_product(item.product_id, -item.quantity)
        for usage in item.materials_used:
            plan.add_material(usage.material_id, -usage.quantity)
    return plan


def plan_payment_transition(
    sale: Sale, target: PaymentStatus, now: datetime | None = None
) -> PaymentTransition:
    if sale.payment_status is target:
        return PaymentTransition(
            source=sale.payment_status,
            target=target,
            stock=StockPlan(),
            paid_at=sale.paid_at,
        )

    deductions = sale_stock_plan(sale)
    if target is PaymentStatus.PAID:
        return PaymentTransition(
            source=sale.payment_status,
            target=target,
            stock=deductions,
            paid_at=now or datetime.now(UTC),
        )
    return PaymentTransition(
        source=sale.payment_status,
        target=target,
        stock=deductions.reversed(),
        paid_at=None,
    )
