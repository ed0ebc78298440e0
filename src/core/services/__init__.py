"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from src.core.services.consumption_report import (
    ConsumptionReport,
    MaterialConsumptionLine,
    MaterialStats,
    SalesReport,
    build_consumption_report,
    build_material_stats,
    build_sales_report,
)
from src.core.services.payment_transition import (
    PaymentTransition,
    plan_payment_transition,
    sale_stock_plan,
)
from src.core.services.policy import LedgerPolicy
from src.core.services.sale_pricing import (
    MaterialLine,
    PricedSale,
    SaleLine,
    SalePricingEngine,
    compute_profit,
    resolve_payment_status,
)
from src.core.services.stock_ledger import (
    StockApplication,
    StockLedger,
    StockPlan,
    adjust_stock,
    normalize_quantity,
    round2,
    stock_shortfall,
)

__all__ = [
    # Stock ledger
    "StockLedger",
    "StockPlan",
    "StockApplication",
    "adjust_stock",
    "stock_shortfall",
    "normalize_quantity",
    "round2",
    # Policy
    "LedgerPolicy",
    # Sale pricing
    "SalePricingEngine",
    "SaleLine",
    "MaterialLine",
    "PricedSale",
    "compute_profit",
    "resolve_payment_status",
    # Payment transitions
    "PaymentTransition",
    "plan_payment_transition",
    "sale_stock_plan",
    # Reports
    "ConsumptionReport",
    "MaterialConsumptionLine",
    "SalesReport",
    "MaterialStats",
    "build_consumption_report",
    "build_sales_report",
    "build_material_stats",
]
