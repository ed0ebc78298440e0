"""Core domain entities."""

from src.core.entities.client import Client
from src.core.entities.material import Material, MaterialCategory, MaterialUnit
from src.core.entities.material_ledger import (
    ConsumptionReason,
    MaterialConsumption,
    MaterialPurchase,
)
from src.core.entities.product import Product
from src.core.entities.sale import (
    MaterialUsage,
    PaymentMethod,
    PaymentStatus,
    Sale,
    SaleItem,
    SaleStatus,
)
from src.core.entities.user import User, UserRole

__all__ = [
    # Catalog entities
    "Product",
    "Material",
    "MaterialCategory",
    "MaterialUnit",
    "Client",
    # Sale entities
    "Sale",
    "SaleItem",
    "MaterialUsage",
    "PaymentMethod",
    "PaymentStatus",
    "SaleStatus",
    # Ledger entities
    "MaterialPurchase",
    "MaterialConsumption",
    "ConsumptionReason",
    # Account entities
    "User",
    "UserRole",
]
