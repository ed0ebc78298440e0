"""API route modules."""

from src.api.routes.auth import router as auth_router
from src.api.routes.clients import router as clients_router
from src.api.routes.health import router as health_router
from src.api.routes.material_consumptions import router as material_consumptions_router
from src.api.routes.material_purchases import router as material_purchases_router
from src.api.routes.materials import router as materials_router
from src.api.routes.products import router as products_router
from src.api.routes.sales import router as sales_router

__all__ = [
    "health_router",
    "auth_router",
    "products_router",
    "materials_router",
    "clients_router",
    "sales_router",
    "material_purchases_router",
    "material_consumptions_router",
]
