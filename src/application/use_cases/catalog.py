"""
Catalog use cases that go beyond plain store CRUD.

Edits run inside a unit of work so a sale or ledger entry committed
between the read and the write keeps its stock change. Reads, creates
and deletes of products and clients are served straight from the stores.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from src.application.dto.requests import (
    MaterialCreateRequest,
    MaterialUpdateRequest,
    ProductUpdateRequest,
)
from src.application.dto.responses import (
    CategoryStatsResponse,
    MaterialCreatedResponse,
    MaterialResponse,
    MaterialStatsResponse,
    ProductResponse,
)
from src.application.use_cases.base import LedgerUseCase
from src.config import get_logger
from src.core.entities.material import Material
from src.core.entities.material_ledger import MaterialPurchase
from src.core.entities.product import Product
from src.core.exceptions import MaterialNotFoundError, ProductNotFoundError
from src.core.interfaces.catalog_store import IMaterialStore
from src.core.services.consumption_report import MaterialStats, build_material_stats
from src.core.services.stock_ledger import round2, whole

logger = get_logger(__name__)

INITIAL_PURCHASE_NOTE = "Initial registration"


@dataclass
class CreateMaterialResult:
    material: Material
    initial_purchase: MaterialPurchase | None = None


class CreateMaterialUseCase(LedgerUseCase):
    """
    Register a material.

    With ``initial_purchase`` set and stock on hand, the opening stock is
    also written to the purchase ledger at ``cost_per_unit``, in the same
    transaction as the material itself.
    """

    async def execute(self, request: MaterialCreateRequest, user_id: int) -> CreateMaterialResult:
        quantity = (
            whole(request.quantity_in_stock)
            if request.unit.is_discrete
            else round2(request.quantity_in_stock)
        )
        material = Material(
            name=request.name,
            description=request.description,
            category=request.category,
            unit=request.unit,
            cost_per_unit=round2(request.cost_per_unit),
            quantity_in_stock=quantity,
            minimum_stock=request.minimum_stock,
            supplier=request.supplier,
            supplier_phone=request.supplier_phone,
            notes=request.notes,
        )

        purchase = None
        async with self._new_uow() as uow:
            material = await uow.materials.create_material(material)
            if request.initial_purchase and quantity > 0:
                purchase = await uow.purchases.create_purchase(
                    MaterialPurchase(
                        material_id=material.id,  # type: ignore[arg-type]
                        quantity=quantity,
                        unit_price=material.cost_per_unit,
                        total_cost=round2(quantity * material.cost_per_unit),
                        supplier=material.supplier,
                        purchased_by=user_id,
                        notes=INITIAL_PURCHASE_NOTE,
                    )
                )

        logger.info(
            "material_created",
            material_id=material.id,
            quantity_in_stock=material.quantity_in_stock,
            initial_purchase_id=purchase.id if purchase else None,
        )
        return CreateMaterialResult(material=material, initial_purchase=purchase)

    def to_response(self, result: CreateMaterialResult) -> MaterialCreatedResponse:
        return MaterialCreatedResponse(
            material=MaterialResponse.model_validate(result.material),
            initial_purchase_id=result.initial_purchase.id if result.initial_purchase else None,
        )


class UpdateProductUseCase(LedgerUseCase):
    """
    Partial product edit.

    ``stock`` is written only when the request sets it; otherwise the
    stock read inside the transaction is left as is.
    """

    async def execute(self, product_id: int, request: ProductUpdateRequest) -> Product:
        changes = request.model_dump(exclude_unset=True)
        stock = changes.pop("stock", None)

        async with self._new_uow() as uow:
            product = await uow.products.get_product(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)

            product = product.model_copy(update={**changes, "updated_at": datetime.now(UTC)})
            product = await uow.products.update_product(product)
            if stock is not None:
                await uow.products.set_stock(product_id, stock)
                product.stock = stock

        logger.info(
            "product_updated",
            product_id=product_id,
            fields=sorted(changes),
            stock_set=stock is not None,
        )
        return product

    def to_response(self, product: Product) -> ProductResponse:
        return ProductResponse.model_validate(product)


class UpdateMaterialUseCase(LedgerUseCase):
    """Partial material edit. Stock moves only through the ledger."""

    async def execute(self, material_id: int, request: MaterialUpdateRequest) -> Material:
        changes = request.model_dump(exclude_unset=True)

        async with self._new_uow() as uow:
            material = await uow.materials.get_material(material_id)
            if material is None:
                raise MaterialNotFoundError(material_id)

            material = material.model_copy(update={**changes, "updated_at": datetime.now(UTC)})
            material = await uow.materials.update_material(material)

        logger.info("material_updated", material_id=material_id, fields=sorted(changes))
        return material

    def to_response(self, material: Material) -> MaterialResponse:
        return MaterialResponse.model_validate(material)


class MaterialStatsUseCase:
    """Stock value, low-stock list and per-category totals."""

    def __init__(self, material_store: IMaterialStore | None = None):
        self._material_store = material_store

    async def _get_material_store(self) -> IMaterialStore:
        if self._material_store is None:
            from src.infrastructure.storage.sqlite import get_material_store

            self._material_store = await get_material_store()
        return self._material_store

    async def execute(self) -> MaterialStats:
        store = await self._get_material_store()
        return build_material_stats(await store.list_all_materials())

    def to_response(self, stats: MaterialStats) -> MaterialStatsResponse:
        return MaterialStatsResponse(
            total_materials=stats.total_materials,
            total_stock_value=stats.total_stock_value,
            low_stock_count=len(stats.low_stock),
            low_stock_materials=[MaterialResponse.model_validate(m) for m in stats.low_stock],
            by_category=[
                CategoryStatsResponse(
                    category=category.value,
                    count=entry.count,
                    total_value=entry.total_value,
                )
                for category, entry in stats.by_category.items()
            ],
        )
