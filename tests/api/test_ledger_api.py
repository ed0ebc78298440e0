"""API tests for catalog, material ledger and report endpoints."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock

import pytest
from httpx import AsyncClient

from src.api.dependencies import (
    get_consumption_report_use_case,
    get_create_consumption_use_case,
    get_list_purchases_use_case,
    get_mat_store,
    get_material_stats_use_case,
    get_prod_store,
    get_update_material_use_case,
    get_update_product_use_case,
)
from src.api.main import app
from src.application.dto.requests import MaterialUpdateRequest, ProductUpdateRequest
from src.application.use_cases.catalog import (
    MaterialStatsUseCase,
    UpdateMaterialUseCase,
    UpdateProductUseCase,
)
from src.application.use_cases.material_consumption_report import (
    MaterialConsumptionReportUseCase,
)
from src.application.use_cases.material_consumptions import CreateConsumptionUseCase
from src.application.use_cases.material_purchases import ListPurchasesUseCase
from src.core.entities.material import Material, MaterialCategory, MaterialUnit
from src.core.entities.material_ledger import (
    ConsumptionReason,
    MaterialConsumption,
    MaterialPurchase,
)
from src.core.entities.product import Product
from src.core.entities.user import UserRole
from src.core.exceptions import InvalidQuantityError, ProductNotFoundError
from src.infrastructure.storage.sqlite import close_pool
from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database

NOW = datetime(2025, 6, 10, 9, 0, tzinfo=UTC)


def coating() -> Material:
    return Material(
        id=2,
        name="Chocolate Coating",
        category=MaterialCategory.COATING,
        unit=MaterialUnit.KG,
        cost_per_unit=20.0,
        quantity_in_stock=0.8,
        minimum_stock=1.0,
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def material_store():
    store = AsyncMock()
    store.get_material.return_value = coating()
    store.list_materials.return_value = ([coating()], 1)
    store.list_all_materials.return_value = [coating()]
    return store


@pytest.fixture
def product_store():
    store = AsyncMock()
    store.get_product.return_value = None
    store.create_product.side_effect = lambda p: p.model_copy(update={"id": 5})
    return store


@pytest.fixture
def catalog_api(api_client: AsyncClient, material_store, product_store) -> AsyncClient:
    app.dependency_overrides[get_mat_store] = lambda: material_store
    app.dependency_overrides[get_prod_store] = lambda: product_store
    app.dependency_overrides[get_material_stats_use_case] = (
        lambda: MaterialStatsUseCase(material_store)
    )
    return api_client


class TestCatalogRoutes:
    async def test_list_materials_by_category(
        self, catalog_api: AsyncClient, material_store, act_as
    ):
        act_as(UserRole.SELLER)

        response = await catalog_api.get("/api/materials", params={"category": "coating"})

        assert response.status_code == 200
        material = response.json()["data"]["materials"][0]
        assert material["is_low_stock"] is True
        assert material["stock_value"] == 16.0
        assert material_store.list_materials.call_args.kwargs["category"] is MaterialCategory.COATING

    async def test_material_stats(self, catalog_api: AsyncClient, act_as):
        act_as(UserRole.SELLER)

        response = await catalog_api.get("/api/materials/stats")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_materials"] == 1
        assert data["low_stock_count"] == 1

    async def test_missing_product_is_404(self, catalog_api: AsyncClient, act_as):
        act_as(UserRole.CUSTOMER)

        response = await catalog_api.get("/api/products/42")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "PRODUCT_NOT_FOUND"
        assert body["message"] == "Product not found: 42"

    async def test_create_product(self, catalog_api: AsyncClient, act_as):
        act_as(UserRole.SELLER)

        response = await catalog_api.post(
            "/api/products", json={"name": "Cone", "price": 8, "cost_price": 3, "stock": 4}
        )

        assert response.status_code == 201
        assert response.json()["data"]["id"] == 5

    async def test_negative_price_rejected(self, catalog_api: AsyncClient, act_as):
        act_as(UserRole.SELLER)

        response = await catalog_api.post(
            "/api/products", json={"name": "Cone", "price": -1, "cost_price": 3}
        )

        assert response.status_code == 422

    async def test_delete_requires_admin(self, catalog_api: AsyncClient, act_as):
        act_as(UserRole.SELLER)

        response = await catalog_api.delete("/api/materials/2")

        assert response.status_code == 403


class TestCatalogEdits:
    @pytest.fixture
    def update_product_uc(self):
        uc = UpdateProductUseCase()
        uc.execute = AsyncMock(
            return_value=Product(id=1, name="Cone", price=120.0, cost_price=40.0, stock=7)
        )
        return uc

    @pytest.fixture
    def update_material_uc(self):
        uc = UpdateMaterialUseCase()
        uc.execute = AsyncMock(return_value=coating().model_copy(update={"name": "Dark Coating"}))
        return uc

    @pytest.fixture
    def edits_api(
        self, catalog_api: AsyncClient, update_product_uc, update_material_uc
    ) -> AsyncClient:
        app.dependency_overrides[get_update_product_use_case] = lambda: update_product_uc
        app.dependency_overrides[get_update_material_use_case] = lambda: update_material_uc
        return catalog_api

    async def test_price_edit_goes_through_use_case(
        self, edits_api: AsyncClient, update_product_uc, product_store, act_as
    ):
        act_as(UserRole.SELLER)

        response = await edits_api.put("/api/products/1", json={"price": 120})

        assert response.status_code == 200
        assert response.json()["data"]["stock"] == 7
        product_id, request = update_product_uc.execute.call_args.args
        assert product_id == 1
        assert request == ProductUpdateRequest(price=120.0)
        assert "stock" not in request.model_fields_set
        product_store.update_product.assert_not_called()

    async def test_missing_product_edit_is_404(
        self, edits_api: AsyncClient, update_product_uc, act_as
    ):
        act_as(UserRole.ADMIN)
        update_product_uc.execute.side_effect = ProductNotFoundError(42)

        response = await edits_api.put("/api/products/42", json={"name": "Cone"})

        assert response.status_code == 404

    async def test_rename_material(
        self, edits_api: AsyncClient, update_material_uc, material_store, act_as
    ):
        act_as(UserRole.SELLER)

        response = await edits_api.put("/api/materials/2", json={"name": "Dark Coating"})

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Dark Coating"
        update_material_uc.execute.assert_awaited_once_with(
            2, MaterialUpdateRequest(name="Dark Coating")
        )
        material_store.update_material.assert_not_called()

    async def test_customer_cannot_edit(self, edits_api: AsyncClient, act_as):
        act_as(UserRole.CUSTOMER)

        response = await edits_api.put("/api/products/1", json={"price": 1})

        assert response.status_code == 403


class TestLedgerRoutes:
    async def test_list_purchases_forwards_filters(self, api_client: AsyncClient, act_as):
        act_as(UserRole.SELLER)
        store = AsyncMock()
        store.list_purchases.return_value = (
            [
                MaterialPurchase(
                    id=1,
                    material_id=2,
                    quantity=2,
                    unit_price=18.0,
                    total_cost=36.0,
                    purchased_by=1,
                    purchase_date=NOW,
                    created_at=NOW,
                )
            ],
            1,
        )
        app.dependency_overrides[get_list_purchases_use_case] = (
            lambda: ListPurchasesUseCase(store)
        )

        response = await api_client.get(
            "/api/material-purchases", params={"material_id": 2, "page": 1, "limit": 20}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["purchases"][0]["total_cost"] == 36.0
        assert data["pagination"]["pages"] == 1
        assert store.list_purchases.call_args.kwargs["material_id"] == 2

    async def test_fractional_unit_consumption_is_400(self, api_client: AsyncClient, act_as):
        act_as(UserRole.SELLER)
        uc = Mock(spec=CreateConsumptionUseCase)
        uc.execute = AsyncMock(side_effect=InvalidQuantityError(0.4, "must be at least 1 unit"))
        app.dependency_overrides[get_create_consumption_use_case] = lambda: uc

        response = await api_client.post(
            "/api/material-consumptions", json={"material_id": 1, "quantity": 0.4}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_QUANTITY"

    async def test_consumption_report(self, api_client: AsyncClient, act_as):
        act_as(UserRole.SELLER)
        sale_store = AsyncMock()
        sale_store.list_paid_completed.return_value = []
        consumption_store = AsyncMock()
        consumption_store.list_between.return_value = [
            MaterialConsumption(
                id=1,
                material_id=2,
                quantity=0.5,
                reason=ConsumptionReason.EXPIRY,
                consumed_by=1,
                consumption_date=NOW,
            )
        ]
        material_store = AsyncMock()
        material_store.list_all_materials.return_value = [coating()]
        app.dependency_overrides[get_consumption_report_use_case] = (
            lambda: MaterialConsumptionReportUseCase(sale_store, consumption_store, material_store)
        )

        response = await api_client.get(
            "/api/material-purchases/consumption-report",
            params={"start": "2025-06-01", "end": "2025-06-30"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_materials_used"] == 1
        line = data["consumption"][0]
        assert line["material_name"] == "Chocolate Coating"
        assert line["manual_cost"] == 10.0
        assert line["sales_count"] == 0


class TestHealth:
    async def test_root_health(self, api_client: AsyncClient):
        response = await api_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_api_health(self, api_client: AsyncClient):
        response = await api_client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["uptime_seconds"] >= 0

    async def test_db_health_reports_schema_version(self, api_client: AsyncClient):
        await initialize_database(create_backup_before=False)
        try:
            response = await api_client.get("/api/health/db")
        finally:
            await close_pool()

        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"]["schema_version"] == "001"

    async def test_db_health_unmigrated(self, api_client: AsyncClient):
        try:
            response = await api_client.get("/api/health/db")
        finally:
            await close_pool()

        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["database"]["error"] == "schema not migrated"

    async def test_request_id_echoed(self, api_client: AsyncClient):
        response = await api_client.get("/health", headers={"X-Request-ID": "till-7"})

        assert response.headers["X-Request-ID"] == "till-7"
        assert response.headers["X-Response-Time"].endswith("ms")
