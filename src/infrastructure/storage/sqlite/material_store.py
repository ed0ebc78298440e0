"""
SQLite implementation of material catalog storage.

Handles materials and their stock level; the purchase and consumption
ledgers live in ledger_store.
"""

from datetime import UTC, datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.material import Material, MaterialCategory, MaterialUnit
from src.core.exceptions import MaterialNotFoundError
from src.core.interfaces.catalog_store import IMaterialStore
from src.infrastructure.storage.sqlite.connection import use_connection, use_transaction
from src.infrastructure.storage.sqlite.rows import count, like_pattern, parse_dt_or_now, to_iso

logger = get_logger(__name__)


class SQLiteMaterialStore(IMaterialStore):
    """SQLite implementation of material catalog storage."""

    def __init__(self, conn: aiosqlite.Connection | None = None):
        self._conn = conn

    async def create_material(self, material: Material) -> Material:
        """Create a new material record."""
        now = datetime.now(UTC)
        material.created_at = now
        material.updated_at = now
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute(
                """
                INSERT INTO materials (
                    name, description, category, unit, cost_per_unit,
                    quantity_in_stock, minimum_stock, supplier, supplier_phone,
                    notes, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    material.name,
                    material.description,
                    material.category.value,
                    material.unit.value,
                    material.cost_per_unit,
                    material.quantity_in_stock,
                    material.minimum_stock,
                    material.supplier,
                    material.supplier_phone,
                    material.notes,
                    to_iso(material.created_at),
                    to_iso(material.updated_at),
                ),
            )
            material.id = cursor.lastrowid
        logger.info("material_created", material_id=material.id, name=material.name)
        return material

    async def get_material(self, material_id: int) -> Material | None:
        async with use_connection(self._conn) as conn:
            cursor = await conn.execute("SELECT * FROM materials WHERE id = ?", (material_id,))
            row = await cursor.fetchone()
            return self._row_to_material(row) if row else None

    async def update_material(self, material: Material) -> Material:
        """Write catalog fields. ``quantity_in_stock`` moves only via ``set_stock``."""
        material.updated_at = datetime.now(UTC)
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute(
                """
                UPDATE materials
                SET name = ?, description = ?, category = ?, unit = ?,
                    cost_per_unit = ?, minimum_stock = ?,
                    supplier = ?, supplier_phone = ?, notes = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    material.name,
                    material.description,
                    material.category.value,
                    material.unit.value,
                    material.cost_per_unit,
                    material.minimum_stock,
                    material.supplier,
                    material.supplier_phone,
                    material.notes,
                    to_iso(material.updated_at),
                    material.id,
                ),
            )
            if cursor.rowcount == 0:
                raise MaterialNotFoundError(material.id)  # type: ignore[arg-type]
        return material

    async def delete_material(self, material_id: int) -> bool:
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute("DELETE FROM materials WHERE id = ?", (material_id,))
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("material_deleted", material_id=material_id)
        return deleted

    async def set_stock(
        self,
        material_id: int,
        quantity_in_stock: float,
        cost_per_unit: float | None = None,
    ) -> None:
        now = to_iso(datetime.now(UTC))
        async with use_transaction(self._conn) as conn:
            if cost_per_unit is None:
                await conn.execute(
                    "UPDATE materials SET quantity_in_stock = ?, updated_at = ? WHERE id = ?",
                    (quantity_in_stock, now, material_id),
                )
            else:
                await conn.execute(
                    """
                    UPDATE materials
                    SET quantity_in_stock = ?, cost_per_unit = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (quantity_in_stock, cost_per_unit, now, material_id),
                )

    async def list_materials(
        self,
        search: str | None = None,
        category: MaterialCategory | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Material], int]:
        """List materials by name, filtered by a case-insensitive search and category."""
        conditions: list[str] = []
        params: list = []
        if search:
            pattern = like_pattern(search)
            conditions.append(
                "(name LIKE ? ESCAPE '\\' OR description LIKE ? ESCAPE '\\' "
                "OR supplier LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern, pattern])
        if category:
            conditions.append("category = ?")
            params.append(category.value)
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        async with use_connection(self._conn) as conn:
            total = await count(conn, f"SELECT COUNT(*) FROM materials {where}", tuple(params))
            cursor = await conn.execute(
                f"SELECT * FROM materials {where} ORDER BY name, id LIMIT ? OFFSET ?",
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_material(r) for r in rows], total

    async def list_all_materials(self) -> list[Material]:
        async with use_connection(self._conn) as conn:
            cursor = await conn.execute("SELECT * FROM materials ORDER BY name, id")
            rows = await cursor.fetchall()
            return [self._row_to_material(r) for r in rows]

    @staticmethod
    def _row_to_material(row: aiosqlite.Row) -> Material:
        return Material(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            category=MaterialCategory(row["category"]),
            unit=MaterialUnit(row["unit"]),
            cost_per_unit=float(row["cost_per_unit"]),
            quantity_in_stock=float(row["quantity_in_stock"]),
            minimum_stock=float(row["minimum_stock"]),
            supplier=row["supplier"],
            supplier_phone=row["supplier_phone"],
            notes=row["notes"],
            created_at=parse_dt_or_now(row["created_at"]),
            updated_at=parse_dt_or_now(row["updated_at"]),
        )
