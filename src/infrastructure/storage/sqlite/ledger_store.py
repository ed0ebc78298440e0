"""SQLite implementation of the material purchase and consumption ledgers."""

from datetime import UTC, datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.material_ledger import (
    ConsumptionReason,
    MaterialConsumption,
    MaterialPurchase,
)
from src.core.exceptions import PurchaseNotFoundError
from src.core.interfaces.ledger_store import (
    IMaterialConsumptionStore,
    IMaterialPurchaseStore,
)
from src.infrastructure.storage.sqlite.connection import use_connection, use_transaction
from src.infrastructure.storage.sqlite.rows import count, parse_dt_or_now, to_iso

logger = get_logger(__name__)


def _filters(
    date_column: str,
    material_id: int | None,
    start: datetime | None,
    end: datetime | None,
) -> tuple[str, list]:
    conditions: list[str] = []
    params: list = []
    if material_id is not None:
        conditions.append("material_id = ?")
        params.append(material_id)
    if start:
        conditions.append(f"{date_column} >= ?")
        params.append(to_iso(start))
    if end:
        conditions.append(f"{date_column} <= ?")
        params.append(to_iso(end))
    where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    return where, params


class SQLiteMaterialPurchaseStore(IMaterialPurchaseStore):
    """SQLite implementation of material purchase storage."""

    def __init__(self, conn: aiosqlite.Connection | None = None):
        self._conn = conn

    async def create_purchase(self, purchase: MaterialPurchase) -> MaterialPurchase:
        purchase.created_at = datetime.now(UTC)
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute(
                """
                INSERT INTO material_purchases (
                    material_id, quantity, unit_price, total_cost, supplier,
                    purchased_by, purchase_date, notes, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    purchase.material_id,
                    purchase.quantity,
                    purchase.unit_price,
                    purchase.total_cost,
                    purchase.supplier,
                    purchase.purchased_by,
                    to_iso(purchase.purchase_date),
                    purchase.notes,
                    to_iso(purchase.created_at),
                ),
            )
            purchase.id = cursor.lastrowid
        return purchase

    async def get_purchase(self, purchase_id: int) -> MaterialPurchase | None:
        async with use_connection(self._conn) as conn:
            cursor = await conn.execute(
                "SELECT * FROM material_purchases WHERE id = ?", (purchase_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_purchase(row) if row else None

    async def update_purchase(self, purchase: MaterialPurchase) -> MaterialPurchase:
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute(
                """
                UPDATE material_purchases
                SET quantity = ?, unit_price = ?, total_cost = ?, supplier = ?,
                    purchase_date = ?, notes = ?
                WHERE id = ?
                """,
                (
                    purchase.quantity,
                    purchase.unit_price,
                    purchase.total_cost,
                    purchase.supplier,
                    to_iso(purchase.purchase_date),
                    purchase.notes,
                    purchase.id,
                ),
            )
            if cursor.rowcount == 0:
                raise PurchaseNotFoundError(purchase.id)  # type: ignore[arg-type]
        return purchase

    async def delete_purchase(self, purchase_id: int) -> bool:
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute(
                "DELETE FROM material_purchases WHERE id = ?", (purchase_id,)
            )
            return cursor.rowcount > 0

    async def list_purchases(
        self,
        material_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[MaterialPurchase], int]:
        where, params = _filters("purchase_date", material_id, start, end)
        async with use_connection(self._conn) as conn:
            total = await count(
                conn, f"SELECT COUNT(*) FROM material_purchases {where}", tuple(params)
            )
            cursor = await conn.execute(
                f"""
                SELECT * FROM material_purchases {where}
                ORDER BY purchase_date DESC, id DESC LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_purchase(r) for r in rows], total

    @staticmethod
    def _row_to_purchase(row: aiosqlite.Row) -> MaterialPurchase:
        return MaterialPurchase(
            id=row["id"],
            material_id=row["material_id"],
            quantity=float(row["quantity"]),
            unit_price=float(row["unit_price"]),
            total_cost=float(row["total_cost"]),
            supplier=row["supplier"],
            purchased_by=row["purchased_by"],
            purchase_date=parse_dt_or_now(row["purchase_date"]),
            notes=row["notes"],
            created_at=parse_dt_or_now(row["created_at"]),
        )


class SQLiteMaterialConsumptionStore(IMaterialConsumptionStore):
    """SQLite implementation of material consumption storage."""

    def __init__(self, conn: aiosqlite.Connection | None = None):
        self._conn = conn

    async def create_consumption(
        self, consumption: MaterialConsumption
    ) -> MaterialConsumption:
        consumption.created_at = datetime.now(UTC)
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute(
                """
                INSERT INTO material_consumptions (
                    material_id, quantity, reason, reason_description,
                    consumed_by, consumption_date, notes, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    consumption.material_id,
                    consumption.quantity,
                    consumption.reason.value,
                    consumption.reason_description,
                    consumption.consumed_by,
                    to_iso(consumption.consumption_date),
                    consumption.notes,
                    to_iso(consumption.created_at),
                ),
            )
            consumption.id = cursor.lastrowid
        return consumption

    async def get_consumption(self, consumption_id: int) -> MaterialConsumption | None:
        async with use_connection(self._conn) as conn:
            cursor = await conn.execute(
                "SELECT * FROM material_consumptions WHERE id = ?", (consumption_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_consumption(row) if row else None

    async def delete_consumption(self, consumption_id: int) -> bool:
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute(
                "DELETE FROM material_consumptions WHERE id = ?", (consumption_id,)
            )
            return cursor.rowcount > 0

    async def list_consumptions(
        self,
        material_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[MaterialConsumption], int]:
        where, params = _filters("consumption_date", material_id, start, end)
        async with use_connection(self._conn) as conn:
            total = await count(
                conn, f"SELECT COUNT(*) FROM material_consumptions {where}", tuple(params)
            )
            cursor = await conn.execute(
                f"""
                SELECT * FROM material_consumptions {where}
                ORDER BY consumption_date DESC, id DESC LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_consumption(r) for r in rows], total

    async def list_between(
        self, start: datetime, end: datetime
    ) -> list[MaterialConsumption]:
        where, params = _filters("consumption_date", None, start, end)
        async with use_connection(self._conn) as conn:
            cursor = await conn.execute(
                f"SELECT * FROM material_consumptions {where} ORDER BY consumption_date, id",
                tuple(params),
            )
            rows = await cursor.fetchall()
            return [self._row_to_consumption(r) for r in rows]

    @staticmethod
    def _row_to_consumption(row: aiosqlite.Row) -> MaterialConsumption:
        return MaterialConsumption(
            id=row["id"],
            material_id=row["material_id"],
            quantity=float(row["quantity"]),
            reason=ConsumptionReason(row["reason"]),
            reason_description=row["reason_description"],
            consumed_by=row["consumed_by"],
            consumption_date=parse_dt_or_now(row["consumption_date"]),
            notes=row["notes"],
            created_at=parse_dt_or_now(row["created_at"]),
        )
