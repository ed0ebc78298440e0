"""SQLite implementation of sale storage."""

from datetime import UTC, datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.sale import (
    MaterialUsage,
    PaymentMethod,
    PaymentStatus,
    Sale,
    SaleItem,
    SaleStatus,
)
from src.core.exceptions import SaleNotFoundError
from src.core.interfaces.sale_store import ISaleStore
from src.infrastructure.storage.sqlite.connection import use_connection, use_transaction
from src.infrastructure.storage.sqlite.rows import count, parse_dt, parse_dt_or_now, to_iso

logger = get_logger(__name__)


class SQLiteSaleStore(ISaleStore):
    """SQLite implementation of sale storage (sales, sale_items, sale_item_materials)."""

    def __init__(self, conn: aiosqlite.Connection | None = None):
        self._conn = conn

    async def create_sale(self, sale: Sale) -> Sale:
        """Create a sale with all its items and material usages."""
        sale.created_at = datetime.now(UTC)
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute(
                """
                INSERT INTO sales (
                    client_id, seller_id, total_amount, total_cost,
                    materials_cost, gross_profit, net_profit,
                    payment_method, payment_status, paid_at, status,
                    sale_date, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    sale.client_id,
                    sale.seller_id,
                    sale.total_amount,
                    sale.total_cost,
                    sale.materials_cost,
                    sale.gross_profit,
                    sale.net_profit,
                    sale.payment_method.value,
                    sale.payment_status.value,
                    to_iso(sale.paid_at),
                    sale.status.value,
                    to_iso(sale.sale_date),
                    to_iso(sale.created_at),
                ),
            )
            sale.id = cursor.lastrowid

            for item in sale.items:
                item.sale_id = sale.id
                item_cursor = await conn.execute(
                    """
                    INSERT INTO sale_items (
                        sale_id, product_id, quantity, unit_price, subtotal, cost
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        item.sale_id,
                        item.product_id,
                        item.quantity,
                        item.unit_price,
                        item.subtotal,
                        item.cost,
                    ),
                )
                item.id = item_cursor.lastrowid

                for usage in item.materials_used:
                    await conn.execute(
                        """
                        INSERT INTO sale_item_materials (sale_item_id, material_id, quantity, cost)
                        VALUES (?, ?, ?, ?)
                        """,
                        (item.id, usage.material_id, usage.quantity, usage.cost),
                    )

        logger.info(
            "sale_stored",
            sale_id=sale.id,
            items=len(sale.items),
            total=sale.total_amount,
        )
        return sale

    async def get_sale(self, sale_id: int) -> Sale | None:
        """Get sale by ID with items."""
        async with use_connection(self._conn) as conn:
            cursor = await conn.execute("SELECT * FROM sales WHERE id = ?", (sale_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            items = await self._load_items(conn, [sale_id])
            return self._row_to_sale(row, items.get(sale_id, []))

    async def update_payment(self, sale: Sale) -> Sale:
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute(
                """
                UPDATE sales SET payment_status = ?, payment_method = ?, paid_at = ?
                WHERE id = ?
                """,
                (
                    sale.payment_status.value,
                    sale.payment_method.value,
                    to_iso(sale.paid_at),
                    sale.id,
                ),
            )
            if cursor.rowcount == 0:
                raise SaleNotFoundError(sale.id)  # type: ignore[arg-type]
        return sale

    async def list_sales(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Sale], int]:
        """List sales with pagination, newest first."""
        conditions: list[str] = []
        params: list = []
        if start:
            conditions.append("sale_date >= ?")
            params.append(to_iso(start))
        if end:
            conditions.append("sale_date <= ?")
            params.append(to_iso(end))
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        async with use_connection(self._conn) as conn:
            total = await count(conn, f"SELECT COUNT(*) FROM sales {where}", tuple(params))
            cursor = await conn.execute(
                f"SELECT * FROM sales {where} ORDER BY sale_date DESC, id DESC LIMIT ? OFFSET ?",
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            items = await self._load_items(conn, [r["id"] for r in rows])
            return [self._row_to_sale(r, items.get(r["id"], [])) for r in rows], total

    async def list_sales_for_client(self, client_id: int) -> list[Sale]:
        async with use_connection(self._conn) as conn:
            cursor = await conn.execute(
                "SELECT * FROM sales WHERE client_id = ? ORDER BY sale_date DESC, id DESC",
                (client_id,),
            )
            rows = await cursor.fetchall()
            items = await self._load_items(conn, [r["id"] for r in rows])
            return [self._row_to_sale(r, items.get(r["id"], [])) for r in rows]

    async def list_paid_completed(self, start: datetime, end: datetime) -> list[Sale]:
        async with use_connection(self._conn) as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM sales
                WHERE payment_status = ? AND status = ?
                  AND sale_date >= ? AND sale_date <= ?
                ORDER BY sale_date, id
                """,
                (
                    PaymentStatus.PAID.value,
                    SaleStatus.COMPLETED.value,
                    to_iso(start),
                    to_iso(end),
                ),
            )
            rows = await cursor.fetchall()
            items = await self._load_items(conn, [r["id"] for r in rows])
            return [self._row_to_sale(r, items.get(r["id"], [])) for r in rows]

    async def _load_items(
        self, conn: aiosqlite.Connection, sale_ids: list[int]
    ) -> dict[int, list[SaleItem]]:
        """Load items and their material usages for several sales at once."""
        if not sale_ids:
            return {}
        placeholders = ",".join("?" for _ in sale_ids)

        cursor = await conn.execute(
            f"SELECT * FROM sale_items WHERE sale_id IN ({placeholders}) ORDER BY id",
            tuple(sale_ids),
        )
        item_rows = await cursor.fetchall()

        usages: dict[int, list[MaterialUsage]] = {}
        item_ids = [r["id"] for r in item_rows]
        if item_ids:
            item_placeholders = ",".join("?" for _ in item_ids)
            usage_cursor = await conn.execute(
                f"""
                SELECT * FROM sale_item_materials
                WHERE sale_item_id IN ({item_placeholders})
                ORDER BY id
                """,
                tuple(item_ids),
            )
            for r in await usage_cursor.fetchall():
                usages.setdefault(r["sale_item_id"], []).append(
                    MaterialUsage(
                        material_id=r["material_id"],
                        quantity=float(r["quantity"]),
                        cost=float(r["cost"]),
                    )
                )

        items: dict[int, list[SaleItem]] = {}
        for r in item_rows:
            items.setdefault(r["sale_id"], []).append(
                SaleItem(
                    id=r["id"],
                    sale_id=r["sale_id"],
                    product_id=r["product_id"],
                    quantity=int(r["quantity"]),
                    unit_price=float(r["unit_price"]),
                    subtotal=float(r["subtotal"]),
                    cost=float(r["cost"]),
                    materials_used=usages.get(r["id"], []),
                )
            )
        return items

    @staticmethod
    def _row_to_sale(row: aiosqlite.Row, items: list[SaleItem]) -> Sale:
        """Convert a database row to a Sale entity."""
        return Sale(
            id=row["id"],
            client_id=row["client_id"],
            seller_id=row["seller_id"],
            items=items,
            total_amount=float(row["total_amount"]),
            total_cost=float(row["total_cost"]),
            materials_cost=float(row["materials_cost"]),
            gross_profit=float(row["gross_profit"]),
            net_profit=float(row["net_profit"]),
            payment_method=PaymentMethod(row["payment_method"]),
            payment_status=PaymentStatus(row["payment_status"]),
            paid_at=parse_dt(row["paid_at"]),
            status=SaleStatus(row["status"]),
            sale_date=parse_dt_or_now(row["sale_date"]),
            created_at=parse_dt_or_now(row["created_at"]),
        )
