"""SQLite implementation of product storage."""

from datetime import UTC, datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.product import Product
from src.core.exceptions import ProductNotFoundError
from src.core.interfaces.catalog_store import IProductStore
from src.infrastructure.storage.sqlite.connection import use_connection, use_transaction
from src.infrastructure.storage.sqlite.rows import count, like_pattern, parse_dt_or_now, to_iso

logger = get_logger(__name__)


class SQLiteProductStore(IProductStore):
    """
    SQLite implementation of product storage.

    Pass ``conn`` to run every call on a connection owned by a unit of work.
    """

    def __init__(self, conn: aiosqlite.Connection | None = None):
        self._conn = conn

    async def create_product(self, product: Product) -> Product:
        now = datetime.now(UTC)
        product.created_at = now
        product.updated_at = now
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute(
                """
                INSERT INTO products (
                    name, description, price, cost_price, stock,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    product.name,
                    product.description,
                    product.price,
                    product.cost_price,
                    product.stock,
                    to_iso(product.created_at),
                    to_iso(product.updated_at),
                ),
            )
            product.id = cursor.lastrowid
        logger.info("product_created", product_id=product.id, name=product.name)
        return product

    async def get_product(self, product_id: int) -> Product | None:
        async with use_connection(self._conn) as conn:
            cursor = await conn.execute("SELECT * FROM products WHERE id = ?", (product_id,))
            row = await cursor.fetchone()
            return self._row_to_product(row) if row else None

    async def update_product(self, product: Product) -> Product:
        """Write the descriptive and price columns. ``stock`` moves only via ``set_stock``."""
        product.updated_at = datetime.now(UTC)
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute(
                """
                UPDATE products
                SET name = ?, description = ?, price = ?, cost_price = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    product.name,
                    product.description,
                    product.price,
                    product.cost_price,
                    to_iso(product.updated_at),
                    product.id,
                ),
            )
            if cursor.rowcount == 0:
                raise ProductNotFoundError(product.id)  # type: ignore[arg-type]
        return product

    async def delete_product(self, product_id: int) -> bool:
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute("DELETE FROM products WHERE id = ?", (product_id,))
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("product_deleted", product_id=product_id)
        return deleted

    async def set_stock(self, product_id: int, stock: int) -> None:
        async with use_transaction(self._conn) as conn:
            await conn.execute(
                "UPDATE products SET stock = ?, updated_at = ? WHERE id = ?",
                (stock, to_iso(datetime.now(UTC)), product_id),
            )

    async def list_products(
        self, search: str | None = None, limit: int = 10, offset: int = 0
    ) -> tuple[list[Product], int]:
        where = ""
        params: tuple = ()
        if search:
            where = "WHERE name LIKE ? ESCAPE '\\' OR description LIKE ? ESCAPE '\\'"
            pattern = like_pattern(search)
            params = (pattern, pattern)

        async with use_connection(self._conn) as conn:
            total = await count(conn, f"SELECT COUNT(*) FROM products {where}", params)
            cursor = await conn.execute(
                f"SELECT * FROM products {where} ORDER BY name, id LIMIT ? OFFSET ?",
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_product(r) for r in rows], total

    @staticmethod
    def _row_to_product(row: aiosqlite.Row) -> Product:
        return Product(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            price=float(row["price"]),
            cost_price=float(row["cost_price"]),
            stock=int(row["stock"]),
            created_at=parse_dt_or_now(row["created_at"]),
            updated_at=parse_dt_or_now(row["updated_at"]),
        )
