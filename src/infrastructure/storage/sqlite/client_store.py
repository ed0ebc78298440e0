"""SQLite implementation of client storage."""

from datetime import UTC, datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.client import Client
from src.core.exceptions import ClientNotFoundError
from src.core.interfaces.catalog_store import IClientStore
from src.infrastructure.storage.sqlite.connection import use_connection, use_transaction
from src.infrastructure.storage.sqlite.rows import count, like_pattern, parse_dt_or_now, to_iso

logger = get_logger(__name__)


class SQLiteClientStore(IClientStore):
    """SQLite implementation of client storage."""

    def __init__(self, conn: aiosqlite.Connection | None = None):
        self._conn = conn

    async def create_client(self, client: Client) -> Client:
        now = datetime.now(UTC)
        client.created_at = now
        client.updated_at = now
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute(
                """
                INSERT INTO clients (name, email, phone, address, notes, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    client.name,
                    client.email,
                    client.phone,
                    client.address,
                    client.notes,
                    to_iso(client.created_at),
                    to_iso(client.updated_at),
                ),
            )
            client.id = cursor.lastrowid
        logger.info("client_created", client_id=client.id)
        return client

    async def get_client(self, client_id: int) -> Client | None:
        async with use_connection(self._conn) as conn:
            cursor = await conn.execute("SELECT * FROM clients WHERE id = ?", (client_id,))
            row = await cursor.fetchone()
            return self._row_to_client(row) if row else None

    async def update_client(self, client: Client) -> Client:
        client.updated_at = datetime.now(UTC)
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute(
                """
                UPDATE clients
                SET name = ?, email = ?, phone = ?, address = ?, notes = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    client.name,
                    client.email,
                    client.phone,
                    client.address,
                    client.notes,
                    to_iso(client.updated_at),
                    client.id,
                ),
            )
            if cursor.rowcount == 0:
                raise ClientNotFoundError(client.id)  # type: ignore[arg-type]
        return client

    async def delete_client(self, client_id: int) -> bool:
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute("DELETE FROM clients WHERE id = ?", (client_id,))
            return cursor.rowcount > 0

    async def list_clients(
        self, search: str | None = None, limit: int = 10, offset: int = 0
    ) -> tuple[list[Client], int]:
        where = ""
        params: tuple = ()
        if search:
            pattern = like_pattern(search)
            where = (
                "WHERE name LIKE ? ESCAPE '\\' OR email LIKE ? ESCAPE '\\' "
                "OR phone LIKE ? ESCAPE '\\'"
            )
            params = (pattern, pattern, pattern)

        async with use_connection(self._conn) as conn:
            total = await count(conn, f"SELECT COUNT(*) FROM clients {where}", params)
            cursor = await conn.execute(
                f"SELECT * FROM clients {where} ORDER BY name, id LIMIT ? OFFSET ?",
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_client(r) for r in rows], total

    @staticmethod
    def _row_to_client(row: aiosqlite.Row) -> Client:
        return Client(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            phone=row["phone"],
            address=row["address"],
            notes=row["notes"],
            created_at=parse_dt_or_now(row["created_at"]),
            updated_at=parse_dt_or_now(row["updated_at"]),
        )
