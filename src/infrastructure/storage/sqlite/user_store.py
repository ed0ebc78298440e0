"""SQLite implementation of user account storage."""

from datetime import UTC, datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.user import User, UserRole
from src.core.exceptions import DuplicateEmailError, UserNotFoundError
from src.core.interfaces.user_store import IUserStore
from src.infrastructure.storage.sqlite.connection import use_connection, use_transaction
from src.infrastructure.storage.sqlite.rows import (
    count,
    like_pattern,
    parse_dt,
    parse_dt_or_now,
    to_iso,
)

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class SQLiteUserStore(IUserStore):
    """SQLite implementation of user storage. Emails are unique case-insensitively."""

    def __init__(self, conn: aiosqlite.Connection | None = None):
        self._conn = conn

    async def create_user(self, user: User) -> User:
        user.email = normalize_email(user.email)
        user.created_at = datetime.now(UTC)
        try:
            async with use_transaction(self._conn) as conn:
                cursor = await conn.execute(
                    """
                    INSERT INTO users (
                        name, email, password_hash, role, phone, email_verified,
                        verification_token_hash, verification_expires_at,
                        reset_token_hash, reset_expires_at, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    self._params(user) + (to_iso(user.created_at),),
                )
                user.id = cursor.lastrowid
        except aiosqlite.IntegrityError as e:
            raise DuplicateEmailError(user.email) from e
        logger.info("user_created", user_id=user.id, role=user.role.value)
        return user

    async def get_user(self, user_id: int) -> User | None:
        return await self._fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))

    async def get_user_by_email(self, email: str) -> User | None:
        return await self._fetch_one(
            "SELECT * FROM users WHERE email = ? COLLATE NOCASE", (normalize_email(email),)
        )

    async def get_user_by_verification_token(self, token_hash: str) -> User | None:
        return await self._fetch_one(
            "SELECT * FROM users WHERE verification_token_hash = ?", (token_hash,)
        )

    async def get_user_by_reset_token(self, token_hash: str) -> User | None:
        return await self._fetch_one(
            "SELECT * FROM users WHERE reset_token_hash = ?", (token_hash,)
        )

    async def update_user(self, user: User) -> User:
        async with use_transaction(self._conn) as conn:
            cursor = await conn.execute(
                """
                UPDATE users
                SET name = ?, email = ?, password_hash = ?, role = ?, phone = ?,
                    email_verified = ?, verification_token_hash = ?,
                    verification_expires_at = ?, reset_token_hash = ?,
                    reset_expires_at = ?
                WHERE id = ?
                """,
                self._params(user) + (user.id,),
            )
            if cursor.rowcount == 0:
                raise UserNotFoundError(user.id)  # type: ignore[arg-type]
        return user

    async def list_users(
        self,
        search: str | None = None,
        role: UserRole | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[User], int]:
        clauses: list[str] = []
        params: list = []
        if search:
            pattern = like_pattern(search)
            clauses.append(
                "(name LIKE ? ESCAPE '\\' OR email LIKE ? ESCAPE '\\' OR phone LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern, pattern])
        if role is not None:
            clauses.append("role = ?")
            params.append(role.value)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        async with use_connection(self._conn) as conn:
            total = await count(conn, f"SELECT COUNT(*) FROM users {where}", tuple(params))
            cursor = await conn.execute(
                f"SELECT * FROM users {where} ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
        return [self._row_to_user(row) for row in rows], total

    async def _fetch_one(self, sql: str, params: tuple) -> User | None:
        async with use_connection(self._conn) as conn:
            cursor = await conn.execute(sql, params)
            row = await cursor.fetchone()
            return self._row_to_user(row) if row else None

    @staticmethod
    def _params(user: User) -> tuple:
        return (
            user.name,
            normalize_email(user.email),
            user.password_hash,
            user.role.value,
            user.phone,
            int(user.email_verified),
            user.verification_token_hash,
            to_iso(user.verification_expires_at),
            user.reset_token_hash,
            to_iso(user.reset_expires_at),
        )

    @staticmethod
    def _row_to_user(row: aiosqlite.Row) -> User:
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password_hash=row["password_hash"],
            role=UserRole(row["role"]),
            phone=row["phone"],
            email_verified=bool(row["email_verified"]),
            verification_token_hash=row["verification_token_hash"],
            verification_expires_at=parse_dt(row["verification_expires_at"]),
            reset_token_hash=row["reset_token_hash"],
            reset_expires_at=parse_dt(row["reset_expires_at"]),
            created_at=parse_dt_or_now(row["created_at"]),
        )
