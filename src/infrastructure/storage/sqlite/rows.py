"""Row conversion helpers shared by the SQLite stores."""

from datetime import UTC, datetime

import aiosqlite


def to_iso(value: datetime | None) -> str | None:
    """Store timestamps as UTC ISO strings so they compare lexically."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def parse_dt(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_dt_or_now(value: str | None) -> datetime:
    return parse_dt(value) or datetime.now(UTC)


def like_pattern(search: str) -> str:
    """Case-insensitive substring pattern; LIKE wildcards in ``search`` are literal."""
    escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def count(conn: aiosqlite.Connection, sql: str, params: tuple = ()) -> int:
    cursor = await conn.execute(sql, params)
    row = await cursor.fetchone()
    return int(row[0]) if row else 0
