"""
Versioned SQL migrations for the ledger database.

Migration files live next to this module and are named ``v<NNN>_<name>.sql``.
Each applied file is recorded in ``schema_migrations`` with a checksum; an
applied file that later changes blocks the run, since the stock tables it
created may no longer match what the code expects.

Before migrating an existing database a copy is taken and restored if the
run raises. ``verify_schema_integrity`` also checks the stock columns, so a
restored or hand-edited database can be audited from the CLI:

    python -m src.infrastructure.storage.sqlite.migrations.migrator --verify
"""

import asyncio
import hashlib
import re
import shutil
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import aiosqlite

from src.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_FILENAME = re.compile(r"v(\d+)_(.+)\.sql")

REQUIRED_TABLES = [
    "users",
    "clients",
    "products",
    "materials",
    "sales",
    "sale_items",
    "sale_item_materials",
    "material_purchases",
    "material_consumptions",
    "schema_migrations",
]

# Stock columns that must never hold a negative value
STOCK_COLUMNS = [
    ("products", "stock"),
    ("materials", "quantity_in_stock"),
]


@dataclass
class MigrationInfo:
    """One migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.match(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_text(encoding="utf-8").encode()).hexdigest()
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=digest[:16])


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


@dataclass
class MigrationPlan:
    """What a run would do given the files on disk and the recorded versions."""

    pending: list[MigrationInfo] = field(default_factory=list)
    drifted: list[str] = field(default_factory=list)

    @property
    def blocked(self) -> bool:
        return bool(self.drifted)


def discover_migrations() -> list[MigrationInfo]:
    """Migration files sorted by version; misnamed files are skipped."""
    found = []
    for path in sorted(MIGRATIONS_DIR.glob("v*.sql")):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return found


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Recorded versions mapped to their checksums (empty on a fresh database)."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
    except aiosqlite.OperationalError:
        return {}
    return {version: checksum for version, checksum in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied) if applied else None


def plan_migrations(
    discovered: list[MigrationInfo], applied: dict[str, str]
) -> MigrationPlan:
    """
    Split discovered files into pending ones and applied ones whose file changed.

    Pending files after the first drifted version are not scheduled.
    """
    plan = MigrationPlan()
    for migration in discovered:
        recorded = applied.get(migration.version)
        if recorded is None:
            if not plan.blocked:
                plan.pending.append(migration)
        elif recorded != migration.checksum:
            plan.drifted.append(migration.version)
    return plan


async def apply_migration(
    conn: aiosqlite.Connection, migration: MigrationInfo
) -> MigrationResult:
    """Run one migration script and record it."""
    logger.info("applying_migration", version=migration.version, name=migration.name)
    started = time.perf_counter()

    def elapsed_ms() -> int:
        return int((time.perf_counter() - started) * 1000)

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            """
            INSERT OR REPLACE INTO schema_migrations (version, name, checksum, execution_time_ms)
            VALUES (?, ?, ?, ?)
            """,
            (migration.version, migration.name, migration.checksum, elapsed_ms()),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(
            migration.version, migration.name, False, elapsed_ms(), error=str(e)
        )

    logger.info("migration_applied", version=migration.version, execution_time_ms=elapsed_ms())
    return MigrationResult(migration.version, migration.name, True, elapsed_ms())


async def _foreign_key_violations(conn: aiosqlite.Connection) -> int:
    cursor = await conn.execute("PRAGMA foreign_key_check")
    return len(await cursor.fetchall())


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside before migrating it."""
    backup_path = db_path.with_suffix(f".backup_{datetime.now():%Y%m%d_%H%M%S}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.info("database_restored_from_backup", backup_path=str(backup_path))


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply every pending migration, stopping at the first failure.

    Args:
        db_path: Database file (defaults to the configured one)
        create_backup_before: Copy an existing database aside first

    Returns:
        One result per attempted migration. Empty when nothing was pending
        or an applied migration's file has changed.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    backup_path = create_backup(db_path) if create_backup_before and db_path.exists() else None
    results: list[MigrationResult] = []

    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")

            plan = plan_migrations(discover_migrations(), await get_applied_migrations(conn))
            if plan.blocked:
                logger.error("migration_checksum_changed", versions=plan.drifted)
                return results

            for migration in plan.pending:
                result = await apply_migration(conn, migration)
                results.append(result)
                if not result.success:
                    break
                violations = await _foreign_key_violations(conn)
                if violations:
                    logger.error(
                        "foreign_key_violations_after_migration",
                        version=migration.version,
                        violations=violations,
                    )
                    break
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path and backup_path.exists():
            restore_backup(db_path, backup_path)
        raise

    if backup_path and all(r.success for r in results):
        backup_path.unlink()
        logger.info("backup_cleaned_up")
    return results


# Alias used by the API lifespan
run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)

    plan = plan_migrations(discovered, applied)
    return {
        "exists": True,
        "current_version": max(applied) if applied else None,
        "applied_migrations": sorted(applied),
        "pending_migrations": [m.version for m in plan.pending],
        "changed_migrations": plan.drifted,
        "total_migrations": len(discovered),
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    Audit a database: SQLite integrity, foreign keys, required tables and
    the stock columns.
    """
    db_path = db_path or get_settings().storage.db_path
    checks: list[dict] = []

    async with aiosqlite.connect(db_path) as conn:
        violations = await _foreign_key_violations(conn)
        checks.append({
            "check": "foreign_keys",
            "status": "PASS" if not violations else "FAIL",
            "violations": violations,
        })

        cursor = await conn.execute("PRAGMA integrity_check")
        (integrity,) = await cursor.fetchone()
        checks.append({
            "check": "integrity",
            "status": "PASS" if integrity == "ok" else "FAIL",
            "result": integrity,
        })

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in tables]
        checks.append({
            "check": "required_tables",
            "status": "PASS" if not missing else "FAIL",
            "missing": missing,
        })

        negative: dict[str, int] = {}
        for table, column in STOCK_COLUMNS:
            if table not in tables:
                continue
            cursor = await conn.execute(f"SELECT COUNT(*) FROM {table} WHERE {column} < 0")
            (count,) = await cursor.fetchone()
            if count:
                negative[table] = count
        checks.append({
            "check": "non_negative_stock",
            "status": "PASS" if not negative else "FAIL",
            "negative_rows": negative,
        })

        orphans = 0
        if {"sale_items", "sales"} <= tables:
            cursor = await conn.execute(
                """
                SELECT COUNT(*) FROM sale_items
                WHERE sale_id NOT IN (SELECT id FROM sales)
                """
            )
            (orphans,) = await cursor.fetchone()
        checks.append({
            "check": "orphan_sale_items",
            "status": "PASS" if not orphans else "FAIL",
            "orphans": orphans,
        })

    return checks


def main() -> None:
    """CLI: migrate (default), ``--status`` or ``--verify``."""
    import argparse

    parser = argparse.ArgumentParser(description="Shop ledger database migrations")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    parser.add_argument("--status", action="store_true", help="Show applied and pending versions")
    parser.add_argument("--verify", action="store_true", help="Audit schema and stock columns")
    parser.add_argument("--no-backup", action="store_true", help="Skip the pre-migration copy")
    args = parser.parse_args()

    async def run() -> int:
        if args.status:
            status = await get_migration_status(args.db_path)
            for key, value in status.items():
                print(f"{key}: {value}")
            return 0

        if args.verify:
            checks = await verify_schema_integrity(args.db_path)
            for check in checks:
                extra = {k: v for k, v in check.items() if k not in ("check", "status")}
                print(f"[{check['status']}] {check['check']} {extra}")
            return 0 if all(c["status"] == "PASS" for c in checks) else 1

        results = await initialize_database(args.db_path, create_backup_before=not args.no_backup)
        if not results:
            print("Nothing to apply")
        for result in results:
            outcome = "OK" if result.success else "FAILED"
            print(f"[{outcome}] v{result.version} {result.name} ({result.execution_time_ms}ms)")
            if result.error:
                print(f"    {result.error}")
        return 0 if all(r.success for r in results) else 1

    raise SystemExit(asyncio.run(run()))


if __name__ == "__main__":
    main()
