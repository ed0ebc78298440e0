"""Versioned schema migrations for the ledger database."""

from src.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    MigrationInfo,
    MigrationPlan,
    MigrationResult,
    initialize_database,
    plan_migrations,
    run_migrations,
    verify_schema_integrity,
)

__all__ = [
    "REQUIRED_TABLES",
    "MigrationInfo",
    "MigrationPlan",
    "MigrationResult",
    "initialize_database",
    "plan_migrations",
    "run_migrations",
    "verify_schema_integrity",
]
