"""Fixtures for flows that run against a migrated SQLite database."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from src.config import get_settings
from src.infrastructure.storage.sqlite import close_pool
from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture
async def migrated_db() -> AsyncGenerator[Path, None]:
    await initialize_database(create_backup_before=False)
    yield get_settings().storage.db_path
    await close_pool()
