"""Tests for application startup checks."""

import pytest

from src.api.main import check_startup_settings, prepare_database
from src.config import get_settings
from src.config.settings import DEFAULT_SECRET_KEY
from src.core.exceptions import ConfigurationError
from src.infrastructure.storage.sqlite import close_pool
from src.infrastructure.storage.sqlite.migrations.migrator import get_migration_status


class TestStartupSettings:
    def test_production_rejects_placeholder_key(self, monkeypatch: pytest.MonkeyPatch):
        settings = get_settings()
        monkeypatch.setattr(settings, "environment", "production")
        monkeypatch.setattr(settings.auth, "secret_key", DEFAULT_SECRET_KEY)

        with pytest.raises(ConfigurationError, match="AUTH_SECRET_KEY"):
            check_startup_settings(settings)

    def test_development_allows_placeholder_key(self, monkeypatch: pytest.MonkeyPatch):
        settings = get_settings()
        monkeypatch.setattr(settings.auth, "secret_key", DEFAULT_SECRET_KEY)

        check_startup_settings(settings)

    def test_configured_key_passes_in_production(self, monkeypatch: pytest.MonkeyPatch):
        settings = get_settings()
        monkeypatch.setattr(settings, "environment", "production")

        check_startup_settings(settings)


class TestPrepareDatabase:
    async def test_migrates_when_enabled(self):
        try:
            await prepare_database(get_settings())
        finally:
            await close_pool()

        status = await get_migration_status()
        assert status["pending_migrations"] == []

    async def test_leaves_schema_alone_when_disabled(self, monkeypatch: pytest.MonkeyPatch):
        settings = get_settings()
        monkeypatch.setattr(settings.storage, "auto_migrate", False)

        try:
            await prepare_database(settings)
        finally:
            await close_pool()

        status = await get_migration_status()
        assert status["applied_migrations"] == []
        assert status["pending_migrations"]
