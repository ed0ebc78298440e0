"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "shop_ledger.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    # Write-lock acquisition for units of work
    lock_retries: int = 3
    lock_retry_delay: float = 0.2

    # Apply pending migrations when the API starts
    auto_migrate: bool = True

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class LedgerSettings(BaseSettings):
    """Sales and stock ledger configuration."""

    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    tax_rate: float = Field(default=0.15, ge=0.0, lt=1.0)
    default_payment_method: str = "cash"

    # Re-check stock before moving a pending sale to paid
    revalidate_stock_on_payment: bool = True


DEFAULT_SECRET_KEY = "change-me-in-production"


class AuthSettings(BaseSettings):
    """Token and account configuration."""

    model_config = SettingsConfigDict(env_prefix="AUTH_")

    secret_key: str = DEFAULT_SECRET_KEY
    token_ttl_minutes: int = 60 * 24 * 7
    verification_ttl_hours: int = 24
    reset_ttl_minutes: int = 10
    min_password_length: int = 6


class EmailSettings(BaseSettings):
    """Outgoing email configuration."""

    model_config = SettingsConfigDict(env_prefix="EMAIL_")

    provider: Literal["console", "http"] = "console"
    api_url: str = "https://api.resend.com/emails"
    api_key: str | None = None
    sender: str = "no-reply@shop-ledger.local"
    frontend_url: str = "http://localhost:5173"
    timeout: int = 15


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]

    # Listing
    default_page_size: int = 10
    max_page_size: int = 100


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Shop Ledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
