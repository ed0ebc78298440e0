"""
Shop ledger HTTP application.

Run with ``uvicorn src.api.main:app`` or ``python manage.py start``.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware, setup_exception_handlers
from src.api.routes import (
    auth_router,
    clients_router,
    health_router,
    material_consumptions_router,
    material_purchases_router,
    materials_router,
    products_router,
    sales_router,
)
from src.config import Settings, configure_logging, get_logger, get_settings
from src.config.settings import DEFAULT_SECRET_KEY
from src.core.exceptions import ConfigurationError

logger = get_logger(__name__)

ROUTERS = (
    health_router,
    auth_router,
    products_router,
    materials_router,
    clients_router,
    sales_router,
    material_purchases_router,
    material_consumptions_router,
)


def check_startup_settings(settings: Settings) -> None:
    """Refuse to serve production traffic with the placeholder signing key."""
    if settings.auth.secret_key != DEFAULT_SECRET_KEY:
        return
    if settings.environment == "production":
        raise ConfigurationError("AUTH_SECRET_KEY must be set in production")
    logger.warning("default_secret_key_in_use", environment=settings.environment)


async def prepare_database(settings: Settings) -> None:
    from src.infrastructure.storage.sqlite import get_pool
    from src.infrastructure.storage.sqlite.migrations.migrator import (
        get_migration_status,
        run_migrations,
    )

    if settings.storage.auto_migrate:
        results = await run_migrations()
        failed = [r.version for r in results if not r.success]
        if failed:
            raise ConfigurationError(f"Database migration failed: {', '.join(failed)}")
        logger.info("database_migrated", applied=len(results))
    else:
        status = await get_migration_status()
        if status["pending_migrations"]:
            logger.warning("database_has_pending_migrations", pending=status["pending_migrations"])

    await get_pool()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    settings = get_settings()
    check_startup_settings(settings)

    logger.info(
        "ledger_api_starting",
        environment=settings.environment,
        db_path=str(settings.storage.db_path),
    )
    await prepare_database(settings)
    logger.info("ledger_api_ready")

    try:
        yield
    finally:
        from src.infrastructure.storage.sqlite import close_pool

        await close_pool()
        logger.info("ledger_api_stopped")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Sales, product stock and material ledger",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Added last runs first: CORS wraps logging, which wraps the error envelope
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LoggingMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def root_health() -> dict[str, str]:
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("src.api.main:app", host=settings.api.host, port=settings.api.port)
