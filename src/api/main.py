"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures logging, exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository import (
    PostgresAuditLog,
    PostgresTransactionManager,
    run_migrations,
)
from src.api.dependencies import get_account_store, get_password_hasher
from src.api.errors import register_exception_handlers
from src.api.v1 import router as v1_router
from src.config.settings import Settings, get_settings
from src.domain.provisioning import AccountProvisioner

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Gated Registration API v1 - Submit, review and decide registration requests",
    },
]


def bootstrap_admin(pool: ConnectionPool, settings: Settings) -> None:
    """Create the configured administrator account if it does not exist yet."""
    if not settings.admin_password:
        logger.info("No administrator password configured, skipping bootstrap")
        return

    hasher = get_password_hasher()
    provisioner = AccountProvisioner(
        accounts=get_account_store(hasher),
        audit_log=PostgresAuditLog(),
        storage_quota=settings.default_storage_quota,
    )
    with PostgresTransactionManager(pool).transaction() as conn:
        provisioner.provision_admin(
            conn,
            username=settings.admin_username,
            password_hash=hasher.hash(settings.admin_password),
            email=settings.admin_email,
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool on startup
    - Runs migrations and administrator bootstrap on startup
    - Closes connection pool on shutdown
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    # Create connection pool with explicit sizing
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )

    logger.info("Running database migrations...")
    run_migrations(pool)
    bootstrap_admin(pool, settings)

    # Store pool in app state for dependency injection
    app.state.pool = pool

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    pool.close()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="docs-registration",
    description="Gated self-registration for the document management service",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

register_exception_handlers(app)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    pool = request.app.state.pool
    with pool.connection() as conn:
        conn.execute("SELECT 1")

    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
