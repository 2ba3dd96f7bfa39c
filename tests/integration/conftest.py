"""
Shared fixtures for database-backed tests.

Requires PostgreSQL to be running (DATABASE_URL, see src/config/settings.py).
Tests using these fixtures are skipped when the database is unreachable.
"""

from collections.abc import Generator

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository import run_migrations
from src.config.settings import get_settings


def open_test_pool() -> ConnectionPool:
    """Open a migrated pool, or skip the calling tests if PostgreSQL is down."""
    settings = get_settings()
    try:
        psycopg.connect(settings.database_url, connect_timeout=3).close()
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL not available: {e}")

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    run_migrations(pool)
    return pool


def truncate_tables(pool: ConnectionPool) -> None:
    with pool.connection() as conn:
        conn.execute("DELETE FROM audit_log")
        conn.execute("DELETE FROM users")
        conn.execute("DELETE FROM registration_requests")


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests."""
    pool = open_test_pool()
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean all tables before each test."""
    truncate_tables(pool)
    yield
