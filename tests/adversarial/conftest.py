"""
Shared fixtures for adversarial tests.

Provides a migrated connection pool and workflows wired to PostgreSQL.
"""

from collections.abc import Callable, Generator

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository import (
    PostgresAccountStore,
    PostgresAuditLog,
    PostgresRegistrationRequestRepository,
    PostgresTransactionManager,
    run_migrations,
)
from src.config.settings import get_settings
from src.domain.passwords import BcryptPasswordHasher
from src.domain.provisioning import AccountProvisioner
from src.domain.registration import RegistrationWorkflow

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for adversarial tests."""
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
    yield pool
    pool.close()


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean all tables before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM audit_log")
        conn.execute("DELETE FROM users")
        conn.execute("DELETE FROM registration_requests")
    yield


@pytest.fixture
def workflow_factory(
    pool: ConnectionPool, hasher: BcryptPasswordHasher
) -> Callable[[], RegistrationWorkflow]:
    """Build a workflow wired to PostgreSQL, one per simulated client."""

    def build() -> RegistrationWorkflow:
        accounts = PostgresAccountStore(hasher)
        return RegistrationWorkflow(
            transactions=PostgresTransactionManager(pool),
            requests=PostgresRegistrationRequestRepository(),
            accounts=accounts,
            provisioner=AccountProvisioner(accounts=accounts, audit_log=PostgresAuditLog()),
            password_hasher=hasher,
        )

    return build
