"""Repository adapters - Database implementations."""

from .accounts import PostgresAccountStore
from .audit import PostgresAuditLog
from .postgres import (
    PostgresRegistrationRequestRepository,
    PostgresTransactionManager,
    run_migrations,
)

__all__ = [
    "PostgresAccountStore",
    "PostgresAuditLog",
    "PostgresRegistrationRequestRepository",
    "PostgresTransactionManager",
    "run_migrations",
]
