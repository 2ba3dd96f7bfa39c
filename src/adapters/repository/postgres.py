"""
PostgreSQL repository adapter - Implements RegistrationRequestRepository protocol.

This module provides the PostgreSQL implementation of the domain's
registration request port, the unit-of-work boundary and the migration
runner, using psycopg3 with raw SQL.

Concurrency Design:
-------------------
1. **Pending uniqueness**: A partial unique index on
   registration_requests(username) WHERE status = 'PENDING' refuses a second
   pending request. create() inserts with ON CONFLICT DO NOTHING so the loser
   of a concurrent submission gets None instead of an aborted transaction.

2. **Decisions**: get_by_id(for_update=True) issues SELECT ... FOR UPDATE.
   A second administrator deciding the same request blocks until the first
   transaction ends, then observes the terminal status.

3. **Transactions**: PostgresTransactionManager hands out pooled connections.
   psycopg_pool commits when the block exits normally and rolls back when it
   raises.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

from psycopg import Connection
from psycopg_pool import ConnectionPool

from src.domain.ports import RegistrationRequest, RegistrationStatus

logger = logging.getLogger(__name__)

_REQUEST_COLUMNS = "id, username, password_hash, email, create_date, status"


def _row_to_request(row: tuple) -> RegistrationRequest:
    return RegistrationRequest(
        id=row[0],
        username=row[1],
        password_hash=row[2],
        email=row[3],
        create_date=row[4],
        status=RegistrationStatus(row[5]),
    )


class PostgresTransactionManager:
    """
    Implements TransactionManager protocol via a psycopg3 connection pool.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize transaction manager with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Yield a pooled connection; commit on success, roll back on error."""
        with self._pool.connection() as conn:
            yield conn


class PostgresRegistrationRequestRepository:
    """
    Implements RegistrationRequestRepository protocol via psycopg3.

    Stateless: every method runs on the connection of the caller's unit of
    work. All SQL uses parameterized queries for security.
    """

    def create(self, conn: Connection, request: RegistrationRequest) -> str | None:
        """
        Insert a registration request.

        Assigns id and create_date when absent.

        Args:
            conn: Connection of the current unit of work
            request: Request to persist (password already hashed)

        Returns:
            The request id, or None if another PENDING request for the same
            username already exists
        """
        if request.id is None:
            request.id = str(uuid.uuid4())
        if request.create_date is None:
            request.create_date = datetime.now(UTC)

        sql = """
            INSERT INTO registration_requests (id, username, password_hash, email, create_date, status)
            VALUES (%s, %s, %s, %s, %s, %s)
            ON CONFLICT (username) WHERE status = 'PENDING' DO NOTHING
        """

        with conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    request.id,
                    request.username,
                    request.password_hash,
                    request.email,
                    request.create_date,
                    request.status.value,
                ),
            )
            if cursor.rowcount != 1:
                logger.info("Pending request already exists for %s", request.username)
                return None
        return request.id

    def get_by_id(
        self, conn: Connection, request_id: str, for_update: bool = False
    ) -> RegistrationRequest | None:
        sql = f"SELECT {_REQUEST_COLUMNS} FROM registration_requests WHERE id = %s"
        if for_update:
            sql += " FOR UPDATE"

        with conn.cursor() as cursor:
            cursor.execute(sql, (request_id,))
            row = cursor.fetchone()
        return _row_to_request(row) if row is not None else None

    def get_by_username(self, conn: Connection, username: str) -> RegistrationRequest | None:
        """
        Fetch the latest request for a username.

        Ordering by create_date then id keeps the result deterministic when
        several historical requests share the username.
        """
        sql = f"""
            SELECT {_REQUEST_COLUMNS}
            FROM registration_requests
            WHERE username = %s
            ORDER BY create_date DESC, id DESC
            LIMIT 1
        """

        with conn.cursor() as cursor:
            cursor.execute(sql, (username,))
            row = cursor.fetchone()
        return _row_to_request(row) if row is not None else None

    def find_all_pending(self, conn: Connection) -> list[RegistrationRequest]:
        sql = f"""
            SELECT {_REQUEST_COLUMNS}
            FROM registration_requests
            WHERE status = %s
            ORDER BY create_date DESC, id DESC
        """

        with conn.cursor() as cursor:
            cursor.execute(sql, (RegistrationStatus.PENDING.value,))
            rows = cursor.fetchall()
        return [_row_to_request(row) for row in rows]

    def update_status(
        self, conn: Connection, request_id: str, status: RegistrationStatus
    ) -> None:
        # Matching no row is the documented no-op for unknown ids.
        conn.execute(
            "UPDATE registration_requests SET status = %s WHERE id = %s",
            (status.value, request_id),
        )

    def delete(self, conn: Connection, request_id: str) -> None:
        conn.execute("DELETE FROM registration_requests WHERE id = %s", (request_id,))


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
