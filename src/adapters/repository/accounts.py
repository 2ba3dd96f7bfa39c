"""
PostgreSQL account store adapter - Implements AccountStore protocol.

Security Design - Timing Oracle Prevention:
------------------------------------------
authenticate() always runs one bcrypt comparison. When the username is
unknown it compares against a dummy hash made by the same hasher, so both
paths pay the same bcrypt cost and response time does not reveal whether an
account exists.
"""

from psycopg import Connection

from src.domain.ports import Account, PasswordHasher

_DUMMY_PASSWORD = "dummy_password_for_timing_safety"

_ACCOUNT_COLUMNS = (
    "id, username, password_hash, email, role_id, private_key, storage_quota, "
    "create_date, storage_current, onboarding, deleted_date"
)


def _row_to_account(row: tuple) -> Account:
    return Account(
        id=row[0],
        username=row[1],
        password_hash=row[2],
        email=row[3],
        role_id=row[4],
        private_key=row[5],
        storage_quota=row[6],
        create_date=row[7],
        storage_current=row[8],
        onboarding=row[9],
        deleted_date=row[10],
    )


class PostgresAccountStore:
    """
    Implements AccountStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, password_hasher: PasswordHasher) -> None:
        self._password_hasher = password_hasher
        # Same cost factor as real hashes.
        self.dummy_hash = password_hasher.hash(_DUMMY_PASSWORD)

    def find_active_by_username(self, conn: Connection, username: str) -> Account | None:
        sql = f"""
            SELECT {_ACCOUNT_COLUMNS}
            FROM users
            WHERE username = %s AND deleted_date IS NULL
        """

        with conn.cursor() as cursor:
            cursor.execute(sql, (username,))
            row = cursor.fetchone()
        return _row_to_account(row) if row is not None else None

    def authenticate(self, conn: Connection, username: str, password: str) -> Account | None:
        """
        Check credentials of an active account.

        Returns:
            The account if the password matches, None otherwise
        """
        account = self.find_active_by_username(conn, username)

        # Always run bcrypt, even for unknown usernames.
        stored_hash = account.password_hash if account is not None else self.dummy_hash
        password_valid = self._password_hasher.verify(password, stored_hash)

        if account is None or not password_valid:
            return None
        return account

    def create(self, conn: Connection, account: Account) -> None:
        sql = f"""
            INSERT INTO users ({_ACCOUNT_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        """

        conn.execute(
            sql,
            (
                account.id,
                account.username,
                account.password_hash,
                account.email,
                account.role_id,
                account.private_key,
                account.storage_quota,
                account.create_date,
                account.storage_current,
                account.onboarding,
                account.deleted_date,
            ),
        )
