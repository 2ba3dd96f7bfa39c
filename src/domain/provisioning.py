"""
Account provisioning - Materialize live accounts.

Provisioning runs inside the caller's unit of work so the account insert and
its audit record commit or roll back together with the request status.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from .ports import (
    Account,
    AccountStore,
    AuditEventType,
    AuditLog,
    Connection,
    RegistrationRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_USER_ROLE = "user"
ADMIN_ROLE = "admin"
DEFAULT_STORAGE_QUOTA = 1_000_000_000  # 1 GB


def generate_private_key() -> str:
    """Generate the per-account cryptographic identity."""
    return secrets.token_urlsafe(32)


@dataclass
class AccountProvisioner:
    """Creates accounts from approved registration requests."""

    accounts: AccountStore
    audit_log: AuditLog
    storage_quota: int = DEFAULT_STORAGE_QUOTA

    def provision(self, conn: Connection, request: RegistrationRequest, actor_id: str) -> Account:
        """
        Create the account for an approved request.

        The stored password hash is copied verbatim, never rehashed.

        Args:
            conn: Connection of the current unit of work
            request: The approved registration request
            actor_id: Id of the administrator who approved it

        Returns:
            The created account
        """
        account = Account(
            id=str(uuid.uuid4()),
            username=request.username,
            password_hash=request.password_hash,
            email=request.email,
            role_id=DEFAULT_USER_ROLE,
            private_key=generate_private_key(),
            storage_quota=self.storage_quota,
            create_date=datetime.now(UTC),
            storage_current=0,
            onboarding=True,
        )
        self.accounts.create(conn, account)
        self.audit_log.record(conn, account, AuditEventType.CREATE, actor_id)
        logger.info("Provisioned account %s for request %s", account.username, request.id)
        return account

    def provision_admin(
        self, conn: Connection, username: str, password_hash: str, email: str
    ) -> Account | None:
        """
        Create the bootstrap administrator unless the username is taken.

        Returns:
            The created account, or None if an active account already exists
        """
        if self.accounts.find_active_by_username(conn, username) is not None:
            return None

        account = Account(
            id=str(uuid.uuid4()),
            username=username,
            password_hash=password_hash,
            email=email,
            role_id=ADMIN_ROLE,
            private_key=generate_private_key(),
            storage_quota=self.storage_quota,
            create_date=datetime.now(UTC),
        )
        self.accounts.create(conn, account)
        self.audit_log.record(conn, account, AuditEventType.CREATE, account.id)
        logger.info("Provisioned bootstrap administrator %s", username)
        return account
