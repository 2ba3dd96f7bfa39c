"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the data model and the interfaces (ports) that the
domain requires from infrastructure. Adapters implement these protocols.

Every storage operation receives the connection handle of the current unit
of work explicitly. Handles come from TransactionManager.transaction(), so a
workflow operation decides which writes share one transaction.
"""

from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

# Opaque storage handle; the domain only passes it through to the ports.
Connection = Any


class RegistrationStatus(str, Enum):
    """
    Registration request lifecycle states.

    State Transitions (forward-only):
    - PENDING -> APPROVED (administrator approval, provisions an account)
    - PENDING -> REJECTED (administrator rejection)

    Terminal States:
    - APPROVED, REJECTED: never transitioned again; retrying requires a
      new submission
    """

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self is not RegistrationStatus.PENDING


class AuditEventType(str, Enum):
    """Audit event kinds emitted by this service."""

    CREATE = "CREATE"


@dataclass
class RegistrationRequest:
    """A sign-up attempt waiting for, or carrying, an administrator decision."""

    username: str
    password_hash: str
    email: str
    id: str | None = None
    create_date: datetime | None = None
    status: RegistrationStatus = RegistrationStatus.PENDING

    @property
    def create_date_millis(self) -> int | None:
        if self.create_date is None:
            return None
        return int(self.create_date.timestamp() * 1000)


@dataclass
class Account:
    """A live, directly authenticable user account."""

    id: str
    username: str
    password_hash: str
    email: str
    role_id: str
    private_key: str
    storage_quota: int
    create_date: datetime
    storage_current: int = 0
    onboarding: bool = False
    deleted_date: datetime | None = field(default=None)

    @property
    def is_admin(self) -> bool:
        return self.role_id == "admin"


class TransactionManager(Protocol):
    """Port interface for unit-of-work boundaries."""

    def transaction(self) -> AbstractContextManager[Connection]:
        """
        Open a unit of work.

        The yielded connection is committed when the block exits normally
        and rolled back when it raises.
        """
        ...


class RegistrationRequestRepository(Protocol):
    """Port interface for registration request persistence."""

    def create(self, conn: Connection, request: RegistrationRequest) -> str | None:
        """
        Persist a new registration request.

        Assigns id and create_date when absent. Does not check uniqueness
        itself; the storage layer refuses a second PENDING request for the
        same username.

        Returns:
            The request id, or None if the storage uniqueness constraint
            rejected the row
        """
        ...

    def get_by_id(
        self, conn: Connection, request_id: str, for_update: bool = False
    ) -> RegistrationRequest | None:
        """
        Fetch a request by id.

        Args:
            conn: Connection of the current unit of work
            request_id: Request identifier
            for_update: Lock the row until the unit of work ends
        """
        ...

    def get_by_username(self, conn: Connection, username: str) -> RegistrationRequest | None:
        """
        Fetch the most recent request for a username.

        Several historical requests may share a username; the one with the
        latest create_date wins, ties broken by id.
        """
        ...

    def find_all_pending(self, conn: Connection) -> list[RegistrationRequest]:
        """Return all PENDING requests, newest first."""
        ...

    def update_status(
        self, conn: Connection, request_id: str, status: RegistrationStatus
    ) -> None:
        """Set the status of a request. No-op if the id is unknown."""
        ...

    def delete(self, conn: Connection, request_id: str) -> None:
        """Delete a request. No-op if the id is unknown."""
        ...


class AccountStore(Protocol):
    """Port interface for the live account store."""

    def find_active_by_username(self, conn: Connection, username: str) -> Account | None:
        """Return the non-deleted account with this username, if any."""
        ...

    def authenticate(self, conn: Connection, username: str, password: str) -> Account | None:
        """Return the account if the credentials match an active account."""
        ...

    def create(self, conn: Connection, account: Account) -> None:
        """Persist a new account."""
        ...


class AuditLog(Protocol):
    """Port interface for the audit trail."""

    def record(
        self, conn: Connection, entity: Account, event_type: AuditEventType, actor_id: str
    ) -> None:
        """
        Record an audit event for an entity.

        Args:
            conn: Connection of the current unit of work
            entity: Entity the event is about
            event_type: What happened to the entity
            actor_id: Id of the account performing the action
        """
        ...


class PasswordHasher(Protocol):
    """Port interface for one-way password hashing."""

    def hash(self, password: str) -> str:
        """Hash a clear-text password with a fresh salt."""
        ...

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a clear-text password against a stored hash."""
        ...
