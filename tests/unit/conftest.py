"""
In-memory port implementations for unit tests.

InMemoryDatabase doubles as TransactionManager and connection handle: a
transaction snapshots all tables on entry and restores them when the block
raises, mirroring commit/rollback of the real adapter.
"""

import copy
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta

import pytest

from src.domain.authentication import AuthenticationGate
from src.domain.passwords import BcryptPasswordHasher
from src.domain.ports import Account, AuditEventType, RegistrationRequest, RegistrationStatus
from src.domain.provisioning import AccountProvisioner
from src.domain.registration import RegistrationWorkflow


class InMemoryDatabase:
    def __init__(self) -> None:
        self.requests: dict[str, RegistrationRequest] = {}
        self.accounts: dict[str, Account] = {}
        self.audit: list[tuple[str, AuditEventType, str]] = []
        self.transactions_opened = 0

    @contextmanager
    def transaction(self) -> Iterator["InMemoryDatabase"]:
        self.transactions_opened += 1
        snapshot = copy.deepcopy((self.requests, self.accounts, self.audit))
        try:
            yield self
        except BaseException:
            self.requests, self.accounts, self.audit = snapshot
            raise


class InMemoryRequestRepository:
    def __init__(self) -> None:
        self._counter = 0
        self._clock = datetime(2024, 1, 1, tzinfo=UTC)

    def create(self, conn: InMemoryDatabase, request: RegistrationRequest) -> str | None:
        if request.status is RegistrationStatus.PENDING and any(
            r.username == request.username and r.status is RegistrationStatus.PENDING
            for r in conn.requests.values()
        ):
            return None
        self._counter += 1
        if request.id is None:
            request.id = f"req-{self._counter:04d}"
        if request.create_date is None:
            # Strictly increasing so "newest first" is deterministic.
            self._clock += timedelta(seconds=1)
            request.create_date = self._clock
        conn.requests[request.id] = copy.deepcopy(request)
        return request.id

    def get_by_id(
        self, conn: InMemoryDatabase, request_id: str, for_update: bool = False
    ) -> RegistrationRequest | None:
        request = conn.requests.get(request_id)
        return copy.deepcopy(request)

    def get_by_username(self, conn: InMemoryDatabase, username: str) -> RegistrationRequest | None:
        matches = [r for r in conn.requests.values() if r.username == username]
        if not matches:
            return None
        return copy.deepcopy(max(matches, key=lambda r: (r.create_date, r.id)))

    def find_all_pending(self, conn: InMemoryDatabase) -> list[RegistrationRequest]:
        pending = [r for r in conn.requests.values() if r.status is RegistrationStatus.PENDING]
        return copy.deepcopy(sorted(pending, key=lambda r: (r.create_date, r.id), reverse=True))

    def update_status(
        self, conn: InMemoryDatabase, request_id: str, status: RegistrationStatus
    ) -> None:
        if request_id in conn.requests:
            conn.requests[request_id].status = status

    def delete(self, conn: InMemoryDatabase, request_id: str) -> None:
        conn.requests.pop(request_id, None)


class InMemoryAccountStore:
    def __init__(self, hasher: BcryptPasswordHasher) -> None:
        self._hasher = hasher
        self.fail_on_create = False

    def find_active_by_username(self, conn: InMemoryDatabase, username: str) -> Account | None:
        for account in conn.accounts.values():
            if account.username == username and account.deleted_date is None:
                return account
        return None

    def authenticate(self, conn: InMemoryDatabase, username: str, password: str) -> Account | None:
        account = self.find_active_by_username(conn, username)
        if account is None or not self._hasher.verify(password, account.password_hash):
            return None
        return account

    def create(self, conn: InMemoryDatabase, account: Account) -> None:
        if self.fail_on_create:
            raise RuntimeError("account store unavailable")
        if self.find_active_by_username(conn, account.username) is not None:
            raise ValueError(f"duplicate username {account.username}")
        conn.accounts[account.id] = account


class InMemoryAuditLog:
    def record(
        self, conn: InMemoryDatabase, entity: Account, event_type: AuditEventType, actor_id: str
    ) -> None:
        conn.audit.append((entity.id, event_type, actor_id))


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def request_repository() -> InMemoryRequestRepository:
    return InMemoryRequestRepository()


@pytest.fixture
def account_store(hasher: BcryptPasswordHasher) -> InMemoryAccountStore:
    return InMemoryAccountStore(hasher)


@pytest.fixture
def provisioner(account_store: InMemoryAccountStore) -> AccountProvisioner:
    return AccountProvisioner(accounts=account_store, audit_log=InMemoryAuditLog())


@pytest.fixture
def workflow(
    database: InMemoryDatabase,
    request_repository: InMemoryRequestRepository,
    account_store: InMemoryAccountStore,
    provisioner: AccountProvisioner,
    hasher: BcryptPasswordHasher,
) -> RegistrationWorkflow:
    return RegistrationWorkflow(
        transactions=database,
        requests=request_repository,
        accounts=account_store,
        provisioner=provisioner,
        password_hasher=hasher,
    )


@pytest.fixture
def gate(
    database: InMemoryDatabase,
    account_store: InMemoryAccountStore,
    workflow: RegistrationWorkflow,
) -> AuthenticationGate:
    return AuthenticationGate(transactions=database, accounts=account_store, workflow=workflow)
