"""
Registration domain service - Gated self-registration workflow.

This module contains the core business logic for user registration: a
prospective user submits credentials, an administrator approves or rejects
the request, and only an approval materializes a live account.

Registration State Machine (Forward-Only Transitions)
=====================================================

States:
- PENDING: Initial state after submission (awaiting an administrator)
- APPROVED: Terminal state, an account was provisioned
- REJECTED: Terminal state, no account exists

Valid Transitions:
    PENDING -> APPROVED   (administrator approval)
    PENDING -> REJECTED   (administrator rejection)

Invalid Transitions (never allowed):
    APPROVED -> any       (APPROVED is terminal)
    REJECTED -> any       (REJECTED is terminal)
    any -> PENDING        (a retry is a new submission, not a reuse)

Concurrency:
- At most one PENDING request per username. The lookup in submit() only
  short-circuits the common case; the partial unique index in storage is
  the actual guarantee.
- decide() locks the request row (SELECT FOR UPDATE) before checking that it
  is PENDING, so two administrators deciding at once cannot both win.
- The status update, account insert and audit record of an approval share
  one transaction.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from .exceptions import PersistenceError, ProvisioningError, RegistrationError
from .ports import (
    AccountStore,
    Connection,
    PasswordHasher,
    RegistrationRequest,
    RegistrationRequestRepository,
    RegistrationStatus,
    TransactionManager,
)
from .provisioning import AccountProvisioner
from .results import ErrorKind, Result
from .validation import (
    InvalidInput,
    require,
    validate_email_address,
    validate_password,
    validate_username,
)

logger = logging.getLogger(__name__)

_DECISIONS = (RegistrationStatus.APPROVED.value, RegistrationStatus.REJECTED.value)


@dataclass
class RegistrationWorkflow:
    """
    Domain service for gated registration.

    Orchestrates submissions, administrator decisions and status lookups.
    Each public operation runs in its own unit of work.
    """

    transactions: TransactionManager
    requests: RegistrationRequestRepository
    accounts: AccountStore
    provisioner: AccountProvisioner
    password_hasher: PasswordHasher

    def submit(self, username: str | None, password: str | None, email: str | None) -> Result[None]:
        """
        Submit a registration request.

        Args:
            username: Desired username (3-50 chars, letters, digits, _ @ . -)
            password: Clear-text password (8-50 chars), stored only as a hash
            email: Contact email address (max 100 chars)

        Returns:
            Empty success, or a ValidationError, AlreadyExistingUsername or
            AlreadyExistingRequest failure

        Raises:
            PersistenceError: If storage access fails
        """
        try:
            username = require(username, "username")
            password = require(password, "password")
            email = require(email, "email")
            username = validate_username(username)
            password = validate_password(password)
            email = validate_email_address(email)
        except InvalidInput as e:
            return Result.failure(ErrorKind.VALIDATION_ERROR, str(e))

        # bcrypt dominates the call; hash before a connection is checked out.
        password_hash = self.password_hasher.hash(password)

        with self._unit_of_work("create registration request") as conn:
            if self.accounts.find_active_by_username(conn, username) is not None:
                return Result.failure(
                    ErrorKind.ALREADY_EXISTING_USERNAME, "Username already used"
                )

            existing = self.requests.get_by_username(conn, username)
            if existing is not None and existing.status is RegistrationStatus.PENDING:
                return Result.failure(
                    ErrorKind.ALREADY_EXISTING_REQUEST,
                    "A request is already pending for this username",
                )

            request = RegistrationRequest(
                username=username,
                password_hash=password_hash,
                email=email,
                status=RegistrationStatus.PENDING,
            )
            request_id = self.requests.create(conn, request)
            if request_id is None:
                return Result.failure(
                    ErrorKind.ALREADY_EXISTING_REQUEST,
                    "A request is already pending for this username",
                )

        logger.info("Registration request %s submitted for %s", request_id, username)
        return Result.success()

    def list_pending(self) -> list[RegistrationRequest]:
        """Return all PENDING requests, newest first."""
        with self._unit_of_work("list pending registration requests") as conn:
            return self.requests.find_all_pending(conn)

    def decide(self, request_id: str, decision: str, actor_id: str) -> Result[None]:
        """
        Approve or reject a PENDING request.

        Approval provisions the account in the same transaction as the
        status update; if provisioning fails nothing is committed and the
        request stays PENDING.

        Args:
            request_id: Id of the registration request
            decision: "APPROVED" or "REJECTED"
            actor_id: Id of the deciding administrator

        Returns:
            Empty success, or a ValidationError, NotFound or
            AlreadyExistingUsername failure

        Raises:
            ProvisioningError: If the account could not be created
            PersistenceError: If storage access fails
        """
        if decision not in _DECISIONS:
            return Result.failure(
                ErrorKind.VALIDATION_ERROR, "status must be APPROVED or REJECTED"
            )
        status = RegistrationStatus(decision)

        with self._unit_of_work("decide registration request") as conn:
            request = self.requests.get_by_id(conn, request_id, for_update=True)
            if request is None or request.status is not RegistrationStatus.PENDING:
                return Result.failure(
                    ErrorKind.NOT_FOUND,
                    "Registration request not found or not pending",
                )

            if (
                status is RegistrationStatus.APPROVED
                and self.accounts.find_active_by_username(conn, request.username) is not None
            ):
                # An account appeared after submission; the request stays PENDING.
                return Result.failure(
                    ErrorKind.ALREADY_EXISTING_USERNAME, "Username already used"
                )

            self.requests.update_status(conn, request_id, status)

            if status is RegistrationStatus.APPROVED:
                try:
                    self.provisioner.provision(conn, request, actor_id)
                except Exception as e:
                    logger.exception("Provisioning failed for request %s", request_id)
                    raise ProvisioningError(
                        f"Could not create account for request {request_id}"
                    ) from e

        logger.info("Registration request %s %s by %s", request_id, status.value, actor_id)
        return Result.success()

    def lookup_status(self, username: str) -> RegistrationStatus | None:
        """
        Status of the latest request for a username, if any.

        Used on the unauthenticated login path: any failure yields None so
        that callers learn nothing about internal errors.
        """
        try:
            with self.transactions.transaction() as conn:
                request = self.requests.get_by_username(conn, username)
        except Exception:
            logger.debug("Registration status lookup failed", exc_info=True)
            return None
        return request.status if request is not None else None

    @contextmanager
    def _unit_of_work(self, action: str) -> Iterator[Connection]:
        """Open a transaction, reporting storage failures as PersistenceError."""
        try:
            with self.transactions.transaction() as conn:
                yield conn
        except RegistrationError:
            raise
        except Exception as e:
            logger.exception("Failed to %s", action)
            raise PersistenceError(f"Failed to {action}") from e
