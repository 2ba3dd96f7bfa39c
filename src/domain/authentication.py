"""
Authentication gate - Credential checks with differentiated denials.

Successful authentication is entirely the account store's business. This
module only enriches the failure path: a user whose registration is still
pending, or was rejected, gets told so instead of a generic credentials error.
"""

import logging
from dataclasses import dataclass

from .exceptions import PersistenceError, RegistrationError
from .ports import Account, AccountStore, RegistrationStatus, TransactionManager
from .registration import RegistrationWorkflow
from .results import ErrorKind, Result

logger = logging.getLogger(__name__)


@dataclass
class AuthenticationGate:
    """Wraps account authentication with registration status lookups."""

    transactions: TransactionManager
    accounts: AccountStore
    workflow: RegistrationWorkflow

    def authenticate(self, username: str, password: str) -> Result[Account]:
        """
        Authenticate against the account store.

        Returns:
            The account on success, otherwise a failure of kind
            PendingApproval, RegistrationRejected or InvalidCredentials
        """
        try:
            with self.transactions.transaction() as conn:
                account = self.accounts.authenticate(conn, username, password)
        except RegistrationError:
            raise
        except Exception as e:
            logger.exception("Account authentication failed")
            raise PersistenceError("Failed to authenticate") from e

        if account is not None:
            return Result.success(account)

        status = self.workflow.lookup_status(username)
        if status is RegistrationStatus.PENDING:
            return Result.failure(
                ErrorKind.PENDING_APPROVAL,
                "Your account is waiting for administrator approval",
            )
        if status is RegistrationStatus.REJECTED:
            return Result.failure(
                ErrorKind.REGISTRATION_REJECTED,
                "Your registration request was rejected, please contact an administrator",
            )
        return Result.failure(ErrorKind.INVALID_CREDENTIALS, "Invalid username or password")

    def authenticate_admin(self, username: str, password: str) -> Result[Account]:
        """Authenticate and require the administrator role."""
        result = self.authenticate(username, password)
        if not result.ok:
            return result
        if not result.value.is_admin:
            logger.info("Administrative access denied for %s", username)
            return Result.failure(ErrorKind.FORBIDDEN, "Access denied")
        return result
