"""
Domain layer - Business logic behind abstract ports.

This package contains the core business logic for the gated registration
system: the registration request state machine, password hashing policy,
account provisioning and the authentication gate. Infrastructure is reached
only through the port interfaces in ports.py.
"""

from .authentication import AuthenticationGate
from .exceptions import (
    InvalidPasswordHash,
    PersistenceError,
    ProvisioningError,
    RegistrationError,
)
from .passwords import BcryptPasswordHasher, resolve_bcrypt_work
from .ports import (
    Account,
    AccountStore,
    AuditEventType,
    AuditLog,
    PasswordHasher,
    RegistrationRequest,
    RegistrationRequestRepository,
    RegistrationStatus,
    TransactionManager,
)
from .provisioning import AccountProvisioner
from .registration import RegistrationWorkflow
from .results import ClientError, ErrorCategory, ErrorKind, Result

__all__ = [
    "Account",
    "AccountProvisioner",
    "AccountStore",
    "AuditEventType",
    "AuditLog",
    "AuthenticationGate",
    "BcryptPasswordHasher",
    "ClientError",
    "ErrorCategory",
    "ErrorKind",
    "InvalidPasswordHash",
    "PasswordHasher",
    "PersistenceError",
    "ProvisioningError",
    "RegistrationError",
    "RegistrationRequest",
    "RegistrationRequestRepository",
    "RegistrationStatus",
    "RegistrationWorkflow",
    "Result",
    "TransactionManager",
    "resolve_bcrypt_work",
]
