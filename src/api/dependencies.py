"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from functools import lru_cache

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from psycopg_pool import ConnectionPool

from src.adapters.repository import (
    PostgresAccountStore,
    PostgresAuditLog,
    PostgresRegistrationRequestRepository,
    PostgresTransactionManager,
)
from src.api.errors import client_error_exception
from src.config.settings import get_settings
from src.domain.authentication import AuthenticationGate
from src.domain.passwords import BcryptPasswordHasher
from src.domain.ports import Account
from src.domain.provisioning import AccountProvisioner
from src.domain.registration import RegistrationWorkflow

# Module-level singletons - both adapters are stateless
_request_repository = PostgresRegistrationRequestRepository()
_audit_log = PostgresAuditLog()


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


@lru_cache
def get_password_hasher() -> BcryptPasswordHasher:
    """Password hasher built once from the configured work factor."""
    return BcryptPasswordHasher(cost=get_settings().bcrypt_work)


@lru_cache
def get_account_store(
    hasher: BcryptPasswordHasher = Depends(get_password_hasher),
) -> PostgresAccountStore:
    """Account store built once per hasher; its dummy hash costs one bcrypt run."""
    return PostgresAccountStore(hasher)


def get_registration_workflow(
    request: Request,
    hasher: BcryptPasswordHasher = Depends(get_password_hasher),
    accounts: PostgresAccountStore = Depends(get_account_store),
) -> RegistrationWorkflow:
    """
    Create registration workflow with injected dependencies.

    Wires together the transaction manager, stores, provisioner and hasher.
    """
    settings = get_settings()
    return RegistrationWorkflow(
        transactions=PostgresTransactionManager(get_pool(request)),
        requests=_request_repository,
        accounts=accounts,
        provisioner=AccountProvisioner(
            accounts=accounts,
            audit_log=_audit_log,
            storage_quota=settings.default_storage_quota,
        ),
        password_hasher=hasher,
    )


def get_authentication_gate(
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
) -> AuthenticationGate:
    """Create authentication gate sharing the workflow's stores."""
    return AuthenticationGate(
        transactions=workflow.transactions,
        accounts=workflow.accounts,
        workflow=workflow,
    )


# HTTP BASIC AUTH security scheme for OpenAPI documentation
http_basic = HTTPBasic()


def get_basic_auth_credentials(
    credentials: HTTPBasicCredentials = Depends(http_basic),
) -> tuple[str, str]:
    """
    Extract credentials from HTTP BASIC AUTH header.

    FastAPI's HTTPBasic automatically:
    - Returns 401 for missing Authorization header
    - Returns 401 for malformed base64 encoding
    - Parses base64(username:password) format

    Returns:
        Tuple of (username, password). Usernames are case-sensitive, so
        only surrounding whitespace is stripped.
    """
    return credentials.username.strip(), credentials.password


def require_admin(
    credentials: tuple[str, str] = Depends(get_basic_auth_credentials),
    gate: AuthenticationGate = Depends(get_authentication_gate),
) -> Account:
    """Authenticate the caller and require the administrator role."""
    username, password = credentials
    result = gate.authenticate_admin(username, password)
    if not result.ok:
        raise client_error_exception(result.error)
    return result.value
