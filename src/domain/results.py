"""
Operation results - Client-caused failures as values.

Workflow operations return a Result instead of raising for errors the client
caused. Server-side failures stay exceptions (see exceptions.py), so a caller
cannot mistake a validation failure for a crash or the other way around.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorCategory(str, Enum):
    """Broad class of a client error, used to pick the response status."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


class ErrorKind(str, Enum):
    """
    Client error kinds.

    Values are the error type names exposed to API clients.
    """

    VALIDATION_ERROR = "ValidationError"
    ALREADY_EXISTING_USERNAME = "AlreadyExistingUsername"
    ALREADY_EXISTING_REQUEST = "AlreadyExistingRequest"
    NOT_FOUND = "NotFound"
    INVALID_CREDENTIALS = "InvalidCredentials"
    PENDING_APPROVAL = "PendingApproval"
    REGISTRATION_REJECTED = "RegistrationRejected"
    FORBIDDEN = "ForbiddenError"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self]


_CATEGORIES = {
    ErrorKind.VALIDATION_ERROR: ErrorCategory.VALIDATION,
    ErrorKind.ALREADY_EXISTING_USERNAME: ErrorCategory.CONFLICT,
    ErrorKind.ALREADY_EXISTING_REQUEST: ErrorCategory.CONFLICT,
    ErrorKind.NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorKind.INVALID_CREDENTIALS: ErrorCategory.FORBIDDEN,
    ErrorKind.PENDING_APPROVAL: ErrorCategory.FORBIDDEN,
    ErrorKind.REGISTRATION_REJECTED: ErrorCategory.FORBIDDEN,
    ErrorKind.FORBIDDEN: ErrorCategory.FORBIDDEN,
}


@dataclass(frozen=True)
class ClientError:
    """A failure the client caused and can act on."""

    kind: ErrorKind
    message: str

    @property
    def category(self) -> ErrorCategory:
        return self.kind.category


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a workflow operation.

    Exactly one of value/error is meaningful: ok results may carry a value
    (None for operations with nothing to return), failed results carry a
    ClientError.
    """

    value: T | None = None
    error: ClientError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result[T]":
        return cls(error=ClientError(kind=kind, message=message))
