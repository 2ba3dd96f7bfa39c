"""
Domain exceptions - Server-side failure types for registration.

Client-caused failures (validation, conflicts, unknown requests, denied
logins) are returned as values, see results.py. The exceptions here signal
that something went wrong on our side and must be reported to the caller as
an opaque internal error.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


class PersistenceError(RegistrationError):
    """Reading or writing registration data failed."""

    pass


class ProvisioningError(RegistrationError):
    """Account creation for an approved request failed."""

    pass


class InvalidPasswordHash(RegistrationError):
    """A stored password hash is not a well-formed bcrypt hash."""

    pass
