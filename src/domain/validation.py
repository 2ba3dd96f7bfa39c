"""
Input validation for registration submissions.

Each check returns the normalized value, or raises InvalidInput carrying a
client-facing message. The workflow turns InvalidInput into a
ValidationError result before any storage access.
"""

import re

from email_validator import EmailNotValidError, validate_email

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_@.-]+$")
REQUEST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9-]+$")


class InvalidInput(ValueError):
    """A submitted field does not satisfy its constraints."""

    pass


def require(value: str | None, name: str) -> str:
    """Reject missing or blank values."""
    if value is None or not value.strip():
        raise InvalidInput(f"{name} is required")
    return value


def validate_length(value: str, name: str, min_length: int, max_length: int) -> str:
    """Trim a value and check its length bounds (inclusive)."""
    value = value.strip()
    if len(value) < min_length:
        raise InvalidInput(f"{name} must be at least {min_length} characters")
    if len(value) > max_length:
        raise InvalidInput(f"{name} must be at most {max_length} characters")
    return value


def validate_username(username: str) -> str:
    username = validate_length(username, "username", 3, 50)
    if not USERNAME_PATTERN.match(username):
        raise InvalidInput("username may only contain letters, digits and _ @ . -")
    return username


def validate_password(password: str) -> str:
    # Passwords are not trimmed; surrounding whitespace is significant.
    if len(password) < 8:
        raise InvalidInput("password must be at least 8 characters")
    if len(password) > 50:
        raise InvalidInput("password must be at most 50 characters")
    return password


def validate_email_address(email: str) -> str:
    """Check length and structure; deliverability is not checked."""
    email = validate_length(email, "email", 1, 100)
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        raise InvalidInput(f"email is not valid: {e}") from None
    return email
