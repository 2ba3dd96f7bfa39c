"""
Password hashing - bcrypt with a configurable work factor.

The work factor is resolved once from configuration (see resolve_bcrypt_work)
and handed to BcryptPasswordHasher at construction.
"""

import logging

import bcrypt

from .exceptions import InvalidPasswordHash

logger = logging.getLogger(__name__)

DEFAULT_BCRYPT_WORK = 10
MIN_BCRYPT_WORK = 4
MAX_BCRYPT_WORK = 31

# bcrypt only consumes the first 72 bytes of its input.
_BCRYPT_MAX_INPUT = 72


def resolve_bcrypt_work(raw: object) -> int:
    """
    Resolve a configured bcrypt work factor.

    Empty values select the default. Invalid values are logged and replaced
    by the default; this never raises.

    Args:
        raw: Configured value (int, str or None)

    Returns:
        A work factor within MIN_BCRYPT_WORK..MAX_BCRYPT_WORK
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return DEFAULT_BCRYPT_WORK

    try:
        work = int(str(raw).strip())
    except ValueError:
        logger.warning(
            "bcrypt work factor needs to be a number in range %d...%d. Falling back to %d.",
            MIN_BCRYPT_WORK,
            MAX_BCRYPT_WORK,
            DEFAULT_BCRYPT_WORK,
        )
        return DEFAULT_BCRYPT_WORK

    if not MIN_BCRYPT_WORK <= work <= MAX_BCRYPT_WORK:
        logger.warning(
            "bcrypt work factor needs to be in range %d...%d. Falling back to %d.",
            MIN_BCRYPT_WORK,
            MAX_BCRYPT_WORK,
            DEFAULT_BCRYPT_WORK,
        )
        return DEFAULT_BCRYPT_WORK

    return work


def _encode(password: str) -> bytes:
    return password.encode()[:_BCRYPT_MAX_INPUT]


class BcryptPasswordHasher:
    """
    Implements PasswordHasher protocol via bcrypt.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, cost: int = DEFAULT_BCRYPT_WORK) -> None:
        if not MIN_BCRYPT_WORK <= cost <= MAX_BCRYPT_WORK:
            raise ValueError(
                f"bcrypt cost must be in range {MIN_BCRYPT_WORK}...{MAX_BCRYPT_WORK}, got {cost}"
            )
        self.cost = cost

    def hash(self, password: str) -> str:
        """
        Hash a clear-text password.

        Every call draws a fresh salt, so hashing the same password twice
        yields two different strings that both verify.
        """
        return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=self.cost)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """
        Verify a clear-text password against a stored bcrypt hash.

        Comparison is constant-time inside bcrypt.checkpw().

        Raises:
            InvalidPasswordHash: If the stored hash is malformed
        """
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode())
        except ValueError as e:
            raise InvalidPasswordHash("Stored password hash is malformed") from e
