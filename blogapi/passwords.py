# blogapi/passwords.py
import logging

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from argon2.exceptions import HashingError as Argon2HashingError

from blogapi.errors import HashingError

logger = logging.getLogger(__name__)

ph = PasswordHasher()


def hash_password(plain: str) -> str:
    try:
        return ph.hash(plain)
    except Argon2HashingError as e:
        logger.error(f"Password hashing failed: {e}", exc_info=True)
        raise HashingError() from e


def verify_password(plain: str, digest: str) -> bool:
    """Compare a plaintext password with a stored argon2 digest.

    A mismatch or an unreadable digest is reported as False, never raised.
    """
    if not plain or not digest:
        return False
    try:
        return ph.verify(digest, plain)
    except (VerificationError, InvalidHashError):
        return False
