"""
Password hashing utilities.

Passwords are stored as bcrypt hashes produced through a passlib CryptContext.
"""
import logging
from passlib.context import CryptContext

from .exceptions import HashError

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Hash a password for secure storage.

    Args:
        password: The plain text password to hash

    Returns:
        The salted bcrypt hash

    Raises:
        HashError: if the hashing backend fails
    """
    try:
        return pwd_context.hash(password)
    except (ValueError, TypeError) as e:
        logger.error(f"Password hashing failed: {e}")
        raise HashError("Failed to hash password") from e


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Never raises: a mismatch or an unrecognised stored hash both return False.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against

    Returns:
        True if the password matches, False otherwise
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be verified")
        return False


# Verified against when the login email is unknown, so both paths cost one bcrypt check
DUMMY_HASH = pwd_context.hash("storefront-timing-dummy")
