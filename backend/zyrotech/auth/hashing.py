"""Password and PIN hashing using Argon2 with bcrypt fallback."""
import logging
from typing import Tuple

import bcrypt
from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError

from zyrotech.core.settings import settings

logger = logging.getLogger(__name__)

# Argon2 parameters come from settings so tests can run with cheap hashes
ph = PasswordHasher(
    time_cost=settings.auth.ARGON2_TIME_COST,
    memory_cost=settings.auth.ARGON2_MEMORY_COST,
    parallelism=settings.auth.ARGON2_PARALLELISM,
    hash_len=32,
    salt_len=16
)


def hash_secret(secret: str) -> str:
    """
    Hash a password or PIN using Argon2 with bcrypt fallback.

    Args:
        secret: Plain text password or PIN

    Returns:
        str: Encoded hash

    Raises:
        RuntimeError: If both Argon2 and bcrypt fail
    """
    try:
        return ph.hash(secret)
    except HashingError as e:
        logger.warning("[AUTH] Argon2 hashing failed, falling back to bcrypt", exc_info=e)
        try:
            salt = bcrypt.gensalt(rounds=12)
            return bcrypt.hashpw(secret.encode(), salt).decode()
        except Exception as e:
            logger.error("[AUTH] Hashing failed with both Argon2 and bcrypt", exc_info=e)
            raise RuntimeError("Failed to hash secret") from e


def verify_secret(plain: str, hashed: str) -> Tuple[bool, bool]:
    """
    Verify a password or PIN against its hash.

    Args:
        plain: Plain text value to verify
        hashed: Previously stored Argon2 or bcrypt hash

    Returns:
        Tuple[bool, bool]: (is_valid, needs_rehash). bcrypt hashes always
        need a rehash once verified.
    """
    if not hashed:
        return False, False

    if hashed.startswith("$2"):
        try:
            is_valid = bcrypt.checkpw(plain.encode(), hashed.encode())
        except ValueError as e:
            logger.error("[AUTH] Malformed bcrypt hash", exc_info=e)
            return False, False
        return is_valid, is_valid

    try:
        ph.verify(hashed, plain)
    except VerificationError:
        return False, False
    except InvalidHashError as e:
        logger.error("[AUTH] Unrecognised hash format", exc_info=e)
        return False, False

    if ph.check_needs_rehash(hashed):
        logger.info("[AUTH] Hash needs rehashing")
        return True, True
    return True, False


# Password-specific names used across the auth flows
hash_password = hash_secret
verify_password = verify_secret
