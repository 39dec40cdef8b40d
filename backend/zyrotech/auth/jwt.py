"""JWT access token generation and validation."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt

from zyrotech.core.settings import settings
from zyrotech.auth.exceptions import TokenExpiredError, TokenValidationError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"


def create_access_token(user_id: UUID) -> str:
    """
    Create a signed access token for a user.

    Args:
        user_id: User's UUID, stored in the ``sub`` claim

    Returns:
        str: Encoded JWT valid for ``AUTH_JWT_EXPIRE_DAYS``
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(days=settings.auth.JWT_EXPIRE_DAYS),
        "type": ACCESS_TOKEN_TYPE,
    }
    return jwt.encode(
        payload,
        settings.auth.JWT_SECRET_KEY.get_secret_value(),
        algorithm=settings.auth.JWT_ALGORITHM
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate an access token.

    Args:
        token: Encoded JWT

    Returns:
        Dict[str, Any]: Token claims

    Raises:
        TokenExpiredError: If the token is past its ``exp``
        TokenValidationError: If the signature, type or subject is invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.auth.JWT_SECRET_KEY.get_secret_value(),
            algorithms=[settings.auth.JWT_ALGORITHM]
        )
    except ExpiredSignatureError as e:
        raise TokenExpiredError() from e
    except JWTError as e:
        logger.info(f"[AUTH] Token decode failed: {e}")
        raise TokenValidationError() from e

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise TokenValidationError("Invalid token type")
    try:
        UUID(str(payload.get("sub")))
    except ValueError as e:
        raise TokenValidationError("Invalid token subject") from e
    return payload
