"""FastAPI dependencies for authentication and authorization."""
import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from zyrotech.auth.exceptions import (
    EmailNotVerifiedError,
    PhoneNotVerifiedError,
    TokenValidationError,
)
from zyrotech.auth.jwt import decode_access_token
from zyrotech.core.exceptions import ForbiddenException
from zyrotech.core.logging import user_id as user_id_ctx
from zyrotech.core.settings import settings
from zyrotech.crud.user import get_user_by_id
from zyrotech.db.session import get_db
from zyrotech.models.user import User

logger = logging.getLogger(__name__)

# auto_error=False so a missing header goes through the envelope handlers
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Resolve the bearer token to a user.

    Args:
        credentials: Parsed ``Authorization: Bearer`` header
        db: Database session

    Returns:
        User: Current user

    Raises:
        TokenValidationError: Missing, malformed or expired token, or the
            user no longer exists. All surface as 401 "Please authenticate."
    """
    if credentials is None or not credentials.credentials:
        raise TokenValidationError("Missing bearer token")

    payload = decode_access_token(credentials.credentials)
    user = await get_user_by_id(db, UUID(payload["sub"]))
    if user is None:
        logger.warning(f"[AUTH] Token subject {payload['sub']} no longer exists")
        raise TokenValidationError("Unknown user")

    user_id_ctx.set(str(user.id))
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def require_email_verified(current_user: CurrentUser) -> User:
    """Current user, provided their email is verified."""
    if not current_user.is_email_verified:
        raise EmailNotVerifiedError()
    return current_user


async def require_phone_verified(current_user: CurrentUser) -> User:
    """Current user, provided their phone number is verified."""
    if not current_user.is_phone_verified:
        raise PhoneNotVerifiedError()
    return current_user


def is_admin(user: User) -> bool:
    admins = {email.strip().lower() for email in settings.auth.ADMIN_EMAILS}
    return user.email.lower() in admins


async def get_admin_user(current_user: CurrentUser) -> User:
    """
    Current user, provided their email is listed in ``AUTH_ADMIN_EMAILS``.

    Raises:
        ForbiddenException: For everyone else
    """
    if not is_admin(current_user):
        logger.warning(f"[AUTH] Non-admin {current_user.id} attempted an admin action")
        raise ForbiddenException("Admin access required")
    return current_user


VerifiedUser = Annotated[User, Depends(require_email_verified)]
PhoneVerifiedUser = Annotated[User, Depends(require_phone_verified)]
AdminUser = Annotated[User, Depends(get_admin_user)]
