"""CRUD operations for user lookups."""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zyrotech.models.user import User
from zyrotech.utils import normalize_email

logger = logging.getLogger(__name__)


async def get_user_by_email(
    db: AsyncSession,
    email: str
) -> Optional[User]:
    """
    Get user by email (case-insensitive).

    Args:
        db: Database session
        email: User's email

    Returns:
        Optional[User]: User if found, None otherwise
    """
    query = select(User).where(User.email == normalize_email(email))
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_user_by_id(
    db: AsyncSession,
    user_id: UUID
) -> Optional[User]:
    """
    Get user by ID.

    Args:
        db: Database session
        user_id: User's UUID

    Returns:
        Optional[User]: User if found, None otherwise
    """
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_phone(db: AsyncSession, phone_number: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.phone_number == phone_number))
    return result.scalar_one_or_none()

