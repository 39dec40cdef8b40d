from datetime import datetime
from enum import Enum as PythonEnum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from zyrotech.db.base import Base
from zyrotech.models.bot import Bot
from zyrotech.models.types import GUID
from zyrotech.models.user import User
from zyrotech.utils import utcnow


class SubscriptionStatus(str, PythonEnum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class BotSubscription(Base):
    """User to bot subscription; one row per pair, reactivated in place."""

    __tablename__ = "bot_subscriptions"
    __table_args__ = (
        UniqueConstraint("user_id", "bot_id", name="uq_bot_subscriptions_user_id_bot_id"),
    )

    id: Mapped[UUID] = mapped_column(GUID(), primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    bot_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("bots.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    status: Mapped[str] = mapped_column(
        SQLEnum(*[s.value for s in SubscriptionStatus], name="subscription_status", native_enum=False),
        default=SubscriptionStatus.ACTIVE.value,
        nullable=False
    )
    subscribed_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    bot: Mapped[Bot] = relationship(lazy="selectin")
    user: Mapped[User] = relationship(lazy="selectin")
