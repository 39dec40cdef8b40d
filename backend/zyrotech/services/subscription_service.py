"""
Subscription Service

User subscriptions to bots. There is at most one row per user and bot:
subscribing again after a cancellation reactivates the same row.
"""

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zyrotech.core.exceptions import BadRequestException, ConflictException, NotFoundException
from zyrotech.core.logging import get_logger
from zyrotech.models.bot import Bot
from zyrotech.models.subscription import BotSubscription, SubscriptionStatus
from zyrotech.models.user import User
from zyrotech.utils import utcnow

# Initialize logger
logger = get_logger(__name__)


class SubscriptionService:
    """Service for managing bot subscriptions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find(self, user_id: UUID, bot_id: UUID) -> Optional[BotSubscription]:
        result = await self.db.execute(
            select(BotSubscription).where(
                BotSubscription.user_id == user_id,
                BotSubscription.bot_id == bot_id
            )
        )
        return result.scalar_one_or_none()

    async def subscribe(self, user: User, bot_id: Optional[UUID]) -> Tuple[BotSubscription, bool]:
        """
        Subscribe the user to a bot.

        Returns:
            Tuple of (subscription, created). ``created`` is False when a
            cancelled subscription was reactivated.

        Raises:
            BadRequestException: No bot id
            NotFoundException: Bot does not exist
            ConflictException: Already actively subscribed
        """
        if bot_id is None:
            raise BadRequestException("Bot ID is required", code="missing-bot-id")

        bot = await self.db.get(Bot, bot_id)
        if bot is None:
            raise NotFoundException("Bot not found", code="bot-not-found")

        subscription = await self._find(user.id, bot.id)
        if subscription is not None:
            if subscription.status == SubscriptionStatus.ACTIVE.value:
                raise ConflictException("You are already subscribed to this bot", code="already-subscribed")

            subscription.status = SubscriptionStatus.ACTIVE.value
            subscription.cancelled_at = None
            subscription.subscribed_at = utcnow()
            await self.db.commit()
            logger.info("Subscription reactivated", extra={"subscription_id": str(subscription.id)})
            return subscription, False

        subscription = BotSubscription(
            user_id=user.id,
            bot_id=bot.id,
            status=SubscriptionStatus.ACTIVE.value,
            subscribed_at=utcnow(),
        )
        subscription.bot = bot
        subscription.user = user
        self.db.add(subscription)
        await self.db.commit()

        logger.info(
            "Subscription created",
            extra={"subscription_id": str(subscription.id), "bot_id": str(bot.id)}
        )
        return subscription, True

    async def list_subscriptions(self, user_id: UUID, status: Optional[str] = None) -> List[BotSubscription]:
        """The user's subscriptions, newest first, optionally filtered by status."""
        query = select(BotSubscription).where(BotSubscription.user_id == user_id)
        if status:
            query = query.where(BotSubscription.status == status)
        result = await self.db.execute(query.order_by(BotSubscription.subscribed_at.desc()))
        return list(result.scalars().all())

    async def get_subscription(self, user_id: UUID, subscription_id: UUID) -> BotSubscription:
        """Only the owner can see a subscription; anything else is a 404."""
        subscription = await self.db.get(BotSubscription, subscription_id)
        if subscription is None or subscription.user_id != user_id:
            raise NotFoundException("Subscription not found", code="subscription-not-found")
        return subscription

    async def cancel(self, user_id: UUID, subscription_id: UUID) -> BotSubscription:
        subscription = await self.get_subscription(user_id, subscription_id)
        if subscription.status == SubscriptionStatus.CANCELLED.value:
            raise BadRequestException("Subscription is already cancelled", code="already-cancelled")

        subscription.status = SubscriptionStatus.CANCELLED.value
        subscription.cancelled_at = utcnow()
        await self.db.commit()

        logger.info("Subscription cancelled", extra={"subscription_id": str(subscription.id)})
        return subscription

    async def check(self, user_id: UUID, bot_id: UUID) -> Optional[BotSubscription]:
        """The active subscription of the user to the bot, if any."""
        subscription = await self._find(user_id, bot_id)
        if subscription is None or subscription.status != SubscriptionStatus.ACTIVE.value:
            return None
        return subscription

    async def delete(self, user_id: UUID, subscription_id: UUID) -> None:
        subscription = await self.get_subscription(user_id, subscription_id)
        await self.db.delete(subscription)
        await self.db.commit()
        logger.info("Subscription deleted", extra={"subscription_id": str(subscription_id)})
