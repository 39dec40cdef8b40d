"""
Bot Service

CRUD over trading bots, subscriber listings and performance statistics.
"""

import math
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from zyrotech.core.exceptions import BadRequestException, ConflictException, NotFoundException
from zyrotech.core.logging import get_logger
from zyrotech.models.bot import Bot, PerformanceDuration
from zyrotech.models.group import Group
from zyrotech.models.signal import Signal
from zyrotech.models.subscription import BotSubscription, SubscriptionStatus
from zyrotech.schemas.bot import BotCreate, BotUpdate, PerformanceOverview

# Initialize logger
logger = get_logger(__name__)

DEFAULT_SCRIPT = "USD"


def round2(value: float) -> float:
    """Round half away from zero to 2 decimals."""
    return math.copysign(math.floor(abs(value) * 100 + 0.5) / 100, value)


def performance_overview(signals: List[Signal]) -> PerformanceOverview:
    """
    Statistics over closed trades, i.e. signals with an exit time and a
    recorded profit/loss.
    """
    closed = [s for s in signals if s.exit_time is not None and s.profit_loss is not None]
    total_return = sum(s.profit_loss for s in closed)
    wins = [s.profit_loss for s in closed if s.profit_loss > 0]
    losses = [s.profit_loss for s in closed if s.profit_loss < 0]

    win_rate = len(wins) / len(closed) * 100 if closed else 0.0
    gross_loss = abs(sum(losses))
    profit_factor = sum(wins) / gross_loss if gross_loss > 0 else 0.0

    return PerformanceOverview(
        total_trades=len(closed),
        total_return=round2(total_return),
        win_rate=round2(win_rate),
        profit_factor=round2(profit_factor),
    )


class BotService:
    """Service for managing trading bots."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_group(self, group_id: UUID) -> Group:
        group = await self.db.get(Group, group_id)
        if group is None:
            raise NotFoundException("Group not found", code="group-not-found")
        return group

    async def _ensure_unique_name(self, name: str, exclude_id: Optional[UUID] = None) -> None:
        query = select(Bot.id).where(Bot.name == name)
        if exclude_id is not None:
            query = query.where(Bot.id != exclude_id)
        if (await self.db.execute(query.limit(1))).scalar_one_or_none() is not None:
            raise ConflictException("Bot with this name already exists", code="duplicate-bot-name")

    async def create_bot(self, data: BotCreate) -> Bot:
        """
        Raises:
            BadRequestException: A required field is missing
            NotFoundException: Group does not exist
            ConflictException: Name already taken
        """
        name = (data.name or "").strip()
        description = (data.description or "").strip()
        if not name or not description or data.recommended_capital is None or data.group_id is None:
            raise BadRequestException(
                "Please provide name, description, recommendedCapital, and groupId",
                code="missing-required-fields"
            )

        group = await self._get_group(data.group_id)
        await self._ensure_unique_name(name)

        bot = Bot(
            name=name,
            description=description,
            recommended_capital=data.recommended_capital,
            performance_duration=(data.performance_duration or PerformanceDuration.ONE_MONTH).value,
            script=(data.script or DEFAULT_SCRIPT).strip() or DEFAULT_SCRIPT,
            group_id=group.id,
        )
        bot.group = group
        self.db.add(bot)
        await self.db.commit()

        logger.info("Bot created", extra={"bot_id": str(bot.id), "bot_name": bot.name})
        return bot

    async def list_bots(self, group_id: Optional[UUID] = None) -> List[Bot]:
        query = select(Bot).order_by(Bot.name)
        if group_id is not None:
            query = query.where(Bot.group_id == group_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_bot(self, bot_id: UUID) -> Bot:
        bot = await self.db.get(Bot, bot_id)
        if bot is None:
            raise NotFoundException("Bot not found", code="bot-not-found")
        return bot

    async def update_bot(self, bot_id: UUID, data: BotUpdate) -> Bot:
        """
        Apply a partial update.

        Raises:
            BadRequestException: Empty payload
            NotFoundException: Bot or new group does not exist
            ConflictException: New name already taken
        """
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            raise BadRequestException("Please provide at least one field to update", code="no-update-fields")

        bot = await self.get_bot(bot_id)

        if "group_id" in changes:
            bot.group = await self._get_group(changes.pop("group_id"))
        if "name" in changes:
            name = changes.pop("name").strip()
            if not name:
                raise BadRequestException("Bot name cannot be empty", code="missing-required-fields")
            await self._ensure_unique_name(name, exclude_id=bot.id)
            bot.name = name
        if "performance_duration" in changes:
            bot.performance_duration = PerformanceDuration(changes.pop("performance_duration")).value
        for field, value in changes.items():
            setattr(bot, field, value.strip() if isinstance(value, str) else value)

        await self.db.commit()
        logger.info("Bot updated", extra={"bot_id": str(bot.id)})
        return bot

    async def delete_bot(self, bot_id: UUID) -> None:
        """Delete a bot together with its signals and subscriptions."""
        bot = await self.get_bot(bot_id)

        signals = await self.db.execute(delete(Signal).where(Signal.bot_id == bot.id))
        subscriptions = await self.db.execute(
            delete(BotSubscription).where(BotSubscription.bot_id == bot.id)
        )
        await self.db.delete(bot)
        await self.db.commit()

        logger.info(
            "Bot deleted",
            extra={
                "bot_id": str(bot_id),
                "signals_removed": signals.rowcount,
                "subscriptions_removed": subscriptions.rowcount
            }
        )

    async def list_subscribed(self, user_id: UUID) -> List[Tuple[Bot, BotSubscription]]:
        """Bots the user actively subscribes to, newest subscription first."""
        result = await self.db.execute(
            select(BotSubscription)
            .where(
                BotSubscription.user_id == user_id,
                BotSubscription.status == SubscriptionStatus.ACTIVE.value
            )
            .order_by(BotSubscription.subscribed_at.desc())
        )
        return [(sub.bot, sub) for sub in result.scalars().all()]

    async def list_subscribers(self, bot_id: UUID) -> Tuple[Bot, List[BotSubscription]]:
        """Active subscriptions of a bot, newest first."""
        bot = await self.get_bot(bot_id)
        result = await self.db.execute(
            select(BotSubscription)
            .where(
                BotSubscription.bot_id == bot.id,
                BotSubscription.status == SubscriptionStatus.ACTIVE.value
            )
            .order_by(BotSubscription.subscribed_at.desc())
        )
        return bot, list(result.scalars().all())

    async def get_performance_overview(self, bot_id: UUID) -> PerformanceOverview:
        bot = await self.get_bot(bot_id)
        result = await self.db.execute(select(Signal).where(Signal.bot_id == bot.id))
        return performance_overview(list(result.scalars().all()))
