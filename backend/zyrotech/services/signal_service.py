"""
Signal Service

Trade signals posted by bots: single and bulk creation, paginated listings,
updates and deletion.
"""

import math
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from zyrotech.core.exceptions import BadRequestException, ConflictException, NotFoundException
from zyrotech.core.logging import get_logger, log_duration
from zyrotech.models.bot import Bot
from zyrotech.models.signal import Direction, Signal
from zyrotech.schemas.common import Pagination
from zyrotech.schemas.signal import SignalBulkCreate, SignalCreate, SignalFields, SignalUpdate

# Initialize logger
logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

# Newest first; open signals without a signal time sort by entry time
SIGNAL_ORDER = func.coalesce(Signal.signal_time, Signal.entry_time).desc()


def validate_direction(direction: Optional[str]) -> str:
    value = (direction or "").strip().upper()
    if value not in {d.value for d in Direction}:
        raise BadRequestException("Direction must be either LONG or SHORT", code="invalid-direction")
    return value


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    return Pagination(
        current_page=page,
        total_pages=math.ceil(total / limit) if total else 0,
        total_signals=total,
        has_next_page=page * limit < total,
        has_prev_page=page > 1,
    )


class SignalService:
    """Service for managing trade signals."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_bot(self, bot_id: UUID) -> Bot:
        bot = await self.db.get(Bot, bot_id)
        if bot is None:
            raise NotFoundException("Bot not found", code="bot-not-found")
        return bot

    @staticmethod
    def _build(bot: Bot, fields: SignalFields) -> Signal:
        signal = Signal(
            bot_id=bot.id,
            **fields.model_dump(exclude={"bot_id"})
        )
        signal.direction = validate_direction(fields.direction)
        signal.trade_id = fields.trade_id.strip()
        signal.bot = bot
        return signal

    async def _existing_trade_ids(self, bot_id: UUID, trade_ids: List[str]) -> List[str]:
        result = await self.db.execute(
            select(Signal.trade_id).where(Signal.bot_id == bot_id, Signal.trade_id.in_(trade_ids))
        )
        return list(result.scalars().all())

    async def create_signal(self, data: SignalCreate) -> Signal:
        """
        Raises:
            BadRequestException: Invalid direction
            NotFoundException: Bot does not exist
            ConflictException: Trade id already recorded for the bot
        """
        validate_direction(data.direction)
        bot = await self._get_bot(data.bot_id)

        if await self._existing_trade_ids(bot.id, [data.trade_id.strip()]):
            raise ConflictException(
                "Signal with this trade ID already exists for this bot",
                code="duplicate-trade-id"
            )

        signal = self._build(bot, data)
        self.db.add(signal)
        await self.db.commit()

        logger.info("Signal created", extra={"bot_id": str(bot.id), "trade_id": signal.trade_id})
        return signal

    async def create_bulk(self, data: SignalBulkCreate) -> Tuple[Bot, List[Signal]]:
        """
        Insert a batch of signals for one bot, all or nothing.

        Raises:
            BadRequestException: Empty batch or an invalid direction
            NotFoundException: Bot does not exist
            ConflictException: Duplicate trade ids inside the batch or
                already stored for the bot
        """
        if not data.signals:
            raise BadRequestException("Please provide botId and signals array", code="missing-required-fields")

        for item in data.signals:
            validate_direction(item.direction)

        trade_ids = [item.trade_id.strip() for item in data.signals]
        repeated = sorted({t for t in trade_ids if trade_ids.count(t) > 1})
        if repeated:
            raise ConflictException(
                f"Duplicate trade IDs in request: {', '.join(repeated)}",
                code="duplicate-trade-id"
            )

        bot = await self._get_bot(data.bot_id)
        existing = await self._existing_trade_ids(bot.id, trade_ids)
        if existing:
            raise ConflictException(
                f"Signals already exist for trade IDs: {', '.join(sorted(existing))}",
                code="duplicate-trade-id"
            )

        signals = [self._build(bot, item) for item in data.signals]
        with log_duration(logger, "Bulk signal insert"):
            self.db.add_all(signals)
            await self.db.commit()

        logger.info("Signals created in bulk", extra={"bot_id": str(bot.id), "count": len(signals)})
        return bot, signals

    async def list_signals(
        self,
        bot_id: Optional[UUID] = None,
        direction: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE
    ) -> Tuple[List[Signal], Pagination]:
        """Filtered, paginated signals, newest first."""
        conditions = []
        if bot_id is not None:
            conditions.append(Signal.bot_id == bot_id)
        if direction:
            conditions.append(Signal.direction == validate_direction(direction))

        total = await self.db.scalar(select(func.count()).select_from(Signal).where(*conditions))
        result = await self.db.execute(
            select(Signal)
            .where(*conditions)
            .order_by(SIGNAL_ORDER, Signal.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), build_pagination(page, limit, total or 0)

    async def list_for_bot(
        self,
        bot_id: UUID,
        direction: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE
    ) -> Tuple[Bot, List[Signal], Pagination]:
        bot = await self._get_bot(bot_id)
        signals, pagination = await self.list_signals(bot.id, direction, page, limit)
        return bot, signals, pagination

    async def get_signal(self, signal_id: UUID) -> Signal:
        signal = await self.db.get(Signal, signal_id)
        if signal is None:
            raise NotFoundException("Signal not found", code="signal-not-found")
        return signal

    async def update_signal(self, signal_id: UUID, data: SignalUpdate) -> Signal:
        """Partial update. Only fields present in the payload change."""
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise BadRequestException("Please provide at least one field to update", code="no-update-fields")

        signal = await self.get_signal(signal_id)
        if "direction" in changes:
            changes["direction"] = validate_direction(changes["direction"])
        for required in ("entry_time", "entry_price", "trail_count"):
            if required in changes and changes[required] is None:
                changes.pop(required)

        for field, value in changes.items():
            setattr(signal, field, value)

        await self.db.commit()
        logger.info("Signal updated", extra={"signal_id": str(signal.id)})
        return signal

    async def delete_signal(self, signal_id: UUID) -> None:
        signal = await self.get_signal(signal_id)
        await self.db.delete(signal)
        await self.db.commit()
        logger.info("Signal deleted", extra={"signal_id": str(signal_id)})
