from datetime import datetime
from enum import Enum as PythonEnum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from zyrotech.db.base import Base
from zyrotech.models.bot import Bot
from zyrotech.models.types import GUID


class Direction(str, PythonEnum):
    LONG = "LONG"
    SHORT = "SHORT"


class Signal(Base):
    """
    A trade taken by a bot.

    Open trades have no exit fields yet; only closed trades with a recorded
    profit/loss count towards performance statistics.
    """

    __tablename__ = "signals"
    __table_args__ = (
        UniqueConstraint("bot_id", "trade_id", name="uq_signals_bot_id_trade_id"),
        CheckConstraint("entry_price >= 0", name="entry_price_non_negative"),
        CheckConstraint("trail_count >= 0", name="trail_count_non_negative"),
    )

    id: Mapped[UUID] = mapped_column(GUID(), primary_key=True, default=uuid4)
    bot_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("bots.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    trade_id: Mapped[str] = mapped_column(String(100), nullable=False)
    direction: Mapped[str] = mapped_column(
        SQLEnum(*[d.value for d in Direction], name="direction", native_enum=False),
        nullable=False
    )
    signal_time: Mapped[Optional[datetime]] = mapped_column(DateTime, index=True, nullable=True)
    entry_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    entry_price: Mapped[float] = mapped_column(Float, nullable=False)
    stoploss: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    target1r: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    target2r: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    exit_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    exit_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    exit_reason: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    profit_loss: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    profit_loss_r: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    trail_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    bot: Mapped[Bot] = relationship(lazy="selectin")
