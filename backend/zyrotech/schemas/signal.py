"""Pydantic schemas for trade signals."""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from zyrotech.schemas.bot import BotSummary
from zyrotech.schemas.common import CamelModel, Pagination, to_naive_utc

_TIME_FIELDS = ("signal_time", "entry_time", "exit_time")


class SignalFields(CamelModel):
    """Fields shared by single and bulk creation."""
    trade_id: str = Field(..., min_length=1, max_length=100)
    # Checked by the service so an unknown value maps to ``invalid-direction``
    direction: str = Field(..., description="LONG or SHORT")
    signal_time: Optional[datetime] = None
    entry_time: datetime
    entry_price: float = Field(..., ge=0)
    stoploss: Optional[float] = None
    target1r: Optional[float] = None
    target2r: Optional[float] = None
    exit_time: Optional[datetime] = None
    exit_price: Optional[float] = None
    exit_reason: Optional[str] = Field(None, max_length=100)
    profit_loss: Optional[float] = None
    profit_loss_r: Optional[float] = None
    trail_count: int = Field(0, ge=0)

    @field_validator("trade_id")
    @classmethod
    def strip_trade_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("tradeId must not be blank")
        return value

    @field_validator(*_TIME_FIELDS)
    @classmethod
    def normalise_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class SignalCreate(SignalFields):
    bot_id: UUID


class SignalBulkCreate(CamelModel):
    bot_id: UUID
    signals: List[SignalFields] = Field(default_factory=list)


class SignalUpdate(CamelModel):
    """Partial update; ``botId`` and ``tradeId`` are immutable."""
    direction: Optional[str] = None
    signal_time: Optional[datetime] = None
    entry_time: Optional[datetime] = None
    entry_price: Optional[float] = Field(None, ge=0)
    stoploss: Optional[float] = None
    target1r: Optional[float] = None
    target2r: Optional[float] = None
    exit_time: Optional[datetime] = None
    exit_price: Optional[float] = None
    exit_reason: Optional[str] = Field(None, max_length=100)
    profit_loss: Optional[float] = None
    profit_loss_r: Optional[float] = None
    trail_count: Optional[int] = Field(None, ge=0)

    @field_validator(*_TIME_FIELDS)
    @classmethod
    def normalise_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class SignalResponse(CamelModel):
    id: UUID
    bot_id: UUID
    bot: Optional[BotSummary] = None
    trade_id: str
    direction: str
    signal_time: Optional[datetime] = None
    entry_time: datetime
    entry_price: float
    stoploss: Optional[float] = None
    target1r: Optional[float] = None
    target2r: Optional[float] = None
    exit_time: Optional[datetime] = None
    exit_price: Optional[float] = None
    exit_reason: Optional[str] = None
    profit_loss: Optional[float] = None
    profit_loss_r: Optional[float] = None
    trail_count: int
    created_at: datetime
    updated_at: datetime


class BulkSignalsData(CamelModel):
    bot: BotSummary
    signals: List[SignalResponse]
    total_created: int


class BotSignalsData(CamelModel):
    bot: BotSummary
    signals: List[SignalResponse]
    pagination: Pagination
