"""Pydantic schemas for bots and their statistics."""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from zyrotech.models.bot import PerformanceDuration
from zyrotech.schemas.common import CamelModel
from zyrotech.schemas.group import GroupSummary


class BotCreate(CamelModel):
    """
    Bot creation payload.

    The four required fields are optional here so the service can answer with
    ``missing-required-fields`` instead of a generic validation error.
    """
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    recommended_capital: Optional[float] = Field(None, ge=0)
    performance_duration: Optional[PerformanceDuration] = None
    script: Optional[str] = Field(None, max_length=10)
    group_id: Optional[UUID] = None


class BotUpdate(BotCreate):
    """Partial update; at least one field must be present."""


class BotSummary(CamelModel):
    id: UUID
    name: str


class BotResponse(CamelModel):
    id: UUID
    name: str
    description: str
    recommended_capital: float
    performance_duration: str
    script: str
    group_id: UUID
    group: Optional[GroupSummary] = None
    created_at: datetime
    updated_at: datetime


class SubscribedBot(BotResponse):
    subscription_id: UUID
    subscribed_at: datetime


class Subscriber(CamelModel):
    user_id: UUID
    full_name: str
    email: str
    subscription_id: UUID
    subscribed_at: datetime


class SubscribersData(CamelModel):
    bot: BotSummary
    subscribers: List[Subscriber]
    total_subscribers: int


class PerformanceOverview(CamelModel):
    """Statistics over closed trades (exit time and profit/loss recorded)."""
    total_trades: int
    total_return: float
    win_rate: float = Field(..., description="Percentage of trades with positive profit/loss")
    profit_factor: float = Field(..., description="Gross wins divided by absolute gross losses")
