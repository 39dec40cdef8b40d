"""Pydantic schemas for bot subscriptions."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from zyrotech.schemas.common import CamelModel


class SubscriptionCreate(CamelModel):
    # Optional so a missing id is reported as ``missing-bot-id``
    bot_id: Optional[UUID] = Field(None, description="Bot to subscribe to")


class SubscriptionBot(CamelModel):
    id: UUID
    name: str
    description: str
    recommended_capital: float
    performance_duration: str
    script: str


class SubscriptionResponse(CamelModel):
    id: UUID
    user_id: UUID
    bot_id: UUID
    status: str
    subscribed_at: datetime
    cancelled_at: Optional[datetime] = None
    bot: Optional[SubscriptionBot] = None
    created_at: datetime
    updated_at: datetime


class SubscriptionCheck(CamelModel):
    is_subscribed: bool
    subscription: Optional[SubscriptionResponse] = None
