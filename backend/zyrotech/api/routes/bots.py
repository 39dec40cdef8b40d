"""
Bots Router

Bot CRUD, subscriber listings and performance statistics.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from zyrotech.api.deps import get_bot_service
from zyrotech.auth.dependencies import CurrentUser
from zyrotech.core.responses import success_response
from zyrotech.schemas.bot import (
    BotCreate,
    BotResponse,
    BotSummary,
    BotUpdate,
    SubscribedBot,
    Subscriber,
    SubscribersData,
)
from zyrotech.services.bot_service import BotService

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a bot")
async def create_bot(
    data: BotCreate,
    current_user: CurrentUser,
    service: BotService = Depends(get_bot_service)
):
    bot = await service.create_bot(data)
    return success_response(
        BotResponse.model_validate(bot),
        "Bot created successfully",
        status.HTTP_201_CREATED
    )


@router.get("", summary="List bots")
async def list_bots(
    current_user: CurrentUser,
    group_id: Optional[UUID] = Query(None, alias="groupId"),
    service: BotService = Depends(get_bot_service)
):
    bots = await service.list_bots(group_id)
    return success_response([BotResponse.model_validate(b) for b in bots])


# Declared before /{bot_id} so "subscribed" is not parsed as an id
@router.get("/subscribed", summary="Bots the current user is subscribed to")
async def list_subscribed_bots(
    current_user: CurrentUser,
    service: BotService = Depends(get_bot_service)
):
    rows = await service.list_subscribed(current_user.id)
    bots = [
        SubscribedBot(
            **BotResponse.model_validate(bot).model_dump(),
            subscription_id=sub.id,
            subscribed_at=sub.subscribed_at,
        )
        for bot, sub in rows
    ]
    return success_response(bots)


@router.get("/{bot_id}", summary="Get a bot")
async def get_bot(
    bot_id: UUID,
    current_user: CurrentUser,
    service: BotService = Depends(get_bot_service)
):
    bot = await service.get_bot(bot_id)
    return success_response(BotResponse.model_validate(bot))


@router.get("/{bot_id}/subscribers", summary="Active subscribers of a bot")
async def list_subscribers(
    bot_id: UUID,
    current_user: CurrentUser,
    service: BotService = Depends(get_bot_service)
):
    bot, subscriptions = await service.list_subscribers(bot_id)
    subscribers = [
        Subscriber(
            user_id=sub.user_id,
            full_name=sub.user.full_name,
            email=sub.user.email,
            subscription_id=sub.id,
            subscribed_at=sub.subscribed_at,
        )
        for sub in subscriptions
    ]
    return success_response(SubscribersData(
        bot=BotSummary.model_validate(bot),
        subscribers=subscribers,
        total_subscribers=len(subscribers),
    ))


@router.get(
    "/{bot_id}/performance-overview",
    summary="Performance statistics of a bot",
    description="Computed over closed signals, i.e. those with an exit time and a profit/loss."
)
async def get_performance_overview(
    bot_id: UUID,
    current_user: CurrentUser,
    service: BotService = Depends(get_bot_service)
):
    overview = await service.get_performance_overview(bot_id)
    return success_response(overview)


@router.put("/{bot_id}", summary="Update a bot")
async def update_bot(
    bot_id: UUID,
    data: BotUpdate,
    current_user: CurrentUser,
    service: BotService = Depends(get_bot_service)
):
    bot = await service.update_bot(bot_id, data)
    return success_response(BotResponse.model_validate(bot), "Bot updated successfully")


@router.delete("/{bot_id}", summary="Delete a bot with its signals and subscriptions")
async def delete_bot(
    bot_id: UUID,
    current_user: CurrentUser,
    service: BotService = Depends(get_bot_service)
):
    await service.delete_bot(bot_id)
    return success_response(message="Bot deleted successfully")
