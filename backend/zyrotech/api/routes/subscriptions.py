"""
Subscriptions Router

Subscribing to bots, cancelling and checking subscriptions.
"""

from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from zyrotech.api.deps import get_subscription_service
from zyrotech.auth.dependencies import CurrentUser
from zyrotech.core.responses import success_response
from zyrotech.schemas.subscription import SubscriptionCheck, SubscriptionCreate, SubscriptionResponse
from zyrotech.services.subscription_service import SubscriptionService

router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Subscribe to a bot",
    description="Creates the subscription (201) or reactivates a cancelled one (200)."
)
async def subscribe(
    data: SubscriptionCreate,
    current_user: CurrentUser,
    service: SubscriptionService = Depends(get_subscription_service)
):
    subscription, created = await service.subscribe(current_user, data.bot_id)
    if created:
        return success_response(
            SubscriptionResponse.model_validate(subscription),
            "Successfully subscribed to bot",
            status.HTTP_201_CREATED
        )
    return success_response(
        SubscriptionResponse.model_validate(subscription),
        "Subscription reactivated successfully"
    )


@router.get("", summary="List the current user's subscriptions")
async def list_subscriptions(
    current_user: CurrentUser,
    status_filter: Optional[Literal["active", "cancelled"]] = Query(None, alias="status"),
    service: SubscriptionService = Depends(get_subscription_service)
):
    subscriptions = await service.list_subscriptions(current_user.id, status_filter)
    return success_response([SubscriptionResponse.model_validate(s) for s in subscriptions])


@router.get("/check/{bot_id}", summary="Whether the current user is subscribed to a bot")
async def check_subscription(
    bot_id: UUID,
    current_user: CurrentUser,
    service: SubscriptionService = Depends(get_subscription_service)
):
    subscription = await service.check(current_user.id, bot_id)
    return success_response(SubscriptionCheck(
        is_subscribed=subscription is not None,
        subscription=SubscriptionResponse.model_validate(subscription) if subscription else None,
    ))


@router.get("/{subscription_id}", summary="Get one of the current user's subscriptions")
async def get_subscription(
    subscription_id: UUID,
    current_user: CurrentUser,
    service: SubscriptionService = Depends(get_subscription_service)
):
    subscription = await service.get_subscription(current_user.id, subscription_id)
    return success_response(SubscriptionResponse.model_validate(subscription))


@router.put("/{subscription_id}/cancel", summary="Cancel a subscription")
async def cancel_subscription(
    subscription_id: UUID,
    current_user: CurrentUser,
    service: SubscriptionService = Depends(get_subscription_service)
):
    subscription = await service.cancel(current_user.id, subscription_id)
    return success_response(
        SubscriptionResponse.model_validate(subscription),
        "Subscription cancelled successfully"
    )


@router.delete("/{subscription_id}", summary="Delete a subscription")
async def delete_subscription(
    subscription_id: UUID,
    current_user: CurrentUser,
    service: SubscriptionService = Depends(get_subscription_service)
):
    await service.delete(current_user.id, subscription_id)
    return success_response(message="Subscription deleted successfully")
