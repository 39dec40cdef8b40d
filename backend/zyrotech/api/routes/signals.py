"""
Signals Router

Trade signals: single and bulk creation, paginated listings, updates.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from zyrotech.api.deps import get_signal_service
from zyrotech.auth.dependencies import CurrentUser
from zyrotech.core.responses import success_response
from zyrotech.schemas.bot import BotSummary
from zyrotech.schemas.signal import (
    BotSignalsData,
    BulkSignalsData,
    SignalBulkCreate,
    SignalCreate,
    SignalResponse,
    SignalUpdate,
)
from zyrotech.services.signal_service import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, SignalService

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a signal")
async def create_signal(
    data: SignalCreate,
    current_user: CurrentUser,
    service: SignalService = Depends(get_signal_service)
):
    signal = await service.create_signal(data)
    return success_response(
        SignalResponse.model_validate(signal),
        "Signal created successfully",
        status.HTTP_201_CREATED
    )


@router.post(
    "/bulk",
    status_code=status.HTTP_201_CREATED,
    summary="Create several signals for one bot",
    description="All or nothing: any duplicate trade id rejects the whole batch."
)
async def create_signals_bulk(
    data: SignalBulkCreate,
    current_user: CurrentUser,
    service: SignalService = Depends(get_signal_service)
):
    bot, signals = await service.create_bulk(data)
    payload = BulkSignalsData(
        bot=BotSummary.model_validate(bot),
        signals=[SignalResponse.model_validate(s) for s in signals],
        total_created=len(signals),
    )
    return success_response(
        payload,
        f"{len(signals)} signals created successfully",
        status.HTTP_201_CREATED
    )


@router.get("", summary="List signals")
async def list_signals(
    current_user: CurrentUser,
    bot_id: Optional[UUID] = Query(None, alias="botId"),
    direction: Optional[str] = Query(None, description="LONG or SHORT"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: SignalService = Depends(get_signal_service)
):
    signals, pagination = await service.list_signals(bot_id, direction, page, limit)
    return success_response(
        [SignalResponse.model_validate(s) for s in signals],
        pagination=pagination
    )


@router.get("/bot/{bot_id}", summary="List the signals of one bot")
async def list_bot_signals(
    bot_id: UUID,
    current_user: CurrentUser,
    direction: Optional[str] = Query(None, description="LONG or SHORT"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: SignalService = Depends(get_signal_service)
):
    bot, signals, pagination = await service.list_for_bot(bot_id, direction, page, limit)
    return success_response(BotSignalsData(
        bot=BotSummary.model_validate(bot),
        signals=[SignalResponse.model_validate(s) for s in signals],
        pagination=pagination,
    ))


@router.get("/{signal_id}", summary="Get a signal")
async def get_signal(
    signal_id: UUID,
    current_user: CurrentUser,
    service: SignalService = Depends(get_signal_service)
):
    signal = await service.get_signal(signal_id)
    return success_response(SignalResponse.model_validate(signal))


@router.put("/{signal_id}", summary="Update a signal")
async def update_signal(
    signal_id: UUID,
    data: SignalUpdate,
    current_user: CurrentUser,
    service: SignalService = Depends(get_signal_service)
):
    signal = await service.update_signal(signal_id, data)
    return success_response(SignalResponse.model_validate(signal), "Signal updated successfully")


@router.delete("/{signal_id}", summary="Delete a signal")
async def delete_signal(
    signal_id: UUID,
    current_user: CurrentUser,
    service: SignalService = Depends(get_signal_service)
):
    await service.delete_signal(signal_id)
    return success_response(message="Signal deleted successfully")
