"""
Bot Routes Tests

CRUD, subscribed bots, subscribers and performance overview.
"""

import uuid

import pytest
from httpx import AsyncClient

from conftest import auth_headers


def _closed_signal(trade_id: str, profit_loss: float) -> dict:
    return {
        "tradeId": trade_id,
        "direction": "LONG",
        "entryTime": "2025-07-01T09:00:00Z",
        "entryPrice": 2300.5,
        "exitTime": "2025-07-01T15:00:00Z",
        "exitPrice": 2310.0,
        "profitLoss": profit_loss,
    }


@pytest.mark.asyncio
async def test_create_bot(client: AsyncClient, bot, group):
    assert bot["name"] == "XAU/USD"
    assert bot["performanceDuration"] == "1M"
    assert bot["script"] == "USD"
    assert bot["recommendedCapital"] == 100
    assert bot["group"] == {"id": group["id"], "name": "Commodities"}


@pytest.mark.asyncio
async def test_create_bot_errors(client: AsyncClient, user_headers, bot, group):
    response = await client.post("/api/bots", json={"name": "EUR/USD"}, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "missing-required-fields"

    payload = {
        "name": "EUR/USD",
        "description": "Euro",
        "recommendedCapital": 50,
        "groupId": str(uuid.uuid4()),
    }
    response = await client.post("/api/bots", json=payload, headers=user_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "group-not-found"

    payload.update(name="XAU/USD", groupId=group["id"])
    response = await client.post("/api/bots", json=payload, headers=user_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "duplicate-bot-name"


@pytest.mark.asyncio
async def test_list_bots_filtered_by_group(client: AsyncClient, user_headers, bot, group):
    other = (await client.post("/api/groups", json={"name": "Crypto"}, headers=user_headers)).json()["data"]
    await client.post(
        "/api/bots",
        json={"name": "BTC/USD", "description": "Bitcoin", "recommendedCapital": 500, "groupId": other["id"]},
        headers=user_headers
    )

    response = await client.get("/api/bots", headers=user_headers)
    assert [b["name"] for b in response.json()["data"]] == ["BTC/USD", "XAU/USD"]

    response = await client.get("/api/bots", params={"groupId": group["id"]}, headers=user_headers)
    assert [b["name"] for b in response.json()["data"]] == ["XAU/USD"]


@pytest.mark.asyncio
async def test_get_and_update_bot(client: AsyncClient, user_headers, bot):
    response = await client.get(f"/api/bots/{bot['id']}", headers=user_headers)
    assert response.status_code == 200

    response = await client.put(f"/api/bots/{bot['id']}", json={}, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "no-update-fields"

    response = await client.put(
        f"/api/bots/{bot['id']}",
        json={"recommendedCapital": 250, "performanceDuration": "3M"},
        headers=user_headers
    )
    data = response.json()["data"]
    assert data["recommendedCapital"] == 250
    assert data["performanceDuration"] == "3M"
    assert data["name"] == "XAU/USD"


@pytest.mark.asyncio
async def test_bot_not_found(client: AsyncClient, user_headers):
    response = await client.get(f"/api/bots/{uuid.uuid4()}", headers=user_headers)

    assert response.status_code == 404
    assert response.json()["code"] == "bot-not-found"


@pytest.mark.asyncio
async def test_subscribed_and_subscribers(client: AsyncClient, user_headers, test_user, bot, create_user):
    other = await create_user(email="second@zyrotech.io", full_name="Second Trader")
    await client.post("/api/subscriptions", json={"botId": bot["id"]}, headers=user_headers)
    await client.post("/api/subscriptions", json={"botId": bot["id"]}, headers=auth_headers(other))

    response = await client.get("/api/bots/subscribed", headers=user_headers)
    assert response.status_code == 200
    subscribed = response.json()["data"]
    assert len(subscribed) == 1
    assert subscribed[0]["id"] == bot["id"]
    assert subscribed[0]["subscriptionId"]
    assert subscribed[0]["subscribedAt"]

    response = await client.get(f"/api/bots/{bot['id']}/subscribers", headers=user_headers)
    data = response.json()["data"]
    assert data["bot"] == {"id": bot["id"], "name": "XAU/USD"}
    assert data["totalSubscribers"] == 2
    assert {s["email"] for s in data["subscribers"]} == {test_user.email, "second@zyrotech.io"}


@pytest.mark.asyncio
async def test_performance_overview(client: AsyncClient, user_headers, bot):
    signals = [
        _closed_signal("T1", 120.0),
        _closed_signal("T2", -40.0),
        _closed_signal("T3", 30.0),
        # Open trade, ignored
        {"tradeId": "T4", "direction": "SHORT", "entryTime": "2025-07-02T09:00:00Z", "entryPrice": 2301},
    ]
    response = await client.post(
        "/api/signals/bulk",
        json={"botId": bot["id"], "signals": signals},
        headers=user_headers
    )
    assert response.status_code == 201

    response = await client.get(f"/api/bots/{bot['id']}/performance-overview", headers=user_headers)

    assert response.status_code == 200
    assert response.json()["data"] == {
        "totalTrades": 3,
        "totalReturn": 110.0,
        "winRate": 66.67,
        "profitFactor": 3.75,
    }


@pytest.mark.asyncio
async def test_performance_overview_without_trades(client: AsyncClient, user_headers, bot):
    response = await client.get(f"/api/bots/{bot['id']}/performance-overview", headers=user_headers)

    assert response.json()["data"] == {
        "totalTrades": 0,
        "totalReturn": 0,
        "winRate": 0,
        "profitFactor": 0,
    }


@pytest.mark.asyncio
async def test_delete_bot_removes_signals_and_subscriptions(client: AsyncClient, user_headers, bot):
    await client.post(
        "/api/signals/bulk",
        json={"botId": bot["id"], "signals": [_closed_signal("T1", 10)]},
        headers=user_headers
    )
    await client.post("/api/subscriptions", json={"botId": bot["id"]}, headers=user_headers)

    response = await client.delete(f"/api/bots/{bot['id']}", headers=user_headers)
    assert response.status_code == 200

    assert (await client.get(f"/api/bots/{bot['id']}", headers=user_headers)).status_code == 404
    signals = await client.get("/api/signals", params={"botId": bot["id"]}, headers=user_headers)
    assert signals.json()["data"] == []
    subscriptions = await client.get("/api/subscriptions", headers=user_headers)
    assert subscriptions.json()["data"] == []
