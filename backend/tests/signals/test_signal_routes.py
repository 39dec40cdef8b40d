"""
Signal Routes Tests

Single and bulk creation, pagination, filtering and updates.
"""

import uuid

import pytest
from httpx import AsyncClient


def _signal(trade_id: str, hour: int = 9, direction: str = "LONG", **extra) -> dict:
    return {
        "tradeId": trade_id,
        "direction": direction,
        "entryTime": f"2025-07-01T{hour:02d}:00:00Z",
        "entryPrice": 2300.5,
        **extra,
    }


async def _bulk(client: AsyncClient, headers: dict, bot_id: str, signals: list):
    return await client.post("/api/signals/bulk", json={"botId": bot_id, "signals": signals}, headers=headers)


@pytest.mark.asyncio
async def test_create_signal(client: AsyncClient, user_headers, bot):
    response = await client.post(
        "/api/signals",
        json={**_signal("T-100", direction="long", stoploss=2290, target1r=2310), "botId": bot["id"]},
        headers=user_headers
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["direction"] == "LONG"
    assert data["tradeId"] == "T-100"
    assert data["entryTime"] == "2025-07-01T09:00:00"
    assert data["trailCount"] == 0
    assert data["bot"] == {"id": bot["id"], "name": "XAU/USD"}


@pytest.mark.asyncio
async def test_create_signal_errors(client: AsyncClient, user_headers, bot):
    response = await client.post(
        "/api/signals",
        json={**_signal("T-1", direction="SIDEWAYS"), "botId": bot["id"]},
        headers=user_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "invalid-direction"

    response = await client.post(
        "/api/signals",
        json={**_signal("T-1"), "botId": str(uuid.uuid4())},
        headers=user_headers
    )
    assert response.status_code == 404
    assert response.json()["code"] == "bot-not-found"

    response = await client.post("/api/signals", json={"botId": bot["id"]}, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "validation-error"

    await client.post("/api/signals", json={**_signal("T-1"), "botId": bot["id"]}, headers=user_headers)
    response = await client.post("/api/signals", json={**_signal("T-1"), "botId": bot["id"]}, headers=user_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "duplicate-trade-id"


@pytest.mark.asyncio
async def test_trade_id_is_trimmed_and_never_blank(client: AsyncClient, user_headers, bot):
    response = await client.post(
        "/api/signals",
        json={**_signal("   "), "botId": bot["id"]},
        headers=user_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "validation-error"

    response = await _bulk(client, user_headers, bot["id"], [_signal("B1"), _signal(" \t")])
    assert response.status_code == 400
    assert response.json()["code"] == "validation-error"

    response = await client.post(
        "/api/signals",
        json={**_signal("  T-7  "), "botId": bot["id"]},
        headers=user_headers
    )
    assert response.status_code == 201
    assert response.json()["data"]["tradeId"] == "T-7"


@pytest.mark.asyncio
async def test_bulk_create(client: AsyncClient, user_headers, bot):
    response = await _bulk(client, user_headers, bot["id"], [_signal("B1"), _signal("B2", 10, "SHORT")])

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["totalCreated"] == 2
    assert data["bot"]["name"] == "XAU/USD"
    assert [s["tradeId"] for s in data["signals"]] == ["B1", "B2"]


@pytest.mark.asyncio
async def test_bulk_create_is_all_or_nothing(client: AsyncClient, user_headers, bot):
    await _bulk(client, user_headers, bot["id"], [_signal("B1")])

    response = await _bulk(client, user_headers, bot["id"], [_signal("B2"), _signal("B1")])
    assert response.status_code == 409
    assert response.json()["code"] == "duplicate-trade-id"
    assert "B1" in response.json()["message"]

    response = await _bulk(client, user_headers, bot["id"], [_signal("B3"), _signal("B3")])
    assert response.status_code == 409

    listing = await client.get("/api/signals", headers=user_headers)
    assert [s["tradeId"] for s in listing.json()["data"]] == ["B1"]


@pytest.mark.asyncio
async def test_bulk_create_requires_signals(client: AsyncClient, user_headers, bot):
    response = await _bulk(client, user_headers, bot["id"], [])

    assert response.status_code == 400
    assert response.json()["code"] == "missing-required-fields"


@pytest.mark.asyncio
async def test_list_signals_paginates_newest_first(client: AsyncClient, user_headers, bot):
    await _bulk(client, user_headers, bot["id"], [_signal(f"P{h}", h) for h in range(1, 6)])

    response = await client.get("/api/signals", params={"page": 1, "limit": 2}, headers=user_headers)

    assert response.status_code == 200
    body = response.json()
    assert [s["tradeId"] for s in body["data"]] == ["P5", "P4"]
    assert body["pagination"] == {
        "currentPage": 1,
        "totalPages": 3,
        "totalSignals": 5,
        "hasNextPage": True,
        "hasPrevPage": False,
    }

    response = await client.get("/api/signals", params={"page": 3, "limit": 2}, headers=user_headers)
    body = response.json()
    assert [s["tradeId"] for s in body["data"]] == ["P1"]
    assert body["pagination"]["hasNextPage"] is False
    assert body["pagination"]["hasPrevPage"] is True


@pytest.mark.asyncio
async def test_signal_time_takes_precedence_in_ordering(client: AsyncClient, user_headers, bot):
    await _bulk(
        client,
        user_headers,
        bot["id"],
        [_signal("EARLY", 8, signalTime="2025-07-01T20:00:00Z"), _signal("LATE", 12)]
    )

    response = await client.get("/api/signals", headers=user_headers)

    assert [s["tradeId"] for s in response.json()["data"]] == ["EARLY", "LATE"]


@pytest.mark.asyncio
async def test_list_signals_filters(client: AsyncClient, user_headers, bot, group):
    other = (await client.post(
        "/api/bots",
        json={"name": "XAG/USD", "description": "Silver", "recommendedCapital": 80, "groupId": group["id"]},
        headers=user_headers
    )).json()["data"]
    await _bulk(client, user_headers, bot["id"], [_signal("A1"), _signal("A2", 10, "SHORT")])
    await _bulk(client, user_headers, other["id"], [_signal("A1", 11)])

    response = await client.get("/api/signals", params={"botId": bot["id"]}, headers=user_headers)
    assert response.json()["pagination"]["totalSignals"] == 2

    response = await client.get("/api/signals", params={"direction": "short"}, headers=user_headers)
    assert [s["tradeId"] for s in response.json()["data"]] == ["A2"]

    response = await client.get("/api/signals", params={"direction": "up"}, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "invalid-direction"


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 101}])
async def test_list_signals_rejects_bad_pagination(client: AsyncClient, user_headers, params):
    response = await client.get("/api/signals", params=params, headers=user_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "validation-error"


@pytest.mark.asyncio
async def test_signals_for_bot(client: AsyncClient, user_headers, bot):
    await _bulk(client, user_headers, bot["id"], [_signal("C1"), _signal("C2", 10)])

    response = await client.get(f"/api/signals/bot/{bot['id']}", params={"limit": 1}, headers=user_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["bot"]["id"] == bot["id"]
    assert [s["tradeId"] for s in data["signals"]] == ["C2"]
    assert data["pagination"]["totalPages"] == 2

    response = await client.get(f"/api/signals/bot/{uuid.uuid4()}", headers=user_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_and_delete_signal(client: AsyncClient, user_headers, bot):
    created = (await client.post(
        "/api/signals",
        json={**_signal("U1"), "botId": bot["id"]},
        headers=user_headers
    )).json()["data"]
    url = f"/api/signals/{created['id']}"

    response = await client.put(url, json={}, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "no-update-fields"

    response = await client.put(url, json={"direction": "flat"}, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "invalid-direction"

    response = await client.put(
        url,
        json={"exitTime": "2025-07-01T12:30:00+05:30", "exitPrice": 2320, "profitLoss": 19.5, "trailCount": 2},
        headers=user_headers
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["exitTime"] == "2025-07-01T07:00:00"
    assert data["profitLoss"] == 19.5
    assert data["trailCount"] == 2
    assert data["tradeId"] == "U1"

    response = await client.delete(url, headers=user_headers)
    assert response.status_code == 200

    response = await client.get(url, headers=user_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "signal-not-found"
