"""
Group Routes Tests
"""

import uuid

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_and_list_groups(client: AsyncClient, user_headers):
    for name in ("Stocks", "Crypto", "Currency"):
        response = await client.post("/api/groups", json={"name": f"  {name} "}, headers=user_headers)
        assert response.status_code == 201
        assert response.json()["data"]["name"] == name

    response = await client.get("/api/groups", headers=user_headers)

    assert response.status_code == 200
    assert [g["name"] for g in response.json()["data"]] == ["Crypto", "Currency", "Stocks"]


@pytest.mark.asyncio
async def test_groups_require_authentication(client: AsyncClient):
    response = await client.get("/api/groups")

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, code",
    [
        ({}, "missing-group-name"),
        ({"name": "   "}, "missing-group-name"),
        ({"name": "X"}, "invalid-group-name"),
    ]
)
async def test_create_group_validation(client: AsyncClient, user_headers, payload, code):
    response = await client.post("/api/groups", json=payload, headers=user_headers)

    assert response.status_code == 400
    assert response.json()["code"] == code


@pytest.mark.asyncio
async def test_duplicate_group_name(client: AsyncClient, user_headers, group):
    response = await client.post("/api/groups", json={"name": group["name"]}, headers=user_headers)

    assert response.status_code == 409
    assert response.json()["code"] == "group-name-exists"


@pytest.mark.asyncio
async def test_get_update_group(client: AsyncClient, user_headers, group):
    response = await client.get(f"/api/groups/{group['id']}", headers=user_headers)
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Commodities"

    # Renaming to its own name is allowed
    response = await client.put(f"/api/groups/{group['id']}", json={"name": "Commodities"}, headers=user_headers)
    assert response.status_code == 200

    await client.post("/api/groups", json={"name": "Metals"}, headers=user_headers)
    response = await client.put(f"/api/groups/{group['id']}", json={"name": "Metals"}, headers=user_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "group-name-exists"

    response = await client.put(f"/api/groups/{group['id']}", json={"name": "Energy"}, headers=user_headers)
    assert response.json()["data"]["name"] == "Energy"


@pytest.mark.asyncio
async def test_group_not_found(client: AsyncClient, user_headers):
    response = await client.get(f"/api/groups/{uuid.uuid4()}", headers=user_headers)

    assert response.status_code == 404
    assert response.json()["code"] == "group-not-found"


@pytest.mark.asyncio
async def test_invalid_group_id(client: AsyncClient, user_headers):
    response = await client.get("/api/groups/not-a-uuid", headers=user_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "validation-error"


@pytest.mark.asyncio
async def test_delete_group(client: AsyncClient, user_headers, bot, group):
    response = await client.delete(f"/api/groups/{group['id']}", headers=user_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "group-in-use"

    await client.delete(f"/api/bots/{bot['id']}", headers=user_headers)

    response = await client.delete(f"/api/groups/{group['id']}", headers=user_headers)
    assert response.status_code == 200

    response = await client.get(f"/api/groups/{group['id']}", headers=user_headers)
    assert response.status_code == 404
