"""Item Routes — verifies the HTTP contract of /api/v1/items.

Invariants:
    - Success bodies use the {success, data, message?} envelope
    - Listings carry total, page, page_size and total_pages
    - Errors render {success: false, error: {message, code, kind}}
"""

from uuid import uuid4

ITEM = {
    "title": "Metropolis",
    "description": "Silent science-fiction classic",
    "price": 1299,
    "content_url": "https://cdn.example.com/metropolis.mp4",
}


async def _create(client, **overrides):
    res = await client.post("/api/v1/items", json={**ITEM, **overrides})
    assert res.status_code == 201, res.text
    return res.json()["data"]


async def test_create_item_returns_201_envelope(client):
    res = await client.post(
        "/api/v1/items", json=ITEM, headers={"X-Account-Id": "acct-9"},
    )
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "Item created successfully"
    assert body["data"]["title"] == "Metropolis"
    assert body["data"]["registrant_id"] == "acct-9"


async def test_create_item_without_identity_is_anonymous(client):
    data = await _create(client)
    assert data["registrant_id"] == "anonymous"


async def test_create_item_schema_errors_are_400(client):
    res = await client.post("/api/v1/items", json={**ITEM, "price": -1})
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["kind"] == "ValidationError"
    assert error["code"] == 400
    assert "price" in error["message"]


async def test_create_item_rejects_non_http_url(client):
    res = await client.post("/api/v1/items", json={**ITEM, "content_url": "ftp://x/y"})
    assert res.status_code == 400


async def test_get_item(client):
    created = await _create(client)
    res = await client.get(f"/api/v1/items/{created['id']}")
    assert res.status_code == 200
    assert res.json()["data"]["id"] == created["id"]


async def test_get_missing_item_is_404(client):
    res = await client.get(f"/api/v1/items/{uuid4()}")
    assert res.status_code == 404
    assert res.json()["error"]["kind"] == "NotFound"


async def test_malformed_item_id_is_400(client):
    res = await client.get("/api/v1/items/not-a-uuid")
    assert res.status_code == 400


async def test_list_items_paginates(client):
    for n in range(3):
        await _create(client, title=f"Film {n}")
    res = await client.get("/api/v1/items", params={"page": 1, "limit": 2})
    body = res.json()
    assert len(body["data"]) == 2
    assert body["total"] == 3
    assert body["page"] == 1
    assert body["page_size"] == 2
    assert body["total_pages"] == 2


async def test_list_items_bad_paging_falls_back(client):
    await _create(client)
    res = await client.get("/api/v1/items", params={"page": "abc", "page_size": "0"})
    assert res.status_code == 200
    body = res.json()
    assert body["page"] == 1
    assert body["page_size"] == 20


async def test_search_items(client):
    await _create(client, title="Metropolis")
    await _create(client, title="Alien", description="Space horror")
    res = await client.get("/api/v1/items/search", params={"q": "ALIEN"})
    assert [i["title"] for i in res.json()["data"]] == ["Alien"]


async def test_search_without_query_is_400(client):
    res = await client.get("/api/v1/items/search")
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Search query is required"


async def test_price_range(client):
    await _create(client, title="Cheap", price=100)
    await _create(client, title="Dear", price=5000)
    res = await client.get(
        "/api/v1/items/price-range", params={"min_price": 0, "max_price": 1000},
    )
    assert [i["title"] for i in res.json()["data"]] == ["Cheap"]


async def test_price_range_inverted_is_400(client):
    res = await client.get(
        "/api/v1/items/price-range", params={"min_price": 10, "max_price": 1},
    )
    assert res.status_code == 400


async def test_update_item_partial(client):
    created = await _create(client)
    res = await client.put(f"/api/v1/items/{created['id']}", json={"price": 0})
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["price"] == 0
    assert data["title"] == "Metropolis"


async def test_update_item_empty_body_is_400(client):
    created = await _create(client)
    res = await client.put(f"/api/v1/items/{created['id']}", json={})
    assert res.status_code == 400


async def test_update_item_explicit_null_is_400(client):
    created = await _create(client)
    res = await client.put(f"/api/v1/items/{created['id']}", json={"title": None})
    assert res.status_code == 400


async def test_purchase_item_with_header_identity(client):
    created = await _create(client)
    res = await client.post(
        f"/api/v1/items/{created['id']}/purchase",
        headers={"X-Account-Id": "buyer-1"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Item purchased successfully"
    assert body["data"]["account_id"] == "buyer-1"
    assert body["data"]["item"]["id"] == created["id"]


async def test_purchase_item_with_body_identity(client):
    created = await _create(client)
    res = await client.post(
        f"/api/v1/items/{created['id']}/purchase", json={"account_id": "buyer-2"},
    )
    assert res.status_code == 200
    assert res.json()["data"]["account_id"] == "buyer-2"


async def test_purchase_without_identity_is_400(client):
    created = await _create(client)
    res = await client.post(f"/api/v1/items/{created['id']}/purchase")
    assert res.status_code == 400


async def test_repeat_purchase_is_409(client):
    created = await _create(client)
    url = f"/api/v1/items/{created['id']}/purchase"
    await client.post(url, headers={"X-Account-Id": "buyer-1"})
    res = await client.post(url, headers={"X-Account-Id": "buyer-1"})
    assert res.status_code == 409
    assert res.json()["error"]["message"] == "Item already purchased by this account"


async def test_item_stats_and_purchases(client):
    created = await _create(client)
    await client.post(
        f"/api/v1/items/{created['id']}/purchase",
        headers={"X-Account-Id": "buyer-1"},
    )

    stats = (await client.get(f"/api/v1/items/{created['id']}/stats")).json()["data"]
    assert stats == {"item_id": created["id"], "total_purchases": 1}

    res = await client.get(f"/api/v1/items/{created['id']}/purchases")
    purchases = res.json()["data"]["purchases"]
    assert len(purchases) == 1
    assert purchases[0]["account"]["id"] == "buyer-1"
    assert purchases[0]["account"]["email"] == "user-buyer-1@filmvault.local"


async def test_delete_item_lifecycle(client):
    created = await _create(client)
    res = await client.delete(f"/api/v1/items/{created['id']}")
    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "Item deleted successfully"}
    assert (await client.get(f"/api/v1/items/{created['id']}")).status_code == 404


async def test_delete_purchased_item_is_409(client):
    created = await _create(client)
    await client.post(
        f"/api/v1/items/{created['id']}/purchase",
        headers={"X-Account-Id": "buyer-1"},
    )
    res = await client.delete(f"/api/v1/items/{created['id']}")
    assert res.status_code == 409
    assert res.json()["error"]["message"] == "Cannot delete item with existing purchases"


async def test_purchase_with_free_form_account_id(client):
    created = await _create(client)
    res = await client.post(
        f"/api/v1/items/{created['id']}/purchase", json={"account_id": "John Doe"},
    )
    assert res.status_code == 200
    assert res.json()["data"]["account_id"] == "John Doe"
