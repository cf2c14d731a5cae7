"""Error Handlers — verifies envelopes for routing, storage and unexpected failures.

Invariants:
    - Unknown routes -> 404 "Route not found"
    - Unexpected exceptions -> 500 with the generic message outside development
    - Development responses include details; every response echoes X-Request-Id
"""

import pytest

from filmvault.infrastructure.error_taxonomy import GENERIC_INTERNAL_MESSAGE
from filmvault.services.catalog_service import CatalogService


async def test_unknown_route_is_404_envelope(client):
    res = await client.get("/api/v1/nope")
    assert res.status_code == 404
    assert res.json()["error"] == {
        "message": "Route not found", "code": 404, "kind": "NotFound",
    }
    assert res.json()["success"] is False


async def test_request_id_is_echoed(client):
    res = await client.get("/api/v1/nope", headers={"X-Request-Id": "req-123"})
    assert res.headers["X-Request-Id"] == "req-123"
    assert res.json()["requestId"] == "req-123"


async def test_request_id_is_generated(client):
    res = await client.get("/api/v1/health/")
    assert res.headers["X-Request-Id"]


@pytest.fixture
def exploding_catalog(monkeypatch):
    async def _boom(self, page=None, page_size=None):
        raise RuntimeError("connection string postgres://secret")

    monkeypatch.setattr(CatalogService, "list_items", _boom)


async def test_unexpected_error_is_generic_500(client, exploding_catalog):
    res = await client.get("/api/v1/items")
    assert res.status_code == 500
    body = res.json()
    assert body["error"] == {
        "message": GENERIC_INTERNAL_MESSAGE, "code": 500, "kind": "Internal",
    }
    assert "secret" not in res.text


async def test_development_adds_details(make_client, test_settings, exploding_catalog):
    settings = test_settings.model_copy(update={"environment": "development"})
    async with make_client(settings) as dev_client:
        res = await dev_client.get("/api/v1/items")
    assert res.status_code == 500
    assert "RuntimeError" in res.json()["error"]["details"]["exception"]


async def test_storage_error_escaping_service_is_mapped(client, monkeypatch):
    from sqlalchemy.exc import OperationalError

    async def _down(self, page=None, page_size=None):
        raise OperationalError("SELECT", {}, Exception("could not connect"))

    monkeypatch.setattr(CatalogService, "list_items", _down)
    res = await client.get("/api/v1/items")
    assert res.status_code == 500
    assert res.json()["error"]["kind"] == "Internal"
    assert "could not connect" not in res.text


async def test_root_info(client):
    res = await client.get("/")
    assert res.status_code == 200
    assert res.json()["endpoints"]["items"] == "/api/v1/items"
