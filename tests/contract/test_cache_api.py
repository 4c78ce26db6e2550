"""Contract tests for cache administration endpoints."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

CACHE_URL = "/api/v1/cache"


def test_stats_cover_every_namespace(client: TestClient, app: FastAPI, admin_headers) -> None:
    app.state.caches["order"].set(key="recent", value=[1, 2])

    response = client.get(f"{CACHE_URL}/stats", headers=admin_headers)

    assert response.status_code == 200
    stats = {entry["namespace"]: entry for entry in response.json()["data"]}
    assert set(stats) == {"product", "user", "order", "rate-limit"}
    assert stats["order"] == {"namespace": "order", "hits": 0, "misses": 0, "numberOfKeys": 1}
    assert stats["rate-limit"]["numberOfKeys"] >= 1


def test_flush_namespace(client: TestClient, app: FastAPI, admin_headers) -> None:
    app.state.caches["product"].set(key="top-rated", value=[])

    response = client.delete(f"{CACHE_URL}/product", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": None}
    assert app.state.caches["product"].stats().number_of_keys == 0


def test_flush_unknown_namespace(client: TestClient, admin_headers) -> None:
    response = client.delete(f"{CACHE_URL}/sessions", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Cache namespace not found"


def test_cache_routes_require_admin(client: TestClient, customer_headers) -> None:
    assert client.get(f"{CACHE_URL}/stats", headers=customer_headers).status_code == 401
    assert client.delete(f"{CACHE_URL}/product").status_code == 401
