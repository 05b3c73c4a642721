"""Admin auth and authorization tests."""

import pytest
from httpx import AsyncClient

from app.config import settings


@pytest.fixture
def admin_secret(monkeypatch):
    monkeypatch.setattr(settings, "admin_secret", "s3cret")
    return "s3cret"


@pytest.mark.asyncio
async def test_auth_exchanges_secret_for_admin_token(client: AsyncClient, admin_secret):
    resp = await client.post("/api/admin/auth", json={"password": admin_secret})
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    resp = await client.get("/api/admin/categories", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()[0]["slug"] == "claude-code-plugins"


@pytest.mark.asyncio
async def test_auth_wrong_password(client: AsyncClient, admin_secret):
    resp = await client.post("/api/admin/auth", json={"password": "guess"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_auth_not_configured(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "admin_secret", "")
    resp = await client.post("/api/admin/auth", json={"password": ""})
    assert resp.status_code == 503


@pytest.mark.asyncio
@pytest.mark.parametrize("path", [
    "/api/admin/import",
    "/api/admin/backfill/categories",
    "/api/admin/backfill/clients",
    "/api/admin/backfill/tags",
])
async def test_admin_routes_require_token(client: AsyncClient, path):
    resp = await client.post(path, json={"url": "acme/tools"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_admin_routes_reject_regular_users(client: AsyncClient, user_headers):
    resp = await client.post("/api/admin/import", json={"url": "acme/tools"}, headers=user_headers)
    assert resp.status_code == 403
    resp = await client.get("/api/admin/categories", headers=user_headers)
    assert resp.status_code == 403
