"""Integration test fixtures: the ASGI app over the in-memory database.

Uses httpx's ASGITransport, so no server or lifespan is started.
"""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine

from src.crm.core.health import reset_health_cache
from src.crm.core.security import create_access_token
from src.crm.core.shutdown import request_tracker
from src.crm.main import create_app


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token('user-1')}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    token = create_access_token("admin-1", extra_claims={"role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def app(engine: AsyncEngine) -> FastAPI:
    """Fresh app per test; tests may set ``app.dependency_overrides``."""
    return create_app()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Anonymous client; pass ``headers=auth_headers`` per request."""
    request_tracker.reset()
    reset_health_cache()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    request_tracker.reset()
    reset_health_cache()


@pytest.fixture
async def authed_client(client: AsyncClient, auth_headers: dict[str, str]) -> AsyncClient:
    client.headers.update(auth_headers)
    return client
