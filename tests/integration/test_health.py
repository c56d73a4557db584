"""Tests for the health endpoint."""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.integration


async def test_degraded_when_a_type_has_no_terminal_phase(client: AsyncClient, phases):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["database"] == "healthy"
    assert data["terminal_phases"] == {"faturamento": True, "transferencia_cota": False}
    assert data["status"] == "degraded"


async def test_second_call_is_cached(client: AsyncClient, phases):
    await client.get("/health")

    response = await client.get("/health")

    assert response.json()["cached"] is True


async def test_draining_during_shutdown(client: AsyncClient):
    from src.crm.core.shutdown import request_tracker

    await request_tracker.start_shutdown()

    response = await client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "draining"
