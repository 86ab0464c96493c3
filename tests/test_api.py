"""Tests for FastAPI health and version endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from shelfmap.api.main import app


@pytest.fixture
async def client() -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


class TestHealthEndpoint:
    """GET /health always answers 200; the database check may be degraded."""

    @pytest.mark.anyio
    async def test_health_returns_200(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200

    @pytest.mark.anyio
    async def test_health_response_body(self, client: AsyncClient) -> None:
        data = (await client.get("/health")).json()
        assert data["status"] in ("ok", "degraded")
        assert data["checks"]["api"] is True
        assert "environment" in data


class TestVersionEndpoint:

    @pytest.mark.anyio
    async def test_version_response_body(self, client: AsyncClient) -> None:
        response = await client.get("/api/version")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Shelfmap"
        assert "version" in data
        assert "environment" in data


class TestErrorEnvelope:

    @pytest.mark.anyio
    async def test_unknown_route_uses_error_envelope(self, client: AsyncClient) -> None:
        response = await client.get("/v1/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}
