"""Tests for health check endpoints."""

import pytest
from httpx import AsyncClient


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_returns_200(self, client: AsyncClient) -> None:
        """Test that health endpoint returns 200 OK."""
        response = await client.get("/health")

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_health_returns_correct_structure(self, client: AsyncClient) -> None:
        """Test that health endpoint returns expected structure."""
        response = await client.get("/health")
        data = response.json()

        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert "timestamp" in data
        assert "environment" in data

    @pytest.mark.asyncio
    async def test_health_carries_request_id(self, client: AsyncClient) -> None:
        response = await client.get("/health", headers={"X-Request-ID": "lb-check-1"})

        assert response.headers["x-request-id"] == "lb-check-1"


class TestDetailedHealthEndpoint:
    @pytest.mark.asyncio
    async def test_reports_database(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/health/detailed")

        assert response.status_code == 200
        assert response.json()["database"] == "healthy"


class TestUnauthenticatedAPI:
    @pytest.mark.asyncio
    async def test_tasks_require_token(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/tasks")

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_rejects_bad_token(self, client: AsyncClient) -> None:
        response = await client.get(
            "/api/v1/groups", headers={"Authorization": "Bearer not.a.token"}
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_TOKEN"
