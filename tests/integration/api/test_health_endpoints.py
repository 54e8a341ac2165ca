"""
Integration tests for health check endpoints.

Tests the /, /health, /ready, and /live endpoints.
"""

from unittest.mock import AsyncMock, patch

import pytest


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_root_endpoint(self, async_client):
        response = await async_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "running"
        assert data["documents"].endswith("/documents")

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_health_endpoint(self, async_client):
        """Test /health endpoint returns 200 OK with both stores up."""
        response = await async_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"] == {"database": True, "blob_store": True}

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_health_database_down(self, app, async_client):
        with patch.object(app.state.db, "test_connection", AsyncMock(return_value=False)):
            response = await async_client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["components"]["database"] is False

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_health_blob_store_down(self, app, async_client, upload_dir):
        upload_dir.rmdir()

        response = await async_client.get("/health")

        assert response.status_code == 503
        assert response.json()["components"]["blob_store"] is False

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_ready_endpoint_success(self, async_client):
        response = await async_client.get("/ready")

        assert response.status_code == 200
        assert response.json()["ready"] is True

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_ready_endpoint_database_unavailable(
        self, app, async_client, mock_database_manager
    ):
        """Test /ready endpoint when database is unavailable."""
        mock_database_manager.test_connection = AsyncMock(return_value=False)
        real_db = app.state.db
        app.state.db = mock_database_manager
        try:
            response = await async_client.get("/ready")
        finally:
            app.state.db = real_db

        assert response.status_code == 503
        assert response.json()["ready"] is False

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_live_endpoint(self, async_client):
        """Test /live endpoint returns 200 OK."""
        response = await async_client.get("/live")

        assert response.status_code == 200
        assert response.json()["alive"] is True
