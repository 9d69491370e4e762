"""Tests for the HTTP API routes.

Uses httpx ASGITransport, which does not run the lifespan, so no store
connection or scheduler is started.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from spotboard.core.exceptions import StoreUnavailableError
from spotboard.data.models.token import TokenSyncResult


@pytest.fixture
async def api_client():
    """Async HTTP client bound to a fresh app."""
    from spotboard.api.app import create_app

    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


class TestRefreshRoute:
    """Tests for POST /api/tokens/refresh."""

    @pytest.mark.asyncio
    async def test_refresh_success(self, api_client, mocker):
        """A finished cycle returns 200 with its summary."""
        scheduler = MagicMock()
        scheduler.trigger = AsyncMock(
            return_value=TokenSyncResult(tokens_listed=3, inserted=1, updated=2)
        )
        mocker.patch(
            "spotboard.api.routes.tokens.get_token_sync_scheduler",
            new_callable=AsyncMock,
            return_value=scheduler,
        )

        response = await api_client.post("/api/tokens/refresh")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["result"]["tokens_listed"] == 3
        assert body["result"]["updated"] == 2
        scheduler.trigger.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_refresh_failure(self, api_client, mocker):
        """An aborted cycle returns 500 with success false."""
        scheduler = MagicMock()
        scheduler.trigger = AsyncMock(side_effect=StoreUnavailableError("Supabase: down"))
        mocker.patch(
            "spotboard.api.routes.tokens.get_token_sync_scheduler",
            new_callable=AsyncMock,
            return_value=scheduler,
        )

        response = await api_client.post("/api/tokens/refresh")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert "Supabase: down" in body["message"]

    @pytest.mark.asyncio
    async def test_refresh_store_unreachable_at_wiring(self, api_client, mocker):
        """Failure to build the scheduler is also reported as 500."""
        mocker.patch(
            "spotboard.api.routes.tokens.get_token_sync_scheduler",
            new_callable=AsyncMock,
            side_effect=StoreUnavailableError("Supabase: Connection refused"),
        )

        response = await api_client.post("/api/tokens/refresh")

        assert response.status_code == 500
        assert response.json()["success"] is False


class TestHealthRoute:
    """Tests for GET /health."""

    @pytest.mark.asyncio
    async def test_health_disconnected(self, api_client, mocker):
        """Without connections the status is degraded."""
        mocker.patch("spotboard.data.supabase.client._supabase_client", None)
        mocker.patch("spotboard.scheduler.jobs._token_sync_scheduler", None)
        mocker.patch("spotboard.scheduler.jobs._rate_limiter", None)

        response = await api_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["databases"]["supabase"]["healthy"] is False
        assert body["scheduler"]["running"] is False
        assert body["rate_limiter"] is None

    @pytest.mark.asyncio
    async def test_health_connected(self, api_client, mocker):
        """Connected store, scheduler status and limiter stats are reported."""
        supabase = MagicMock()
        supabase.health_check = AsyncMock(return_value={"status": "connected", "healthy": True})
        scheduler = MagicMock()
        scheduler.status.return_value = {"running": True, "in_progress": False}
        limiter = MagicMock()
        limiter.stats.return_value = {"window_weight": 40, "weight_budget": 1200}
        mocker.patch("spotboard.data.supabase.client._supabase_client", supabase)
        mocker.patch("spotboard.scheduler.jobs._token_sync_scheduler", scheduler)
        mocker.patch("spotboard.scheduler.jobs._rate_limiter", limiter)

        response = await api_client.get("/health")

        body = response.json()
        assert body["status"] == "ok"
        assert body["scheduler"] == {"enabled": True, "running": True, "in_progress": False}
        assert body["rate_limiter"]["window_weight"] == 40
