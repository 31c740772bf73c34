"""
Modulith Backend — Application Factory Tests
=============================================

Error handlers, /health, and the startup connectivity check (a failed check
is logged and the app keeps serving).
"""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from modulith import __version__
from modulith.database import Database
from modulith.main import check_database, create_app


def _client(app, **transport_kwargs) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app, **transport_kwargs), base_url="http://test")


class TestErrorHandlers:

    @pytest.mark.asyncio
    async def test_unexpected_error_is_500_with_stack_outside_production(self, app):
        # ServerErrorMiddleware re-raises after responding; keep the response
        with patch(
            "modulith.modules.tasks.service.get_task_stats",
            new=AsyncMock(side_effect=RuntimeError("boom")),
        ):
            async with _client(app, raise_app_exceptions=False) as client:
                response = await client.get("/tasks/stats", headers={"X-Request-ID": "req-500"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal Server Error"
        assert body["request_id"] == "req-500"
        assert any("RuntimeError: boom" in line for line in body["stack"])

    @pytest.mark.asyncio
    async def test_production_hides_stack(self, test_settings, database):
        settings = test_settings.model_copy(update={"environment": "production"})
        app = create_app(settings=settings, database=database)

        with patch(
            "modulith.modules.tasks.service.get_task_stats",
            new=AsyncMock(side_effect=RuntimeError("boom")),
        ):
            async with _client(app, raise_app_exceptions=False) as client:
                response = await client.get("/tasks/stats")

        assert response.status_code == 500
        assert "stack" not in response.json()
        assert response.json()["error"] == "Internal Server Error"

    @pytest.mark.asyncio
    async def test_database_error_is_500(self, test_settings, empty_database):
        app = create_app(settings=test_settings, database=empty_database)

        async with _client(app) as client:
            response = await client.get("/tasks", headers={"X-Request-ID": "db-down"})

        assert response.status_code == 500
        assert response.json()["error"] == "Internal Server Error"
        assert response.json()["request_id"] == "db-down"
        assert response.headers["X-Request-ID"] == "db-down"


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "version": __version__,
            "database": "connected",
        }

    @pytest.mark.asyncio
    async def test_unreachable_store_is_503(self, test_settings, tmp_path):
        database = Database(f"sqlite+aiosqlite:///{tmp_path}/missing-dir/store.db")
        app = create_app(settings=test_settings, database=database)

        async with _client(app) as client:
            response = await client.get("/health")
        await database.dispose()

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"


class TestStartup:

    @pytest.mark.asyncio
    async def test_lifespan_schedules_connectivity_check(self, app):
        async with app.router.lifespan_context(app):
            assert await app.state.database_check is True

    @pytest.mark.asyncio
    async def test_failed_check_is_not_fatal(self, tmp_path):
        database = Database(f"sqlite+aiosqlite:///{tmp_path}/missing-dir/store.db")

        assert await check_database(database) is False
        await database.dispose()

    @pytest.mark.asyncio
    async def test_app_serves_requests_after_failed_check(self, test_settings, tmp_path, caplog):
        database = Database(f"sqlite+aiosqlite:///{tmp_path}/missing-dir/store.db")
        app = create_app(settings=test_settings, database=database)

        # basicConfig(force=True) would detach the capture handler
        with patch("modulith.main.setup_logging"):
            async with app.router.lifespan_context(app):
                assert await app.state.database_check is False

                async with _client(app) as client:
                    health = await client.get("/health")
                    tasks = await client.get("/tasks")

        assert any(
            r.name == "modulith.main" and "Database connection failed" in r.getMessage()
            for r in caplog.records
        )
        assert health.status_code == 503
        assert health.json()["database"] == "disconnected"
        assert tasks.status_code == 500
        assert tasks.json()["error"] == "Internal Server Error"
