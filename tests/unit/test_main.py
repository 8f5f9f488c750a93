"""Unit tests for main application module."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI

from app.core.config import get_settings
from app.main import (
    create_app,
    lifespan,
    run,
    setup_telemetry,
)

pytestmark = pytest.mark.unit


class TestCreateApp:
    """Test create_app function."""

    def test_create_app_returns_fastapi(self):
        app = create_app()
        assert isinstance(app, FastAPI)
        assert app.title == "Cash Card API"

    def test_create_app_includes_routers(self):
        route_paths = {r.path for r in create_app().routes}
        assert {"/cashcards", "/cashcards/{card_id}", "/health", "/health/ready"} <= route_paths

    def test_api_prefix_applied(self, monkeypatch):
        monkeypatch.setenv("APP_API_PREFIX", "api/")
        route_paths = {r.path for r in create_app().routes}
        assert "/api/cashcards" in route_paths
        assert "/api/health" in route_paths

    def test_docs_disabled_in_prod(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "prod")
        monkeypatch.setenv("AUTH_SECRET_KEY", "prod-secret-for-tests")
        app = create_app()
        assert app.docs_url is None
        assert app.openapi_url is None

    def test_docs_enabled_outside_prod(self):
        assert create_app().docs_url == "/docs"


class TestLifespan:
    async def test_memory_backend_never_touches_database(self):
        app = create_app()
        with (
            patch("app.main.get_engine") as get_engine,
            patch("app.main.reset_engine", new_callable=AsyncMock) as reset_engine,
        ):
            async with lifespan(app):
                assert app.state.settings is get_settings()

        get_engine.assert_not_called()
        reset_engine.assert_not_awaited()

    async def test_postgres_backend_creates_schema_when_enabled(self, monkeypatch):
        monkeypatch.setenv("DATABASE_BACKEND", "postgres")
        monkeypatch.setenv("DATABASE_AUTO_CREATE_SCHEMA", "true")
        engine = MagicMock()
        app = create_app()

        with (
            patch("app.main.get_engine", return_value=engine),
            patch("app.main.create_schema", new_callable=AsyncMock) as create_schema,
            patch("app.main.reset_engine", new_callable=AsyncMock) as reset_engine,
        ):
            async with lifespan(app):
                create_schema.assert_awaited_once_with(engine)

        reset_engine.assert_awaited_once()

    async def test_postgres_backend_skips_schema_by_default(self, monkeypatch):
        monkeypatch.setenv("DATABASE_BACKEND", "postgres")
        app = create_app()

        with (
            patch("app.main.get_engine", return_value=MagicMock()),
            patch("app.main.create_schema", new_callable=AsyncMock) as create_schema,
            patch("app.main.reset_engine", new_callable=AsyncMock),
        ):
            async with lifespan(app):
                pass

        create_schema.assert_not_awaited()


class TestTelemetry:
    def test_no_endpoint_is_noop(self):
        settings = MagicMock()
        settings.observability.otlp_endpoint = None
        with patch("app.main.FastAPIInstrumentor") as instrumentor:
            setup_telemetry(FastAPI(), settings)
        instrumentor.instrument_app.assert_not_called()

    def test_endpoint_instruments_app(self):
        settings = MagicMock()
        settings.observability.otlp_endpoint = "http://collector:4317"
        settings.observability.otlp_insecure = True
        settings.observability.service_name = "cashcard-service"
        app = FastAPI()
        with (
            patch("app.main.OTLPSpanExporter"),
            patch("app.main.trace"),
            patch("app.main.FastAPIInstrumentor") as instrumentor,
        ):
            setup_telemetry(app, settings)
        instrumentor.instrument_app.assert_called_once_with(app)


class TestRun:
    def test_run_uses_app_factory(self):
        with patch("uvicorn.run") as uvicorn_run:
            run()
        args, kwargs = uvicorn_run.call_args
        assert args[0] == "app.main:create_app"
        assert kwargs["factory"] is True
        assert kwargs["port"] == 8080
        assert kwargs["log_level"] == "info"
