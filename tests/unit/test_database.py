"""Unit tests for database module."""

import inspect
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core import database
from app.core.config import DatabaseConfig
from app.core.database import (
    create_engine,
    create_session_factory,
    get_engine,
    get_session,
    reset_engine,
)
from app.persistence.schema import DEMO_CARDS, SCHEMA_STATEMENTS, create_schema

pytestmark = pytest.mark.unit


class TestEngine:
    def test_create_engine_uses_asyncpg_url(self):
        config = DatabaseConfig(url_app="postgresql://cards:pw@db:5432/cashcards")
        with patch.object(database, "create_async_engine") as factory:
            create_engine(config)

        args, kwargs = factory.call_args
        assert args[0].startswith("postgresql+asyncpg://")
        assert kwargs["pool_pre_ping"] is True
        assert kwargs["connect_args"]["server_settings"] == {"timezone": "UTC"}

    async def test_get_engine_is_cached_until_reset(self):
        with patch.object(database, "create_engine", return_value=AsyncMock()) as build:
            assert get_engine() is get_engine()
            build.assert_called_once()
            await reset_engine()
        assert database._engine is None


class TestSessionFactory:
    """Test session factory creation."""

    def test_create_session_factory_with_mock_engine(self):
        """Test session factory creation with mock engine."""
        mock_engine = MagicMock(spec=AsyncEngine)
        factory = create_session_factory(mock_engine)
        assert callable(factory)

    def test_get_session_is_async_generator(self):
        """Test get_session is an async generator function."""
        assert inspect.isasyncgenfunction(get_session)


class TestGetSession:
    """Commit on success, roll back on error."""

    @staticmethod
    def _factory(session):
        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=session)
        context.__aexit__ = AsyncMock(return_value=False)
        return MagicMock(return_value=context)

    async def test_commits_on_success(self):
        session = AsyncMock()
        with patch.object(database, "get_session_factory", return_value=self._factory(session)):
            gen = get_session()
            assert await gen.__anext__() is session
            with pytest.raises(StopAsyncIteration):
                await gen.__anext__()

        session.commit.assert_awaited_once()
        session.rollback.assert_not_awaited()

    async def test_rolls_back_on_error(self):
        session = AsyncMock()
        with patch.object(database, "get_session_factory", return_value=self._factory(session)):
            gen = get_session()
            await gen.__anext__()
            with pytest.raises(RuntimeError):
                await gen.athrow(RuntimeError("boom"))

        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()


class TestResetEngine:
    async def test_reset_disposes_engine(self):
        engine = AsyncMock()
        with patch.object(database, "_engine", engine):
            await reset_engine()
            engine.dispose.assert_awaited_once()
        assert database._engine is None
        assert database._session_factory is None

    async def test_reset_without_engine(self):
        await reset_engine()
        assert database._engine is None


class TestSchema:
    def test_statements_are_idempotent(self):
        assert all("IF NOT EXISTS" in statement for statement in SCHEMA_STATEMENTS)

    def test_table_definition(self):
        table = " ".join(SCHEMA_STATEMENTS[0].split())
        assert "id BIGINT GENERATED ALWAYS AS IDENTITY PRIMARY KEY" in table
        assert "amount NUMERIC NOT NULL" in table
        assert "owner TEXT NOT NULL" in table

    def test_demo_owners(self):
        assert {owner for _, owner in DEMO_CARDS} == {"LeudiX1", "Sarah", "Lucy2"}

    async def test_create_schema_runs_every_statement(self):
        conn = AsyncMock()
        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=conn)
        context.__aexit__ = AsyncMock(return_value=False)
        engine = MagicMock()
        engine.begin.return_value = context

        await create_schema(engine)

        assert conn.execute.await_count == len(SCHEMA_STATEMENTS)
