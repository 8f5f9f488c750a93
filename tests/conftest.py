"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
import sys
from decimal import Decimal
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

ROOT = Path(__file__).resolve().parents[1]

# Add app to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Set test environment variables before importing app
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_BACKEND", "memory")
os.environ.setdefault("AUTH_SECRET_KEY", "cashcard-test-secret")
os.environ.setdefault("OTEL_OTLP_ENDPOINT", "")

from app.core.auth import CARD_OWNER, AuthenticatedUser, create_access_token
from app.core.config import get_settings
from app.persistence.memory_store import reset_memory_store

# =============================================================================
# Principals (LeudiX1 and Sarah own cards; Lucy2 lacks the card-owner role)
# =============================================================================

LEUDIX1 = "LeudiX1"
SARAH = "Sarah"
LUCY2 = "Lucy2"


@pytest.fixture(autouse=True)
def clean_state():
    """Fresh settings and an empty in-memory store for every test."""
    get_settings.cache_clear()
    reset_memory_store()
    yield
    reset_memory_store()
    get_settings.cache_clear()


@pytest.fixture
def leudix1() -> AuthenticatedUser:
    return AuthenticatedUser(user_id=LEUDIX1, roles=[CARD_OWNER])


@pytest.fixture
def sarah() -> AuthenticatedUser:
    return AuthenticatedUser(user_id=SARAH, roles=[CARD_OWNER])


@pytest.fixture
def lucy2() -> AuthenticatedUser:
    return AuthenticatedUser(user_id=LUCY2, roles=[])


def bearer(subject: str, roles: list[str] | None = None) -> dict[str, str]:
    """Authorization header carrying a freshly signed token."""
    return {"Authorization": f"Bearer {create_access_token(subject, roles=roles)}"}


@pytest.fixture
def auth_headers():
    """Factory for Authorization headers of arbitrary principals."""
    return bearer


@pytest.fixture
def leudix1_headers() -> dict[str, str]:
    return bearer(LEUDIX1)


@pytest.fixture
def sarah_headers() -> dict[str, str]:
    return bearer(SARAH)


@pytest.fixture
def lucy2_headers() -> dict[str, str]:
    return bearer(LUCY2, roles=[])


@pytest.fixture
def mock_session() -> AsyncMock:
    """AsyncSession stand-in for repository tests."""
    session = AsyncMock()
    session.execute = AsyncMock()
    return session


def make_result(rows: list[tuple] | None = None, scalar=None) -> MagicMock:
    """Build a SQLAlchemy Result double returning ``rows``."""
    rows = rows or []
    result = MagicMock()
    result.fetchall.return_value = rows
    result.fetchone.return_value = rows[0] if rows else None
    result.one.return_value = rows[0] if rows else None
    result.scalar_one.return_value = scalar
    return result


@pytest.fixture
def result_factory():
    """Factory for SQLAlchemy Result doubles."""
    return make_result


@pytest.fixture
def sample_card() -> dict:
    return {"id": 99, "amount": Decimal("123.45"), "owner": LEUDIX1}
