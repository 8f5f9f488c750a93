"""Pytest configuration for API integration tests.

These run the full FastAPI app over httpx.ASGITransport against the
in-memory backend, with real signed bearer tokens.
"""

import httpx
import pytest

from app.main import create_app

BASE_URL = "http://test"


@pytest.fixture
def client_app():
    """Create a fresh FastAPI app per test."""
    return create_app()


@pytest.fixture
async def client(client_app):
    transport = httpx.ASGITransport(app=client_app)
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as client:
        yield client
