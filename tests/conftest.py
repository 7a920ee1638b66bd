"""Fixtures shared by unit and integration tests."""

# ruff: noqa: E402  -- config.settings reads the environment at import time

import os

os.environ.setdefault("JWT_SECRET", "wager-engine-test-secret")
os.environ.setdefault("MARGIN_BUFFER_BPS", "0")

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app


@pytest.fixture
async def client() -> AsyncClient:
    """In-process client for the FastAPI app; dependency overrides are reset after each test."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
