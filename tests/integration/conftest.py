"""Integration-test fixtures.

Requires a running PostgreSQL DB with migrations applied and Redis
(docker compose up && alembic upgrade head), then RUN_INTEGRATION=1 pytest.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.
"""

import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.pm_common.enums import UserRole
from src.pm_gateway.auth.jwt_handler import create_access_token


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if os.environ.get("RUN_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set RUN_INTEGRATION=1 with PostgreSQL and Redis running")
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(skip)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client: keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(scope="session")
def admin_headers() -> dict[str, str]:
    token = create_access_token(f"admin-{uuid.uuid4().hex[:8]}", role=UserRole.ADMIN)
    return {"Authorization": f"Bearer {token}"}
