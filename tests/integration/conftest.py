"""Integration-test fixtures.

These tests talk to a real PostgreSQL + Redis (after `alembic upgrade head`) and
are skipped unless RUN_INTEGRATION=1.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.
"""

import os
import uuid
from collections.abc import Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app

PASSWORD = "TestPass123"


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if os.environ.get("RUN_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set RUN_INTEGRATION=1 with PG + Redis running")
    for item in items:
        if "integration" in item.path.parts:
            item.add_marker(skip)


def unique_user() -> dict[str, str]:
    """Generate unique credentials to avoid test pollution."""
    uid = uuid.uuid4().hex[:8]
    return {
        "username": f"testuser_{uid}",
        "email": f"test_{uid}@example.com",
        "password": PASSWORD,
    }


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client: keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session")
async def signup(client: AsyncClient) -> Callable[[], Awaitable[tuple[str, dict[str, str]]]]:
    """Factory: register a fresh user, return (user_id, auth headers)."""

    async def _signup() -> tuple[str, dict[str, str]]:
        creds = unique_user()
        reg = await client.post("/api/v1/auth/register", json=creds)
        assert reg.status_code == 201, reg.text
        login = await client.post(
            "/api/v1/auth/login",
            json={"username": creds["username"], "password": creds["password"]},
        )
        assert login.status_code == 200, login.text
        data = login.json()["data"]
        return data["user"]["user_id"], {"Authorization": f"Bearer {data['access_token']}"}

    return _signup
