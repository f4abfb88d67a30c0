"""Integration tests for the auth flow (requires running PG + Redis).

Run: RUN_INTEGRATION=1 pytest tests/integration/test_auth_flow.py -v
Pre-condition: PostgreSQL + Redis up, `alembic upgrade head` applied
"""

import uuid

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio(loop_scope="session")

PASSWORD = "TestPass123"


def unique_user() -> dict[str, str]:
    uid = uuid.uuid4().hex[:8]
    return {
        "username": f"testuser_{uid}",
        "email": f"test_{uid}@example.com",
        "password": PASSWORD,
    }


class TestRegister:
    async def test_register_grants_welcome_bonus(self, client: AsyncClient) -> None:
        user = unique_user()
        resp = await client.post("/api/v1/auth/register", json=user)
        assert resp.status_code == 201
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["user"]["username"] == user["username"]
        assert body["data"]["user"]["ap_coins"] == 1000
        assert body["data"]["user"]["role"] == "USER"
        assert body["data"]["welcome_bonus"] == 1000
        assert "request_id" in body

    async def test_welcome_bonus_is_on_the_ledger(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        login = await client.post(
            "/api/v1/auth/login", json={"username": user["username"], "password": PASSWORD}
        )
        headers = {"Authorization": f"Bearer {login.json()['data']['access_token']}"}

        resp = await client.get("/api/v1/wallet/transactions", headers=headers)
        items = resp.json()["data"]["items"]
        assert len(items) == 1
        assert items[0]["tx_type"] == "REWARD"
        assert items[0]["amount"] == 1000
        assert items[0]["balance_after"] == 1000

    async def test_register_duplicate_username(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post(
            "/api/v1/auth/register",
            json={**user, "email": f"other_{uuid.uuid4().hex[:6]}@example.com"},
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == 1001

    async def test_register_duplicate_email(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post(
            "/api/v1/auth/register",
            json={**user, "username": f"other_{uuid.uuid4().hex[:6]}"},
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == 1002

    async def test_register_weak_password(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/v1/auth/register", json={**unique_user(), "password": "onlyletters"}
        )
        assert resp.status_code == 422


class TestLogin:
    async def test_login_and_me(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        login = await client.post(
            "/api/v1/auth/login", json={"username": user["username"], "password": PASSWORD}
        )
        assert login.status_code == 200
        data = login.json()["data"]
        assert data["token_type"] == "Bearer"

        me = await client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"}
        )
        assert me.status_code == 200
        assert me.json()["data"]["username"] == user["username"]

    async def test_wrong_password(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post(
            "/api/v1/auth/login", json={"username": user["username"], "password": "Wrong1234"}
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == 1003

    async def test_refresh_issues_new_access_token(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        login = await client.post(
            "/api/v1/auth/login", json={"username": user["username"], "password": PASSWORD}
        )
        refresh_token = login.json()["data"]["refresh_token"]

        resp = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
        assert resp.status_code == 200
        assert resp.json()["data"]["access_token"]
