from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from civmanager.errors import InvalidOperation
from civmanager.services.auth_service import (
    ACCESS,
    RECOVERY,
    create_access_token,
    create_recovery_token,
    create_user,
    decode_token,
    hash_password,
    verify_password,
)
from civmanager.models.user import User


async def register_user(client: AsyncClient, email="alice@example.com", username="alice", password="secret123"):
    return await client.post("/auth/register", json={"email": email, "username": username, "password": password})


async def login_user(client: AsyncClient, email="alice@example.com", password="secret123"):
    return await client.post("/auth/login", json={"email": email, "password": password})


class TestRegister:
    async def test_register_success(self, db_client: AsyncClient):
        resp = await register_user(db_client)
        assert resp.status_code == 201
        data = resp.json()
        assert data["email"] == "alice@example.com"
        assert data["username"] == "alice"
        assert "id" in data
        assert "hashed_password" not in data

    async def test_register_duplicate_email(self, db_client: AsyncClient):
        await register_user(db_client)
        resp = await register_user(db_client)
        assert resp.status_code == 409
        assert "Email" in resp.json()["detail"]

    async def test_register_duplicate_username(self, db_client: AsyncClient):
        await register_user(db_client, email="alice@example.com", username="alice")
        resp = await register_user(db_client, email="other@example.com", username="alice")
        assert resp.status_code == 409
        assert "Username" in resp.json()["detail"]

    async def test_register_concurrent_duplicate_conflicts(self, db_client: AsyncClient):
        await register_user(db_client)
        # Both pre-insert checks pass, as when two requests race
        with patch("civmanager.routers.auth.get_user_by_email", new=AsyncMock(return_value=None)), patch(
            "civmanager.routers.auth.get_user_by_username", new=AsyncMock(return_value=None)
        ):
            resp = await register_user(db_client)
        assert resp.status_code == 409

        resp = await login_user(db_client)
        assert resp.status_code == 200

    async def test_create_user_duplicate_raises(self, db_session):
        await create_user(db_session, email="dup@example.com", username="dup", password="secret123")
        with pytest.raises(InvalidOperation):
            await create_user(db_session, email="dup@example.com", username="dup2", password="secret123")

    async def test_register_invalid_email(self, db_client: AsyncClient):
        resp = await db_client.post(
            "/auth/register", json={"email": "not-an-email", "username": "bob", "password": "password1"}
        )
        assert resp.status_code == 422

    async def test_register_short_password(self, db_client: AsyncClient):
        resp = await register_user(db_client, password="short")
        assert resp.status_code == 422


class TestLogin:
    async def test_login_success(self, db_client: AsyncClient):
        await register_user(db_client)
        resp = await login_user(db_client)
        assert resp.status_code == 200
        data = resp.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"

    async def test_login_wrong_password(self, db_client: AsyncClient):
        await register_user(db_client)
        resp = await login_user(db_client, password="wrongpassword")
        assert resp.status_code == 401

    async def test_login_unknown_email(self, db_client: AsyncClient):
        resp = await login_user(db_client, email="nobody@example.com")
        assert resp.status_code == 401


class TestMe:
    async def test_me_success(self, db_client: AsyncClient):
        await register_user(db_client)
        login_resp = await login_user(db_client)
        token = login_resp.json()["access_token"]

        resp = await db_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["email"] == "alice@example.com"
        assert data["username"] == "alice"

    async def test_me_no_token(self, db_client: AsyncClient):
        resp = await db_client.get("/auth/me")
        assert resp.status_code == 401

    async def test_me_invalid_token(self, db_client: AsyncClient):
        resp = await db_client.get("/auth/me", headers={"Authorization": "Bearer invalidtoken"})
        assert resp.status_code == 401


class TestLogout:
    async def test_logout_success(self, db_client: AsyncClient):
        await register_user(db_client)
        login_resp = await login_user(db_client)
        token = login_resp.json()["access_token"]

        resp = await db_client.post("/auth/logout", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 204

    async def test_logout_no_token(self, db_client: AsyncClient):
        resp = await db_client.post("/auth/logout")
        assert resp.status_code == 401


class TestTokens:
    def test_password_hash_roundtrip(self):
        hashed = hash_password("hunter22")
        assert hashed != "hunter22"
        assert verify_password("hunter22", hashed)
        assert not verify_password("hunter23", hashed)

    def test_access_token_claims(self):
        user = User(id=7, email="t@example.com", username="t", hashed_password="x", token_version=3)
        claims = decode_token(create_access_token(user))
        assert claims.user_id == 7
        assert claims.purpose == ACCESS
        assert claims.version == 3

    def test_recovery_token_purpose(self):
        user = User(id=7, email="t@example.com", username="t", hashed_password="x", token_version=0)
        claims = decode_token(create_recovery_token(user))
        assert claims.purpose == RECOVERY

    def test_garbage_token_decodes_to_none(self):
        assert decode_token("not-a-jwt") is None
