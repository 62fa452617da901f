"""
Tests for sign-up, login, password reset and user administration.
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from propertyhub.models.user import UserRole
from propertyhub.repositories.user import UserRepository
from propertyhub.utils.auth import create_access_token, verify_password
from tests.conftest import PropertyFactory, UserFactory, auth_headers


class TestSignUp:
    """Test public and admin user creation."""

    @pytest.mark.asyncio
    async def test_public_sign_up_returns_token(self, async_client: AsyncClient):
        response = await async_client.post("/api/users", json={
            "name": "Nadia Karim",
            "email": "Nadia@Example.com",
            "password": "secret123",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["data"]["email"] == "nadia@example.com"
        assert body["data"]["role"] == "user"
        assert body["data"]["firstName"] == "Nadia"
        assert body["data"]["lastName"] == "Karim"
        assert "hashedPassword" not in body["data"]
        assert body["token"]

    @pytest.mark.asyncio
    async def test_elevated_role_requires_admin(self, async_client: AsyncClient):
        response = await async_client.post("/api/users", json={
            "name": "Would-be Agent",
            "email": "agent2@example.com",
            "password": "secret123",
            "role": "agent",
        })

        assert response.status_code == 403
        assert response.json()["message"] == "Insufficient permissions to create agent accounts"

    @pytest.mark.asyncio
    async def test_admin_creates_agent_without_token_in_response(self, async_client: AsyncClient, admin_headers):
        response = await async_client.post(
            "/api/users",
            json={"name": "New Agent", "email": "new.agent@example.com", "password": "secret123", "role": "agent"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["role"] == "agent"
        assert "token" not in response.json()

    @pytest.mark.asyncio
    async def test_duplicate_email(self, async_client: AsyncClient, agent_user):
        response = await async_client.post("/api/users", json={
            "name": "Copy",
            "email": "agent@example.com",
            "password": "secret123",
        })

        assert response.status_code == 409
        assert response.json()["message"] == "User with this email already exists"

    @pytest.mark.asyncio
    async def test_short_password(self, async_client: AsyncClient):
        response = await async_client.post("/api/users", json={
            "name": "Short",
            "email": "short@example.com",
            "password": "abc",
        })

        assert response.status_code == 400
        assert response.json()["message"] == "Password must be at least 6 characters long"


class TestLogin:
    """Test credential checks."""

    @pytest.mark.asyncio
    async def test_login_success(self, async_client: AsyncClient, db_session, agent_user):
        response = await async_client.post("/api/users/login", json={
            "email": "AGENT@example.com",
            "password": "testpassword123",
        })

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["user"]["firstName"] == "Amira"
        assert body["user"]["lastName"] == "Haddad"
        assert body["user"]["role"] == "agent"
        assert body["user"]["token"]

        await db_session.refresh(agent_user)
        assert agent_user.last_login is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password", [
        ("agent@example.com", "wrong-password"),
        ("ghost@example.com", "testpassword123"),
    ])
    async def test_bad_credentials(self, async_client: AsyncClient, agent_user, email, password):
        """Unknown accounts and wrong passwords answer identically."""
        response = await async_client.post("/api/users/login", json={"email": email, "password": password})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_inactive_account_cannot_login(self, async_client: AsyncClient, db_session):
        await UserFactory.create_user(db_session, email="inactive@example.com", is_active=False)

        response = await async_client.post("/api/users/login", json={
            "email": "inactive@example.com",
            "password": "testpassword123",
        })

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me(self, async_client: AsyncClient, agent_user):
        response = await async_client.get("/api/users/me", headers=auth_headers(agent_user))

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "agent@example.com"

    @pytest.mark.asyncio
    async def test_expired_token(self, async_client: AsyncClient, agent_user):
        token = create_access_token(
            user_id=agent_user.id,
            email=agent_user.email,
            role=agent_user.role,
            expires_delta=timedelta(minutes=-1),
        )

        response = await async_client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Token has expired"


class TestPasswordReset:
    """Test the forgot/reset password flow."""

    @pytest.mark.asyncio
    async def test_forgot_password_does_not_reveal_accounts(self, async_client: AsyncClient, agent_user):
        known = await async_client.post("/api/users/forgot-password", json={"email": "agent@example.com"})
        unknown = await async_client.post("/api/users/forgot-password", json={"email": "ghost@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert "resetToken" not in known.json()

    @pytest.mark.asyncio
    async def test_reset_password_with_issued_token(self, async_client: AsyncClient, db_session, agent_user):
        await async_client.post("/api/users/forgot-password", json={"email": "agent@example.com"})
        await db_session.refresh(agent_user)
        token = agent_user.reset_token
        assert token and len(token) == 64

        response = await async_client.post(f"/api/users/reset-password/{token}", json={"password": "new-secret"})

        assert response.status_code == 200
        await db_session.refresh(agent_user)
        assert agent_user.reset_token is None
        assert verify_password("new-secret", agent_user.hashed_password)

        reused = await async_client.post(f"/api/users/reset-password/{token}", json={"password": "another1"})
        assert reused.status_code == 400
        assert reused.json()["message"] == "Invalid or expired reset token"

    @pytest.mark.asyncio
    async def test_expired_reset_token(self, async_client: AsyncClient, db_session, agent_user):
        await UserRepository(db_session).update(agent_user.id, {
            "reset_token": "a" * 64,
            "reset_token_expiry": datetime.now(timezone.utc) - timedelta(minutes=1),
        })

        response = await async_client.post(f"/api/users/reset-password/{'a' * 64}", json={"password": "new-secret"})

        assert response.status_code == 400


class TestUserAdministration:
    """Test admin-only user management."""

    @pytest.mark.asyncio
    async def test_non_admin_is_forbidden(self, async_client: AsyncClient, agent_user):
        response = await async_client.get("/api/users", headers=auth_headers(agent_user))

        assert response.status_code == 403
        assert response.json()["message"] == "Insufficient permissions to access admin resources"

    @pytest.mark.asyncio
    async def test_list_filter_by_role(self, async_client: AsyncClient, admin_headers, agent_user, db_session):
        await UserFactory.create_user(db_session, email="buyer@example.com")

        response = await async_client.get("/api/users", params={"role": "agent"}, headers=admin_headers)

        body = response.json()
        assert [u["email"] for u in body["data"]] == ["agent@example.com"]
        assert body["pagination"] == {"currentPage": 1, "totalPages": 1, "totalItems": 1, "itemsPerPage": 10}

    @pytest.mark.asyncio
    async def test_invalid_role_filter(self, async_client: AsyncClient, admin_headers):
        response = await async_client.get("/api/users", params={"role": "owner"}, headers=admin_headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_search(self, async_client: AsyncClient, admin_headers, agent_user):
        response = await async_client.get("/api/users", params={"search": "haddad"}, headers=admin_headers)

        assert [u["id"] for u in response.json()["data"]] == [agent_user.id]

    @pytest.mark.asyncio
    async def test_update_and_change_role(self, async_client: AsyncClient, admin_headers, agent_user):
        updated = await async_client.put(
            f"/api/users/{agent_user.id}", json={"phone": "+971501234567"}, headers=admin_headers
        )
        promoted = await async_client.patch(
            f"/api/users/{agent_user.id}/role", json={"role": "ADMIN"}, headers=admin_headers
        )

        assert updated.json()["data"]["phone"] == "+971501234567"
        assert promoted.json()["data"]["role"] == "admin"
        assert promoted.json()["message"] == "User role updated to admin"

    @pytest.mark.asyncio
    async def test_empty_update(self, async_client: AsyncClient, admin_headers, agent_user):
        response = await async_client.put(f"/api/users/{agent_user.id}", json={}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "No valid fields to update"

    @pytest.mark.asyncio
    async def test_delete_user_with_listings_is_refused(
        self, async_client: AsyncClient, admin_headers, agent_user, db_session
    ):
        await PropertyFactory.create_property(db_session, agent_id=agent_user.id)

        response = await async_client.delete(f"/api/users/{agent_user.id}", headers=admin_headers)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_delete_user(self, async_client: AsyncClient, admin_headers, db_session):
        user = await UserFactory.create_user(db_session, role=UserRole.USER)

        response = await async_client.delete(f"/api/users/{user.id}", headers=admin_headers)
        missing = await async_client.get(f"/api/users/{user.id}", headers=admin_headers)

        assert response.status_code == 200
        assert missing.status_code == 404
        assert missing.json()["message"] == "User not found"
