"""Integration tests for registration, login, tokens and profile."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from country_explorer.auth.jwt import create_access_token
from country_explorer.db.models import User
from tests.conftest import TEST_PASSWORD, make_settings, register_user


async def _login(client: AsyncClient, email: str, password: str):
    return await client.post("/api/v1/auth/login", json={"email": email, "password": password})


class TestRegistration:
    async def test_register_returns_user_and_tokens(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "Ada@Example.com", "password": TEST_PASSWORD, "firstName": "Ada", "lastName": "Lovelace"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"

        user = body["data"]["user"]
        assert user["email"] == "ada@example.com"
        assert user["firstName"] == "Ada"
        assert user["fullName"] == "Ada Lovelace"
        assert user["favorites"] == []
        assert "password" not in user
        assert "passwordHash" not in user

        tokens = body["data"]["tokens"]
        assert tokens["tokenType"] == "bearer"
        assert tokens["expiresIn"] == 900
        assert tokens["accessToken"] != tokens["refreshToken"]

    async def test_weak_password_rejected(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "weak@example.com", "password": "weakpass", "firstName": "Weak", "lastName": "Pass"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation error"
        assert "uppercase" in body["details"]

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "not-an-email", "password": TEST_PASSWORD, "firstName": "Ada", "lastName": "Lovelace"},
            {"email": "ada@example.com", "password": TEST_PASSWORD, "firstName": "A", "lastName": "Lovelace"},
            {"email": "ada@example.com", "password": TEST_PASSWORD, "firstName": "   ", "lastName": "Lovelace"},
            {"email": "ada@example.com", "password": TEST_PASSWORD, "firstName": "Ada", "lastName": " x "},
            {"email": "ada@example.com", "password": TEST_PASSWORD, "firstName": "Ada"},
            {"email": "ada@example.com", "firstName": "Ada", "lastName": "Lovelace"},
        ],
    )
    async def test_invalid_body_rejected(self, client: AsyncClient, payload):
        response = await client.post("/api/v1/auth/register", json=payload)
        assert response.status_code == 400
        assert response.json()["statusCode"] == 400

    @pytest.mark.parametrize("email", ["ada@example.com", "ADA@example.com", "Ada@Example.COM"])
    async def test_duplicate_email_any_case_is_conflict(self, app, client: AsyncClient, registered_user, email):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": email, "password": "An0ther!Pass", "firstName": "Other", "lastName": "Person"},
        )
        assert response.status_code == 409
        assert response.json()["error"] == "User already exists with this email"

        async with app.state.database.session_factory() as session:
            users = (await session.execute(select(User))).scalars().all()
        assert len(users) == 1
        assert users[0].first_name == "Ada"
        assert users[0].updated_at.replace(tzinfo=None) == users[0].created_at.replace(tzinfo=None)

        # Existing credentials still work
        assert (await _login(client, "ada@example.com", TEST_PASSWORD)).status_code == 200
        assert (await _login(client, "ada@example.com", "An0ther!Pass")).status_code == 401


class TestLogin:
    async def test_login_success(self, client: AsyncClient, registered_user):
        response = await _login(client, "ADA@example.com", TEST_PASSWORD)
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["data"]["user"]["id"] == registered_user["user"]["id"]
        assert body["data"]["tokens"]["accessToken"]

    async def test_wrong_password_and_unknown_email_look_identical(self, client: AsyncClient, registered_user):
        wrong_password = await _login(client, "ada@example.com", "Wr0ng!Pass")
        unknown_email = await _login(client, "nobody@example.com", TEST_PASSWORD)

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json()
        assert wrong_password.json() == {"success": False, "error": "Invalid email or password", "statusCode": 401}


class TestTokens:
    async def test_refresh_issues_new_pair(self, client: AsyncClient, registered_user):
        response = await client.post(
            "/api/v1/auth/refresh", json={"refreshToken": registered_user["refresh_token"]}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Token refreshed successfully"
        tokens = body["data"]["tokens"]
        assert tokens["refreshToken"] != registered_user["refresh_token"]

        profile = await client.get(
            "/api/v1/auth/profile", headers={"Authorization": f"Bearer {tokens['accessToken']}"}
        )
        assert profile.status_code == 200

    async def test_refresh_rejects_access_token(self, client: AsyncClient, registered_user):
        response = await client.post(
            "/api/v1/auth/refresh", json={"refreshToken": registered_user["access_token"]}
        )
        assert response.status_code == 401

    async def test_refresh_rejects_garbage(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/refresh", json={"refreshToken": "not_a_valid_jwt_token"})
        assert response.status_code == 401

    async def test_refresh_token_not_accepted_as_bearer(self, client: AsyncClient, registered_user):
        response = await client.get(
            "/api/v1/auth/profile", headers={"Authorization": f"Bearer {registered_user['refresh_token']}"}
        )
        assert response.status_code == 401

    async def test_logout_is_stateless(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/logout")
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Logged out successfully. Please remove token from client.",
        }


PROTECTED = [
    ("GET", "/api/v1/auth/profile", None),
    ("PUT", "/api/v1/auth/profile", {"firstName": "Grace"}),
    ("POST", "/api/v1/auth/change-password", {"currentPassword": TEST_PASSWORD, "newPassword": "N3w!Passw0rd"}),
    ("POST", "/api/v1/auth/favorites/France", None),
    ("DELETE", "/api/v1/auth/favorites/France", None),
]


class TestProtectedEndpoints:
    @pytest.mark.parametrize(("method", "path", "body"), PROTECTED)
    async def test_missing_token(self, client: AsyncClient, method, path, body):
        response = await client.request(method, path, json=body)
        assert response.status_code == 401
        assert response.json()["error"] == "Access denied. No token provided."

    @pytest.mark.parametrize(("method", "path", "body"), PROTECTED)
    async def test_expired_token(self, tmp_path, client: AsyncClient, registered_user, method, path, body):
        expired_settings = make_settings(tmp_path, jwt_access_token_expire_minutes=-1)
        token = create_access_token(registered_user["user"]["id"], expired_settings)
        response = await client.request(method, path, json=body, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["error"] == "Token expired"

    @pytest.mark.parametrize(("method", "path", "body"), PROTECTED)
    async def test_tampered_token(self, client: AsyncClient, registered_user, method, path, body):
        token = registered_user["access_token"]
        tampered = token[:-4] + ("AAAA" if not token.endswith("AAAA") else "BBBB")
        response = await client.request(method, path, json=body, headers={"Authorization": f"Bearer {tampered}"})
        assert response.status_code == 401
        assert response.json()["success"] is False

    async def test_token_for_deleted_user(self, app, client: AsyncClient, registered_user):
        async with app.state.database.session_factory() as session:
            user = await session.get(User, registered_user["user"]["id"])
            await session.delete(user)
            await session.commit()

        response = await client.get(
            "/api/v1/auth/profile", headers={"Authorization": f"Bearer {registered_user['access_token']}"}
        )
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid token. User not found."


class TestProfile:
    async def test_get_profile(self, authed_client: AsyncClient, registered_user):
        response = await authed_client.get("/api/v1/auth/profile")
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Profile retrieved successfully"
        assert body["data"]["id"] == registered_user["user"]["id"]
        assert body["data"]["email"] == "ada@example.com"

    async def test_update_profile(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/v1/auth/profile", json={"firstName": "  Grace  "})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["firstName"] == "Grace"
        assert data["lastName"] == "Lovelace"
        assert data["fullName"] == "Grace Lovelace"

    async def test_update_profile_requires_a_field(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/v1/auth/profile", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "No valid fields to update"

    async def test_update_profile_validates_length(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/v1/auth/profile", json={"lastName": "X"})
        assert response.status_code == 400

    @pytest.mark.parametrize("body", [{"firstName": "    "}, {"lastName": " x "}])
    async def test_update_profile_rejects_blank_after_trim(self, authed_client: AsyncClient, body):
        response = await authed_client.put("/api/v1/auth/profile", json=body)
        assert response.status_code == 400

        profile = (await authed_client.get("/api/v1/auth/profile")).json()["data"]
        assert profile["firstName"] == "Ada"
        assert profile["lastName"] == "Lovelace"


class TestChangePassword:
    async def test_change_password(self, authed_client: AsyncClient):
        response = await authed_client.post(
            "/api/v1/auth/change-password",
            json={"currentPassword": TEST_PASSWORD, "newPassword": "N3w!Passw0rd"},
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Password changed successfully"

        assert (await _login(authed_client, "ada@example.com", TEST_PASSWORD)).status_code == 401
        assert (await _login(authed_client, "ada@example.com", "N3w!Passw0rd")).status_code == 200

    async def test_wrong_current_password(self, authed_client: AsyncClient):
        response = await authed_client.post(
            "/api/v1/auth/change-password",
            json={"currentPassword": "Wr0ng!Pass", "newPassword": "N3w!Passw0rd"},
        )
        assert response.status_code == 401
        assert response.json()["error"] == "Current password is incorrect"

    async def test_weak_new_password(self, authed_client: AsyncClient):
        response = await authed_client.post(
            "/api/v1/auth/change-password",
            json={"currentPassword": TEST_PASSWORD, "newPassword": "weakpass"},
        )
        assert response.status_code == 400
        assert (await _login(authed_client, "ada@example.com", TEST_PASSWORD)).status_code == 200


async def test_users_are_isolated(client: AsyncClient):
    ada = await register_user(client)
    grace = await register_user(client, email="grace@example.com", first_name="Grace", last_name="Hopper")

    response = await client.get(
        "/api/v1/auth/profile", headers={"Authorization": f"Bearer {grace['access_token']}"}
    )
    assert response.json()["data"]["id"] == grace["user"]["id"]
    assert grace["user"]["id"] != ada["user"]["id"]
