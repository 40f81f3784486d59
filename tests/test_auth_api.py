"""
Unit Tests for Auth API Endpoints

Tests for the REST API endpoints in api/routes/auth.py
"""

from config import AUTH_COOKIE_NAME
from tests.conftest import auth_headers


class TestSignUpEndpoint:

    async def test_signup(self, client):
        response = await client.post(
            "/api/auth/signup",
            json={"email": "new@example.com", "password": "secret123"}
        )

        assert response.status_code == 201
        assert response.json()["user"]["username"] == "new"

    async def test_duplicate_email_is_conflict(self, client, sample_user):
        response = await client.post(
            "/api/auth/signup",
            json={"email": sample_user["email"], "password": "secret123"}
        )

        assert response.status_code == 409
        assert response.json()["detail"] == "An account with this email already exists"

    async def test_short_password(self, client):
        response = await client.post(
            "/api/auth/signup",
            json={"email": "new@example.com", "password": "123"}
        )

        assert response.status_code == 400


class TestSignInEndpoint:

    async def test_signin_sets_cookie(self, client, sample_user):
        response = await client.post(
            "/api/auth/signin",
            json={"email": sample_user["email"], "password": "secret123"}
        )

        assert response.status_code == 200
        token = response.json()["token"]
        assert response.cookies.get(AUTH_COOKIE_NAME) == token

    async def test_cookie_authenticates_requests(self, client, sample_user):
        await client.post(
            "/api/auth/signin",
            json={"email": sample_user["email"], "password": "secret123"}
        )

        response = await client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.json()["user"]["email"] == sample_user["email"]

    async def test_wrong_password(self, client, sample_user):
        response = await client.post(
            "/api/auth/signin",
            json={"email": sample_user["email"], "password": "nope-nope"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"


class TestMeEndpoint:

    async def test_bearer_token(self, client, sample_user):
        response = await client.get("/api/auth/me", headers=auth_headers(sample_user))

        assert response.json()["user"]["id"] == sample_user["id"]

    async def test_anonymous(self, client):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["detail"] == "Please sign in to continue"

    async def test_invalid_token(self, client):
        response = await client.get("/api/auth/me", headers={"Authorization": "Bearer bogus"})

        assert response.status_code == 401


class TestSignOutEndpoint:

    async def test_signout_revokes_token(self, client, sample_user):
        response = await client.post("/api/auth/signout", headers=auth_headers(sample_user))

        assert response.status_code == 200
        me = await client.get("/api/auth/me", headers=auth_headers(sample_user))
        assert me.status_code == 401

    async def test_signout_when_anonymous(self, client):
        response = await client.post("/api/auth/signout")

        assert response.json() == {"success": True}
