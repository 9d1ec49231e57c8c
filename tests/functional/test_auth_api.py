"""
Functional tests for login, logout and the current-user endpoint.
"""

from datetime import timedelta

from fastapi.testclient import TestClient

from submanager.auth.security import create_access_token


class TestLogin:
    def test_login_returns_token_and_user(self, client: TestClient, admin_credentials):
        response = client.post(
            "/api/auth/login", json={**admin_credentials, "email": "ADMIN@example.com"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["token"]
        assert body["user"]["email"] == "admin@example.com"
        assert body["user"]["role"] == "admin"
        assert body["user"]["lastLogin"] is not None
        assert "password" not in body["user"]

    def test_token_from_login_authorizes(self, client: TestClient, admin_user, admin_credentials):
        token = client.post(
            "/api/auth/login", json=admin_credentials
        ).json()["token"]
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["id"] == admin_user.id

    def test_wrong_password(self, client: TestClient, admin_user):
        response = client.post(
            "/api/auth/login", json={"email": "admin@example.com", "password": "nope"}
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}

    def test_unknown_email_same_message(self, client: TestClient):
        response = client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"}
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}

    def test_missing_fields(self, client: TestClient):
        response = client.post("/api/auth/login", json={"email": "admin@example.com"})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation failed"
        assert "password" in body["fields"]

    def test_login_is_audited(self, client: TestClient, admin_credentials, admin_headers):
        client.post("/api/auth/login", json=admin_credentials)
        entries = client.get("/api/activity", headers=admin_headers).json()
        assert entries[0]["actionType"] == "login"
        assert entries[0]["userName"] == "Admin"


class TestTokens:
    def test_me_requires_token(self, client: TestClient):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_expired_token(self, client: TestClient, admin_user):
        token = create_access_token(admin_user.id, admin_user.role, expires_delta=timedelta(seconds=-5))
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid or expired token"}

    def test_token_for_deleted_user(self, client: TestClient):
        token = create_access_token("no-such-user", "admin")
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_logout(self, client: TestClient, user_headers):
        response = client.post("/api/auth/logout", headers=user_headers)
        assert response.status_code == 204
