"""HTTP tests for /api/auth."""

import jwt

from conftest import DEFAULT_PASSWORD, TEST_SECRET, bearer, login, register


def decode(token: str) -> dict:
    return jwt.decode(token, TEST_SECRET, algorithms=["HS256"])


class TestRegister:
    def test_register_alice(self, client):
        response = client.post(
            "/api/auth/register",
            json={
                "email": "alice@example.com",
                "password": "Secret123!",
                "firstName": "Alice",
                "lastName": "Smith",
                "companyName": "Acme",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["accessToken"]
        assert body["refreshToken"]
        assert body["user"]["email"] == "alice@example.com"
        assert "passwordHash" not in body["user"]

    def test_missing_fields_is_400(self, client):
        response = client.post("/api/auth/register", json={"email": "a@example.com"})
        assert response.status_code == 400
        assert response.json() == {"message": "All fields are required"}

    def test_whitespace_email_is_400(self, client):
        response = client.post(
            "/api/auth/register",
            json={
                "email": "   ",
                "password": DEFAULT_PASSWORD,
                "firstName": "Alice",
                "lastName": "Smith",
                "companyName": "Acme",
            },
        )
        assert response.status_code == 400
        assert response.json() == {"message": "All fields are required"}

    def test_duplicate_email_is_400(self, client):
        register(client)
        response = client.post(
            "/api/auth/register",
            json={
                "email": "ALICE@example.com",
                "password": "x",
                "firstName": "A",
                "lastName": "B",
                "companyName": "C",
            },
        )
        assert response.status_code == 400
        assert response.json() == {"message": "User already exists"}

    def test_malformed_body_is_400(self, client):
        response = client.post("/api/auth/register", json={"email": 42, "password": None})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request body"


class TestLogin:
    def test_success(self, client):
        register(client)
        body = login(client, "alice@example.com")
        assert body["accessToken"]
        assert body["user"]["email"] == "alice@example.com"

    def test_wrong_password_is_401(self, client):
        register(client)
        response = client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "nope"}
        )
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid credentials"}

    def test_wrong_password_and_unknown_email_bodies_identical(self, client):
        register(client)
        wrong_password = client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "nope"}
        )
        unknown_email = client.post(
            "/api/auth/login", json={"email": "bob@example.com", "password": DEFAULT_PASSWORD}
        )

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.content == unknown_email.content

    def test_missing_fields_is_400(self, client):
        response = client.post("/api/auth/login", json={})
        assert response.status_code == 400


class TestMe:
    def test_first_registrant_is_admin(self, client):
        tokens = register(client)
        response = client.get("/api/auth/me", headers=bearer(tokens["accessToken"]))

        assert response.status_code == 200
        body = response.json()
        assert body["isAdmin"] is True
        assert body["email"] == "alice@example.com"
        assert body["permissions"] == ["*"]
        assert "passwordHash" not in body

    def test_requires_token(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_refresh_token_cannot_be_used_as_access_token(self, client):
        tokens = register(client)
        response = client.get("/api/auth/me", headers=bearer(tokens["refreshToken"]))
        assert response.status_code == 401

    def test_vanished_identity_is_404(self, client):
        tokens = register(client)
        client.app.state.services.identities.delete(tokens["user"]["id"])

        response = client.get("/api/auth/me", headers=bearer(tokens["accessToken"]))
        assert response.status_code == 404
        assert response.json() == {"message": "User not found"}


class TestRefresh:
    def test_new_access_token_keeps_tenant(self, client):
        tokens = register(client)
        response = client.post(
            "/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]}
        )

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"accessToken"}
        assert decode(body["accessToken"])["tenantId"] == tokens["user"]["tenantId"]

    def test_missing_token_is_400(self, client):
        response = client.post("/api/auth/refresh", json={})
        assert response.status_code == 400
        assert response.json() == {"message": "Refresh token required"}

    def test_garbage_token_is_401(self, client):
        response = client.post("/api/auth/refresh", json={"refreshToken": "garbage"})
        assert response.status_code == 401

    def test_concurrent_refreshes_both_succeed(self, client):
        tokens = register(client)
        payload = {"refreshToken": tokens["refreshToken"]}

        first = client.post("/api/auth/refresh", json=payload)
        second = client.post("/api/auth/refresh", json=payload)

        assert first.status_code == second.status_code == 200


class TestLogout:
    def test_logout_then_refresh_is_401(self, client):
        tokens = register(client)
        response = client.post(
            "/api/auth/logout",
            json={"refreshToken": tokens["refreshToken"]},
            headers=bearer(tokens["accessToken"]),
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}

        retry = client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
        assert retry.status_code == 401

    def test_unknown_refresh_token_still_200(self, client):
        tokens = register(client)
        response = client.post(
            "/api/auth/logout",
            json={"refreshToken": "not-a-token"},
            headers=bearer(tokens["accessToken"]),
        )
        assert response.status_code == 200

    def test_no_body_still_200(self, client):
        tokens = register(client)
        response = client.post("/api/auth/logout", headers=bearer(tokens["accessToken"]))
        assert response.status_code == 200

    def test_requires_access_token(self, client):
        tokens = register(client)
        response = client.post(
            "/api/auth/logout", json={"refreshToken": tokens["refreshToken"]}
        )
        assert response.status_code == 401


class TestChangePassword:
    def test_change_password(self, client):
        tokens = register(client)
        response = client.post(
            "/api/auth/change-password",
            json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "Another456!"},
            headers=bearer(tokens["accessToken"]),
        )
        assert response.status_code == 200
        assert login(client, "alice@example.com", "Another456!")["accessToken"]

    def test_wrong_current_password_is_400(self, client):
        tokens = register(client)
        response = client.post(
            "/api/auth/change-password",
            json={"currentPassword": "wrong", "newPassword": "Another456!"},
            headers=bearer(tokens["accessToken"]),
        )
        assert response.status_code == 400


class TestAppSurface:
    def test_healthz(self, client):
        assert client.get("/healthz").json() == {"status": "ok"}

    def test_healthz_reports_degraded_database(self, client, monkeypatch):
        monkeypatch.setattr(client.app.state.services.db, "ping", lambda: False)
        response = client.get("/healthz")
        assert response.status_code == 503
        assert response.json() == {"status": "degraded"}

    def test_unknown_route_uses_message_shape(self, client):
        response = client.get("/api/nowhere")
        assert response.status_code == 404
        assert "message" in response.json()
