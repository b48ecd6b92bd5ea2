"""Integration tests for the login flow"""

import jwt
import pytest
from fastapi.testclient import TestClient

from conftest import TEST_PASSWORD

pytestmark = pytest.mark.integration


class TestLogin:

    def test_login_success(self, client: TestClient, owner, db_session):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "alice@example.com", "password": TEST_PASSWORD},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["expires_in"] == 3600

        claims = jwt.decode(body["access_token"], options={"verify_signature": False})
        assert claims["sub"] == str(owner.id)

        db_session.refresh(owner)
        assert owner.last_login_at is not None

    def test_login_email_is_case_insensitive(self, client: TestClient, owner):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "Alice@Example.com", "password": TEST_PASSWORD},
        )

        assert response.status_code == 200

    def test_wrong_password(self, client: TestClient, owner):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "alice@example.com", "password": "Wrong123pass"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_unknown_email_gets_same_error(self, client: TestClient):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "nobody@example.com", "password": TEST_PASSWORD},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_disabled_account(self, client: TestClient, make_user):
        make_user("carol@example.com", status="DISABLED")

        response = client.post(
            "/api/v1/auth/login",
            json={"email": "carol@example.com", "password": TEST_PASSWORD},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Account is disabled"

    def test_malformed_email(self, client: TestClient):
        response = client.post("/api/v1/auth/login", json={"email": "nope", "password": "x"})

        assert response.status_code == 422
        assert "email" in response.json()["errors"]


class TestMe:

    def test_login_then_me(self, client: TestClient, owner):
        token = client.post(
            "/api/v1/auth/login",
            json={"email": "alice@example.com", "password": TEST_PASSWORD},
        ).json()["access_token"]

        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["email"] == "alice@example.com"
        assert user["name"] == "Alice"
        assert "password_hash" not in user
