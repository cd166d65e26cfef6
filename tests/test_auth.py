"""Tests for authentication endpoints, tokens and the health check."""
import uuid

import pytest
from fastapi import HTTPException
from freezegun import freeze_time

from stockroom.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)

from conftest import PASSWORD, register_and_login


class TestTokens:
    """Tests for password hashing and JWT helpers."""

    def test_password_hash_round_trip(self):
        hashed = get_password_hash(PASSWORD)

        assert hashed != PASSWORD
        assert verify_password(PASSWORD, hashed)
        assert not verify_password("Other1234", hashed)

    def test_access_token_valid_until_expiry(self):
        user_id = uuid.uuid4()

        with freeze_time("2026-01-15 12:00:00"):
            token = create_access_token(user_id)
            assert decode_token(token) == user_id

        with freeze_time("2026-01-15 12:29:00"):
            assert decode_token(token) == user_id

        with freeze_time("2026-01-15 12:31:00"):
            with pytest.raises(HTTPException) as exc_info:
                decode_token(token)
            assert exc_info.value.status_code == 401

    def test_token_type_is_checked(self):
        token = create_refresh_token(uuid.uuid4())

        with pytest.raises(HTTPException):
            decode_token(token)
        assert isinstance(decode_token(token, expected_type="refresh"), uuid.UUID)


class TestAuthentication:
    """Tests for /auth."""

    def test_register_returns_profile(self, client):
        response = client.post(
            "/api/v1/auth/register",
            json={"username": "carol", "email": "carol@example.com", "password": PASSWORD}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["username"] == "carol"
        assert data["role"] == "user"
        assert "password" not in data
        assert "password_hash" not in data

    def test_duplicate_email_conflicts(self, client):
        register_and_login(client, "carol")

        response = client.post(
            "/api/v1/auth/register",
            json={"username": "carol2", "email": "carol@example.com", "password": PASSWORD}
        )

        assert response.status_code == 409
        assert response.json()["details"]["field"] == "email"

    def test_duplicate_username_conflicts(self, client):
        register_and_login(client, "carol")

        response = client.post(
            "/api/v1/auth/register",
            json={"username": "carol", "email": "other@example.com", "password": PASSWORD}
        )

        assert response.status_code == 409
        assert response.json()["details"]["field"] == "username"

    def test_weak_password_rejected(self, client):
        response = client.post(
            "/api/v1/auth/register",
            json={"username": "carol", "email": "carol@example.com", "password": "alllowercase"}
        )

        assert response.status_code == 422

    def test_login_with_wrong_password(self, client):
        register_and_login(client, "carol")

        response = client.post(
            "/api/v1/auth/login",
            json={"email": "carol@example.com", "password": "Wrong1234"}
        )

        assert response.status_code == 401

    def test_me(self, client, auth_headers):
        response = client.get("/api/v1/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["username"] == "alice"

    def test_missing_token(self, client):
        assert client.get("/api/v1/auth/me").status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    def test_refresh_token_cannot_access_api(self, client, auth_headers):
        user_id = client.get("/api/v1/auth/me", headers=auth_headers).json()["id"]
        token = create_refresh_token(user_id)

        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_refresh_issues_new_pair(self, client):
        register_and_login(client, "carol")
        login = client.post(
            "/api/v1/auth/login",
            json={"email": "carol@example.com", "password": PASSWORD}
        ).json()

        response = client.post("/api/v1/auth/refresh", json={"refresh_token": login["refresh_token"]})

        assert response.status_code == 200
        tokens = response.json()
        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
        assert me.json()["username"] == "carol"

    def test_access_token_cannot_refresh(self, client):
        register_and_login(client, "carol")
        login = client.post(
            "/api/v1/auth/login",
            json={"email": "carol@example.com", "password": PASSWORD}
        ).json()

        response = client.post("/api/v1/auth/refresh", json={"refresh_token": login["access_token"]})

        assert response.status_code == 401


class TestHealth:

    def test_root(self, client):
        data = client.get("/").json()

        assert data["status"] == "running"
        assert data["api_v1"] == "/api/v1"

    def test_health_reports_database(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "ok"
        assert "X-Process-Time" in response.headers
