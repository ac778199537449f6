"""Unit tests for admin authentication."""
import pytest
from datetime import datetime, timedelta, timezone
from fastapi import Response

from teapos.api import auth


@pytest.mark.usefixtures("clean_auth_sessions")
class TestSessionManagement:
    """Test admin session tokens."""

    def test_create_session_sets_cookie(self):
        response = Response()

        token = auth.create_session(response)

        assert token in auth._sessions
        assert auth.SESSION_COOKIE in response.headers["set-cookie"]

    def test_verify_valid_session(self):
        token = auth.create_session(Response())

        assert auth.verify_session(token) is True

    def test_verify_unknown_or_missing_token(self):
        assert auth.verify_session("not-a-token") is False
        assert auth.verify_session(None) is False

    def test_expired_session_is_removed(self):
        token = auth.create_session(Response())
        auth._sessions[token]["expires_at"] = datetime.now(timezone.utc) - timedelta(seconds=1)

        assert auth.verify_session(token) is False
        assert token not in auth._sessions


class TestAuthEndpoints:
    """Test login, logout and protected routes."""

    def test_login_wrong_password(self, test_client, clean_auth_sessions):
        response = test_client.post("/api/auth/login", json={"password": "wrong"})

        assert response.status_code == 401

    def test_login_and_session_info(self, authenticated_client):
        response = authenticated_client.get("/api/auth/session")

        assert response.status_code == 200
        assert response.json()["authenticated"] is True

    def test_logout(self, authenticated_client):
        assert authenticated_client.post("/api/auth/logout").status_code == 200

        response = authenticated_client.get("/api/auth/session")
        assert response.json()["authenticated"] is False

    def test_admin_route_requires_login(self, test_client, clean_auth_sessions):
        response = test_client.post("/api/catalog/categories", json={"name": "Seasonal"})

        assert response.status_code == 401
