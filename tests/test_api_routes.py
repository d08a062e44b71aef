"""
tests/test_api_routes.py -- Integration tests for the HTTP API.

These tests exercise the full stack: FastAPI routing -> gate dependency ->
session manager / user store -> response model serialization -> AuthError
exception handler. Unit testing individual route functions would miss the
dependency injection and the error envelope.

Coverage:
  - Login: valid 200 with usable token, wrong password / unknown user 401
  - Register: 201, duplicate 409, validation 422
  - Required route (GET /user/profile): the full 401 matrix and happy path
  - Optional route (GET /auth/session): anonymous vs identified
  - Refresh: new usable token, expired / missing / malformed header 401

Fixtures used (from conftest.py):
  - api_client: (client, token, uid) -- user "testuser" / "testpass123"
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from auth.sessions import issue_session
from conftest import API_PASSWORD, API_USERNAME, TEST_SECRET


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _expired_token(uid: int) -> str:
    return issue_session(uid, API_USERNAME, TEST_SECRET, ttl=60, now=1_000_000)


class TestLogin:
    def test_login_valid_credentials(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, uid = api_client
        resp = client.post("/api/v1/auth/login", json={"username": API_USERNAME, "password": API_PASSWORD})
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 3600
        assert data["user"]["id"] == uid
        assert data["user"]["username"] == API_USERNAME
        assert "hashed_password" not in data["user"]
        assert resp.headers["Cache-Control"] == "no-store"

        profile = client.get("/api/v1/user/profile", headers=_bearer(data["access_token"]))
        assert profile.status_code == 200
        assert profile.json()["username"] == API_USERNAME

    def test_login_wrong_password(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        resp = client.post("/api/v1/auth/login", json={"username": API_USERNAME, "password": "wrongpassword"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "bad_credentials"

    def test_login_unknown_user_matches_wrong_password(self, api_client: tuple[TestClient, str, int]) -> None:
        """Unknown usernames must be indistinguishable from wrong passwords."""
        client, _token, _uid = api_client
        unknown = client.post("/api/v1/auth/login", json={"username": "nobody", "password": API_PASSWORD})
        wrong = client.post("/api/v1/auth/login", json={"username": API_USERNAME, "password": "wrongpassword"})
        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json()

    def test_login_missing_field(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        resp = client.post("/api/v1/auth/login", json={"username": API_USERNAME})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"


class TestRegister:
    def test_register_then_login(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        resp = client.post(
            "/api/v1/auth/register",
            json={"username": "newuser", "password": "s3cret-pw", "email": "new@example.com"},
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["username"] == "newuser"
        assert data["email"] == "new@example.com"
        assert "password" not in data and "hashed_password" not in data

        login = client.post("/api/v1/auth/login", json={"username": "newuser", "password": "s3cret-pw"})
        assert login.status_code == 200

    def test_register_duplicate_username(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        resp = client.post(
            "/api/v1/auth/register",
            json={"username": API_USERNAME, "password": "another-pw", "email": "dup@example.com"},
        )
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "duplicate_username"

    def test_register_validation(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        bad_bodies = [
            {"username": "ab", "password": "s3cret-pw", "email": "a@example.com"},
            {"username": "shortpw", "password": "12345", "email": "a@example.com"},
            {"username": "bademail", "password": "s3cret-pw", "email": "not-an-email"},
            {"username": "longpw", "password": "é" * 40, "email": "a@example.com"},
        ]
        for body in bad_bodies:
            resp = client.post("/api/v1/auth/register", json=body)
            assert resp.status_code == 422, body

    def test_register_keeps_password_whitespace(self, api_client: tuple[TestClient, str, int]) -> None:
        """Only username and email are trimmed; the password must work at login exactly as typed."""
        client, _token, _uid = api_client
        resp = client.post(
            "/api/v1/auth/register",
            json={"username": "  padded  ", "password": "  secret1  ", "email": " padded@example.com "},
        )
        assert resp.status_code == 201, resp.text
        assert resp.json()["username"] == "padded"
        assert resp.json()["email"] == "padded@example.com"

        login = client.post("/api/v1/auth/login", json={"username": "padded", "password": "  secret1  "})
        assert login.status_code == 200, login.text

        stripped = client.post("/api/v1/auth/login", json={"username": "padded", "password": "secret1"})
        assert stripped.status_code == 401


class TestRequiredRoute:
    """GET /api/v1/user/profile sits behind require_session."""

    def test_no_header(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        resp = client.get("/api/v1/user/profile")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "missing_credential"
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    def test_basic_scheme(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        resp = client.get("/api/v1/user/profile", headers={"Authorization": "Basic abc"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "malformed_credential"

    def test_expired_token(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, uid = api_client
        resp = client.get("/api/v1/user/profile", headers=_bearer(_expired_token(uid)))
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "invalid_credential"

    def test_tampered_token(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, _uid = api_client
        tampered = token[:-1] + ("A" if token[-1] != "A" else "B")
        resp = client.get("/api/v1/user/profile", headers=_bearer(tampered))
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "invalid_credential"

    def test_valid_token(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, uid = api_client
        resp = client.get("/api/v1/user/profile", headers=_bearer(token))
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["id"] == uid
        assert data["username"] == API_USERNAME
        assert data["email"] == "testuser@example.com"

    def test_token_for_missing_user(self, api_client: tuple[TestClient, str, int]) -> None:
        """A validly signed token can outlive its account; the profile lookup answers 404."""
        client, _token, _uid = api_client
        ghost = issue_session(99999, "ghost", TEST_SECRET, ttl=3600)
        resp = client.get("/api/v1/user/profile", headers=_bearer(ghost))
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "not_found"


class TestOptionalRoute:
    """GET /api/v1/auth/session sits behind optional_session."""

    def test_no_header_is_anonymous(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        resp = client.get("/api/v1/auth/session")
        assert resp.status_code == 200
        assert resp.json() == {"authenticated": False, "user_id": None, "username": None}

    def test_bad_headers_are_anonymous(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, uid = api_client
        for header in ["Basic abc", "Bearer garbage", f"Bearer {_expired_token(uid)}"]:
            resp = client.get("/api/v1/auth/session", headers={"Authorization": header})
            assert resp.status_code == 200, header
            assert resp.json()["authenticated"] is False

    def test_valid_token_identifies_caller(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, uid = api_client
        resp = client.get("/api/v1/auth/session", headers=_bearer(token))
        assert resp.status_code == 200
        assert resp.json() == {"authenticated": True, "user_id": uid, "username": API_USERNAME}


class TestRefresh:
    def test_refresh_valid_token(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, uid = api_client
        resp = client.post("/api/v1/token/refresh", headers=_bearer(token))
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 3600
        assert resp.headers["Cache-Control"] == "no-store"

        session = client.get("/api/v1/auth/session", headers=_bearer(data["access_token"]))
        assert session.json() == {"authenticated": True, "user_id": uid, "username": API_USERNAME}

    def test_refresh_expired_token(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, uid = api_client
        resp = client.post("/api/v1/token/refresh", headers=_bearer(_expired_token(uid)))
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "invalid_credential"
        assert "access_token" not in resp.json()

    def test_refresh_without_header(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        resp = client.post("/api/v1/token/refresh")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "missing_credential"

    def test_refresh_malformed_header(self, api_client: tuple[TestClient, str, int]) -> None:
        client, token, _uid = api_client
        resp = client.post("/api/v1/token/refresh", headers={"Authorization": f"Token {token}"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "malformed_credential"
