"""Tests for password hashing, tokens and the CMS login flow."""

from datetime import timedelta

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from portfolio_site.config import settings
from portfolio_site.utils.auth import hash_password, verify_admin_password, verify_password
from portfolio_site.utils.edit_mode import READ_ONLY, get_edit_mode
from portfolio_site.utils.jwt_auth import (
    TOKEN_COOKIE_NAME,
    authenticate_user,
    create_access_token,
    require_admin,
    verify_token,
)


def _request(cookie=None):
    headers = []
    if cookie:
        headers.append((b"cookie", f"{TOKEN_COOKIE_NAME}={cookie}".encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


@pytest.fixture
def admin_password(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", hash_password("correct horse", rounds=4))
    return "correct horse"


class TestPasswords:
    def test_hash_round_trip(self):
        hashed = hash_password("s3cret", rounds=4)
        assert hashed != "s3cret"
        assert verify_password("s3cret", hashed)
        assert not verify_password("S3cret", hashed)

    def test_malformed_hash_is_a_mismatch(self):
        assert verify_password("s3cret", "not-a-bcrypt-hash") is False

    def test_missing_admin_hash(self, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", "")
        with pytest.raises(ValueError):
            verify_admin_password("anything")

    def test_authenticate_user(self, admin_password):
        assert authenticate_user(admin_password) == {"role": "admin", "sub": "cms_admin"}
        with pytest.raises(HTTPException) as exc_info:
            authenticate_user("wrong")
        assert exc_info.value.status_code == 401


class TestTokens:
    def test_token_carries_claims(self):
        payload = verify_token(create_access_token({"role": "admin", "sub": "cms_admin"}))
        assert payload["role"] == "admin"
        assert payload["type"] == "access"

    def test_expired_token_is_rejected(self):
        token = create_access_token({"role": "admin"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(HTTPException) as exc_info:
            verify_token(token)
        assert exc_info.value.status_code == 401

    def test_require_admin_reads_cookie(self):
        token = create_access_token({"role": "admin", "sub": "cms_admin"})
        assert require_admin(_request(cookie=token), None)["sub"] == "cms_admin"

    def test_require_admin_rejects_other_roles(self):
        token = create_access_token({"role": "editor"})
        with pytest.raises(HTTPException) as exc_info:
            require_admin(_request(), f"Bearer {token}")
        assert exc_info.value.status_code == 403

    def test_edit_mode_needs_admin_and_flag(self):
        admin = f"Bearer {create_access_token({'role': 'admin'})}"

        assert get_edit_mode(_request(), edit=True, authorization=None) is READ_ONLY
        assert get_edit_mode(_request(), edit=True, authorization="Bearer garbage") is READ_ONLY
        assert get_edit_mode(_request(), edit=False, authorization=admin).can_edit is False
        assert get_edit_mode(_request(), edit=True, authorization=admin).can_edit is True


class TestLoginRoutes:
    @pytest.mark.asyncio
    async def test_login_sets_http_only_cookie(self, client, admin_password):
        response = await client.post("/api/cms/login", json={"password": admin_password})

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert verify_token(body["access_token"])["role"] == "admin"
        cookie = response.headers["set-cookie"]
        assert cookie.startswith(f"{TOKEN_COOKIE_NAME}=")
        assert "httponly" in cookie.lower()

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, admin_password):
        response = await client.post("/api/cms/login", json={"password": "nope"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_login_without_configured_hash(self, client, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", "")

        response = await client.post("/api/cms/login", json={"password": "anything"})

        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_login_is_rate_limited(self, client, admin_password):
        statuses = [
            (await client.post("/api/cms/login", json={"password": "guess"})).status_code
            for _ in range(6)
        ]

        assert statuses[:5] == [401] * 5
        assert statuses[5] == 429

    @pytest.mark.asyncio
    async def test_session_reports_admin(self, client, admin_headers):
        anonymous = await client.get("/api/cms/session")
        admin = await client.get("/api/cms/session", headers=admin_headers)

        assert anonymous.json() == {"is_admin": False}
        assert admin.json() == {"is_admin": True}

    @pytest.mark.asyncio
    async def test_logout_clears_cookie(self, client):
        response = await client.post("/api/cms/logout")

        assert response.status_code == 200
        assert response.headers["set-cookie"].startswith(f"{TOKEN_COOKIE_NAME}=")
