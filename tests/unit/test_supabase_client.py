from types import SimpleNamespace

import pytest
from starlette.requests import Request
from supabase import AuthError

from app.db.supabase_client import (
    SupabaseConfigError,
    create_anon_client,
    create_service_client,
    extract_bearer_token,
    get_user_from_request,
)


class FakeAuthError(AuthError):
    def __init__(self, message: str):
        Exception.__init__(self, message)
        self.message = message


class FakeAuth:
    def __init__(self, user=None, error: Exception | None = None):
        self.user = user
        self.error = error
        self.tokens: list[str] = []

    def get_user(self, jwt: str):
        self.tokens.append(jwt)
        if self.error:
            raise self.error
        return SimpleNamespace(user=self.user)


def _request(authorization: str | None = None) -> Request:
    headers = []
    if authorization is not None:
        headers.append((b"authorization", authorization.encode("latin-1")))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def _patch_anon_client(monkeypatch, auth: FakeAuth):
    monkeypatch.setattr(
        "app.db.supabase_client.create_anon_client", lambda: SimpleNamespace(auth=auth)
    )


def test_create_service_client_disables_session_state(monkeypatch, supabase_env):
    calls = []

    def fake_create_client(url, key, options=None):
        calls.append((url, key, options))
        return SimpleNamespace()

    monkeypatch.setattr("app.db.supabase_client.create_client", fake_create_client)

    create_service_client()

    url, key, options = calls[0]
    assert url == "https://abc123.supabase.co"
    assert key == "service-role-key"
    assert options.auto_refresh_token is False
    assert options.persist_session is False


def test_create_service_client_builds_new_client_per_call(monkeypatch, supabase_env):
    monkeypatch.setattr(
        "app.db.supabase_client.create_client", lambda url, key, options=None: object()
    )

    assert create_service_client() is not create_service_client()


def test_create_anon_client_uses_default_options(monkeypatch, supabase_env):
    calls = []

    def fake_create_client(url, key, options=None):
        calls.append((url, key, options))
        return SimpleNamespace()

    monkeypatch.setattr("app.db.supabase_client.create_client", fake_create_client)

    create_anon_client()

    assert calls == [("https://abc123.supabase.co", "anon-key", None)]


@pytest.mark.parametrize(
    "missing", ["NEXT_PUBLIC_SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"]
)
def test_create_service_client_missing_config(monkeypatch, supabase_env, missing):
    monkeypatch.setattr(f"app.config.settings.{missing}", None)

    with pytest.raises(SupabaseConfigError, match="Missing Supabase environment variables"):
        create_service_client()


@pytest.mark.parametrize("missing", ["NEXT_PUBLIC_SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_ANON_KEY"])
def test_create_anon_client_missing_config(monkeypatch, supabase_env, missing):
    monkeypatch.setattr(f"app.config.settings.{missing}", None)

    with pytest.raises(SupabaseConfigError):
        create_anon_client()


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc") == "abc"
    assert extract_bearer_token("Bearer ") == ""
    assert extract_bearer_token("abc") == "abc"


@pytest.mark.asyncio
async def test_get_user_from_request_success(monkeypatch):
    auth = FakeAuth(user=SimpleNamespace(id="u1", email="u1@example.com"))
    _patch_anon_client(monkeypatch, auth)

    user = await get_user_from_request(_request("Bearer jwt-token"))

    assert user.id == "u1"
    assert auth.tokens == ["jwt-token"]


@pytest.mark.asyncio
async def test_get_user_from_request_missing_header(monkeypatch):
    auth = FakeAuth(user=SimpleNamespace(id="u1"))
    _patch_anon_client(monkeypatch, auth)

    assert await get_user_from_request(_request()) is None
    assert auth.tokens == []


@pytest.mark.asyncio
async def test_get_user_from_request_empty_token(monkeypatch):
    auth = FakeAuth(user=SimpleNamespace(id="u1"))
    _patch_anon_client(monkeypatch, auth)

    assert await get_user_from_request(_request("Bearer ")) is None
    assert auth.tokens == []


@pytest.mark.asyncio
async def test_get_user_from_request_auth_error(monkeypatch):
    _patch_anon_client(monkeypatch, FakeAuth(error=FakeAuthError("invalid JWT")))

    assert await get_user_from_request(_request("Bearer expired")) is None


@pytest.mark.asyncio
async def test_get_user_from_request_unexpected_error(monkeypatch):
    def broken_client():
        raise SupabaseConfigError("Missing Supabase environment variables")

    monkeypatch.setattr("app.db.supabase_client.create_anon_client", broken_client)

    assert await get_user_from_request(_request("Bearer jwt-token")) is None
