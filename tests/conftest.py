import base64
import json
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError


@pytest.fixture
def make_state():
    def _make(payload) -> str:
        return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")

    return _make


class FakeProfilesQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.payload: dict | None = None
        self.filters: list[tuple[str, str]] = []

    def update(self, payload: dict):
        self.payload = payload
        return self

    def eq(self, column: str, value: str):
        self.filters.append((column, value))
        return self

    def execute(self):
        self.db.executed.append(self)
        if self.db.update_error:
            raise APIError(self.db.update_error)
        matched = []
        for column, value in self.filters:
            row = self.db.rows.get(value) if column == "id" else None
            if row is not None:
                row.update(self.payload)
                matched.append(row)
        return SimpleNamespace(data=matched, count=None)


class FakeSupabase:
    """Minimal stand-in for a supabase-py Client's table API."""

    def __init__(self):
        self.rows: dict[str, dict] = {}
        self.executed: list[FakeProfilesQuery] = []
        self.update_error: dict | None = None

    def table(self, name: str) -> FakeProfilesQuery:
        return FakeProfilesQuery(self, name)


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def supabase_env(monkeypatch):
    monkeypatch.setattr("app.config.settings.NEXT_PUBLIC_SUPABASE_URL", "https://abc123.supabase.co")
    monkeypatch.setattr("app.config.settings.SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
    monkeypatch.setattr("app.config.settings.NEXT_PUBLIC_SUPABASE_ANON_KEY", "anon-key")


@pytest.fixture
def google_env(monkeypatch):
    monkeypatch.setattr("app.config.settings.GOOGLE_CLIENT_ID", "client-id.apps.googleusercontent.com")
    monkeypatch.setattr("app.config.settings.GOOGLE_CLIENT_SECRET", "client-secret")
    monkeypatch.setattr(
        "app.config.settings.GOOGLE_REDIRECT_URI", "https://api.example.com/api/gmail/callback"
    )
