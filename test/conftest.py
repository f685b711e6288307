# test/conftest.py

"""
Shared fixtures.

`fake_d1` replaces requests.post inside services.d1_client with an
in-memory SQLite database that speaks the D1 response format, so the
real SQL (CREATE TABLE / INSERT OR IGNORE / COUNT) runs without any
network access.
"""

import sqlite3
from typing import Any, Dict, List, Optional

import pytest

from services import d1_client

CREDENTIAL_ENV = (
    "CLOUDFLARE_ACCOUNT_ID",
    "CLOUDFLARE_DATABASE_ID",
    "CLOUDFLARE_API_TOKEN",
    "CLOUDFLARE_DATABASE_API_TOKEN",
)


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeD1:
    """In-memory stand-in for the D1 query endpoint."""

    def __init__(self):
        self.conn = sqlite3.connect(":memory:", check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.calls: List[Dict[str, Any]] = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        sql = json["sql"]
        params = json.get("params") or []
        try:
            rows = [dict(r) for r in self.conn.execute(sql, params).fetchall()]
            self.conn.commit()
        except sqlite3.Error as e:
            return FakeResponse(400, {"success": False, "result": [], "errors": [{"message": str(e)}]})
        return FakeResponse(200, {"success": True, "result": [{"results": rows}], "errors": []})

    def rows(self, sql: str = "SELECT * FROM waitlist ORDER BY id") -> List[Dict[str, Any]]:
        return [dict(r) for r in self.conn.execute(sql).fetchall()]


@pytest.fixture
def d1_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CLOUDFLARE_ACCOUNT_ID", "acct-123")
    monkeypatch.setenv("CLOUDFLARE_DATABASE_ID", "db-456")
    monkeypatch.setenv("CLOUDFLARE_API_TOKEN", "token-789")
    monkeypatch.delenv("CLOUDFLARE_DATABASE_API_TOKEN", raising=False)
    monkeypatch.delenv("WAITLIST_DEBUG", raising=False)


@pytest.fixture
def no_d1_env(monkeypatch: pytest.MonkeyPatch):
    for name in CREDENTIAL_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_d1(monkeypatch: pytest.MonkeyPatch, d1_env) -> FakeD1:
    fake = FakeD1()
    monkeypatch.setattr(d1_client.requests, "post", fake.post)
    yield fake
    fake.conn.close()


@pytest.fixture
def offline_d1(monkeypatch: pytest.MonkeyPatch, no_d1_env) -> FakeD1:
    """Unconfigured credentials; records any request that slips through."""
    fake = FakeD1()
    monkeypatch.setattr(d1_client.requests, "post", fake.post)
    yield fake
    fake.conn.close()
