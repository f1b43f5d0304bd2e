"""
Pytest config.

Settings are read once at import time, so the environment is pinned here before
anything from `rowkeeper` is imported. The Supabase SDK client is replaced by an
in-memory fake; the cookie store, cookie session storage, dependencies and
middleware under test are the real ones.
"""

from __future__ import annotations

import json
import os
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

os.environ["SUPABASE_URL"] = "https://testref.supabase.co"
os.environ["SUPABASE_ANON_KEY"] = "anon-key"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from supabase import PostgrestAPIError
from supabase_auth.constants import STORAGE_KEY
from supabase_auth.errors import AuthError, AuthInvalidCredentialsError

AUTH_COOKIE = "sb-testref-auth-token"


class FakeBackend:
    """Auth accounts, profiles and the users table shared by every fake client."""

    def __init__(self) -> None:
        self.accounts: Dict[str, Dict[str, str]] = {}
        self.tokens: Dict[str, str] = {}
        self.expired_tokens: Dict[str, str] = {}
        self.tables: Dict[str, List[Dict[str, Any]]] = {"profiles": [], "users": []}
        self.failing_tables: set = set()
        self.confirm_email = False
        self.bound_tokens: List[str] = []
        self.closed_connections: List[str] = []
        self._next_id = 1
        self._clock = 0

    def add_account(self, user_id: str, email: str, password: str = "secret123", role: Optional[str] = "user") -> str:
        self.accounts[email] = {"id": user_id, "password": password}
        self.tokens[f"token-{user_id}"] = user_id
        if role is not None:
            self.tables["profiles"].append({"id": user_id, "role": role})
        return f"token-{user_id}"

    def email_for(self, user_id: str) -> Optional[str]:
        for email, account in self.accounts.items():
            if account["id"] == user_id:
                return email
        return None

    def add_row(self, user_id: str, name: str, email: str) -> Dict[str, Any]:
        row = {
            "id": self._next_id,
            "name": name,
            "email": email,
            "user_id": user_id,
            "created_at": f"2026-01-01T00:00:{self._clock:02d}+00:00",
            "updated_at": None,
        }
        self._next_id += 1
        self._clock += 1
        self.tables["users"].append(row)
        return row


class FakeQuery:
    def __init__(self, backend: FakeBackend, table: str) -> None:
        self.backend = backend
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.payload: Any = None
        self.filters: List[tuple] = []
        self.order_by: Optional[tuple] = None
        self.single = False

    def select(self, columns: str = "*") -> "FakeQuery":
        self.op, self.columns = "select", columns
        return self

    def insert(self, rows: Any) -> "FakeQuery":
        self.op, self.payload = "insert", rows if isinstance(rows, list) else [rows]
        return self

    def update(self, values: Dict[str, Any]) -> "FakeQuery":
        self.op, self.payload = "update", values
        return self

    def delete(self) -> "FakeQuery":
        self.op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append((column, value))
        return self

    def order(self, column: str, *, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def maybe_single(self) -> "FakeQuery":
        self.single = True
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(str(row.get(column)) == str(value) for column, value in self.filters)

    def execute(self):
        if self.table in self.backend.failing_tables:
            raise PostgrestAPIError({"message": f"permission denied for table {self.table}", "code": "42501"})
        rows = self.backend.tables.setdefault(self.table, [])

        if self.op == "insert":
            inserted = [self.backend.add_row(r["user_id"], r["name"], r["email"]) for r in self.payload]
            return SimpleNamespace(data=[dict(r) for r in inserted], count=None)
        if self.op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            return SimpleNamespace(data=updated, count=None)
        if self.op == "delete":
            deleted = [dict(row) for row in rows if self._matches(row)]
            self.backend.tables[self.table] = [row for row in rows if not self._matches(row)]
            return SimpleNamespace(data=deleted, count=None)

        selected = [dict(row) for row in rows if self._matches(row)]
        if self.columns != "*":
            wanted = [c.strip() for c in self.columns.split(",")]
            selected = [{c: row.get(c) for c in wanted} for row in selected]
        if self.order_by:
            column, desc = self.order_by
            selected.sort(key=lambda row: row.get(column) or "", reverse=desc)
        if self.single:
            return SimpleNamespace(data=selected[0], count=None) if selected else None
        return SimpleNamespace(data=selected, count=None)


class FakeAuth:
    """Mimics the SDK auth client: sessions live in the storage it was built with."""

    def __init__(self, backend: FakeBackend, storage) -> None:
        self.backend = backend
        self.storage = storage

    def _save_session(self, token: str) -> SimpleNamespace:
        self.storage.set_item(STORAGE_KEY, json.dumps({"access_token": token, "refresh_token": f"refresh-{token}"}))
        return SimpleNamespace(access_token=token)

    def _user(self, user_id: str) -> SimpleNamespace:
        return SimpleNamespace(id=user_id, email=self.backend.email_for(user_id))

    def sign_in_with_password(self, credentials: Dict[str, str]):
        email, password = credentials.get("email"), credentials.get("password")
        if not email or not password:
            raise AuthInvalidCredentialsError("You must provide either an email or phone number and a password")
        account = self.backend.accounts.get(email)
        if account is None or account["password"] != password:
            raise AuthError("Invalid login credentials", "invalid_credentials")
        session = self._save_session(f"token-{account['id']}")
        return SimpleNamespace(user=self._user(account["id"]), session=session)

    def sign_up(self, credentials: Dict[str, str]):
        email = credentials["email"]
        if email in self.backend.accounts:
            raise AuthError("User already registered", "user_already_exists")
        user_id = f"new-{len(self.backend.accounts) + 1}"
        token = self.backend.add_account(user_id, email, credentials["password"])
        if self.backend.confirm_email:
            return SimpleNamespace(user=self._user(user_id), session=None)
        return SimpleNamespace(user=self._user(user_id), session=self._save_session(token))

    def get_session(self):
        raw = self.storage.get_item(STORAGE_KEY)
        if not raw:
            return None
        token = json.loads(raw)["access_token"]
        if token in self.backend.expired_tokens:
            return self._save_session(self.backend.expired_tokens[token])
        return SimpleNamespace(access_token=token)

    def get_user(self, jwt: Optional[str] = None):
        user_id = self.backend.tokens.get(jwt)
        if user_id is None:
            raise AuthError("invalid JWT: unable to parse or verify signature", "bad_jwt")
        return SimpleNamespace(user=self._user(user_id))

    def sign_out(self) -> None:
        self.storage.remove_item(STORAGE_KEY)

    def close(self) -> None:
        self.backend.closed_connections.append("auth")


class FakePostgrest:
    def __init__(self, backend: FakeBackend) -> None:
        self.backend = backend

    def auth(self, token: str) -> None:
        self.backend.bound_tokens.append(token)

    def aclose(self) -> None:
        self.backend.closed_connections.append("postgrest")


class FakeSupabase:
    def __init__(self, backend: FakeBackend, storage) -> None:
        self.auth = FakeAuth(backend, storage)
        self.postgrest = FakePostgrest(backend)
        self.backend = backend

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self.backend, name)


@pytest.fixture
def backend(monkeypatch: pytest.MonkeyPatch) -> FakeBackend:
    fake = FakeBackend()
    monkeypatch.setattr(
        "rowkeeper.database.supabase_client._create_supabase",
        lambda storage: FakeSupabase(fake, storage),
    )
    return fake


@pytest.fixture
def make_client(backend: FakeBackend):
    """Fresh TestClient with its own cookie jar, one per simulated browser."""
    from rowkeeper.main import app

    return lambda: TestClient(app)


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()


@pytest.fixture
def signed_in(make_client):
    """Browser that has signed in through POST /login."""

    def _signed_in(email: str, password: str = "secret123") -> TestClient:
        browser = make_client()
        response = browser.post("/login", data={"email": email, "password": password}, follow_redirects=False)
        assert response.status_code == 303, response.text
        return browser

    return _signed_in


@pytest.fixture
def fake_supabase(backend: FakeBackend) -> FakeSupabase:
    """SDK stand-in for exercising services directly, without HTTP."""
    from supabase_auth import SyncMemoryStorage

    return FakeSupabase(backend, SyncMemoryStorage())
