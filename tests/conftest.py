# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.

FakeSupabaseClient keeps every table in memory and understands the subset of
the supabase-py query chain the registry uses.
"""

import copy
import uuid
from types import SimpleNamespace
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock, patch

from main import create_app
from dependencies.auth import CurrentUser, actor_from_row, get_current_user


# ============================================================
# In-memory Supabase
# ============================================================
class FakeQuery:

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.descending = False
        self.row_limit = None

    # ---- operations ------------------------------------------
    def select(self, *columns):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    # ---- filters ---------------------------------------------
    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    def lt(self, column, value):
        self.filters.append(("lt", column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = column
        self.descending = desc
        return self

    def limit(self, n):
        self.row_limit = n
        return self

    def _matches(self, row):
        for kind, column, value in self.filters:
            current = row.get(column)
            if kind == "eq" and current != value:
                return False
            if kind == "in" and current not in value:
                return False
            if kind == "lt" and (current is None or not current < value):
                return False
        return True

    def execute(self):
        self.client.calls.append((self.table, self.op, list(self.filters)))
        if self.table in self.client.failing_tables:
            raise Exception(f"relation \"{self.table}\" is unavailable")

        rows = self.client.tables.setdefault(self.table, [])

        if self.op == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for payload in payloads:
                row = {"id": str(uuid.uuid4()), **copy.deepcopy(payload)}
                rows.append(row)
                inserted.append(copy.deepcopy(row))
            return SimpleNamespace(data=inserted)

        matched = [r for r in rows if self._matches(r)]

        if self.op == "update":
            for row in matched:
                row.update(copy.deepcopy(self.payload))
            return SimpleNamespace(data=copy.deepcopy(matched))

        if self.op == "delete":
            self.client.tables[self.table] = [r for r in rows if not self._matches(r)]
            return SimpleNamespace(data=copy.deepcopy(matched))

        if self.order_by:
            matched = sorted(
                matched,
                key=lambda r: str(r.get(self.order_by) or ""),
                reverse=self.descending,
            )
        if self.row_limit is not None:
            matched = matched[: self.row_limit]
        return SimpleNamespace(data=copy.deepcopy(matched))


class FakeAuth:

    def __init__(self):
        self.tokens = {}        # access token -> user id
        self.passwords = {}     # email -> (password, user id)
        self.admin = Mock()
        self.admin.create_user.return_value = SimpleNamespace(user=SimpleNamespace(id="appointee-id"))

    def get_user(self, token):
        if token not in self.tokens:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=SimpleNamespace(id=self.tokens[token]))

    def sign_in_with_password(self, credentials):
        stored = self.passwords.get(credentials["email"])
        if stored is None or stored[0] != credentials["password"]:
            raise Exception("Invalid login credentials")
        token = f"token-{stored[1]}"
        self.tokens[token] = stored[1]
        return SimpleNamespace(
            user=SimpleNamespace(id=stored[1]),
            session=SimpleNamespace(access_token=token),
        )

    def sign_up(self, credentials):
        if credentials["email"] in self.passwords:
            raise Exception("User already registered")
        user_id = f"user-{len(self.passwords) + 1}"
        self.passwords[credentials["email"]] = (credentials["password"], user_id)
        return SimpleNamespace(user=SimpleNamespace(id=user_id))


class FakeSupabaseClient:

    def __init__(self, tables=None):
        self.tables = copy.deepcopy(tables or {})
        self.calls = []
        self.failing_tables = set()
        self.auth = FakeAuth()
        self.storage = Mock()

    def table(self, name):
        return FakeQuery(self, name)

    def rows(self, name):
        return self.tables.get(name, [])

    def row(self, name, record_id):
        for r in self.rows(name):
            if r.get("id") == record_id:
                return r
        return None


# ============================================================
# Seed data: two wards, three zones, one admin of each kind
# ============================================================
WARDS = [
    {"id": "ward-1", "name": "Ward One", "created_at": "2024-01-01T00:00:00+00:00"},
    {"id": "ward-2", "name": "Ward Two", "created_at": "2024-01-02T00:00:00+00:00"},
]

ZONES = [
    {"id": "zone-1", "name": "Zone A", "ward_id": "ward-1", "created_at": "2024-01-03T00:00:00+00:00"},
    {"id": "zone-2", "name": "Zone B", "ward_id": "ward-1", "created_at": "2024-01-04T00:00:00+00:00"},
    {"id": "zone-3", "name": "Zone C", "ward_id": "ward-2", "created_at": "2024-01-05T00:00:00+00:00"},
]

USERS = [
    {"id": "super-1", "email": "super@example.com", "name": "Sam Super", "role": "superAdmin",
     "zone_id": None, "ward_id": None, "verified": True, "status": "active"},
    {"id": "ward-admin-1", "email": "wanda@example.com", "name": "Wanda Ward", "role": "wardAdmin",
     "zone_id": None, "ward_id": "ward-1", "verified": True, "status": "active"},
    {"id": "zonal-admin-1", "email": "zoe@example.com", "name": "Zoe Zonal", "role": "zonalAdmin",
     "zone_id": "zone-1", "ward_id": "ward-1", "verified": True, "status": "active"},
    {"id": "member-1", "email": "mia@example.com", "name": "Mia Pending", "role": "member",
     "zone_id": "zone-1", "ward_id": "ward-1", "verified": False, "status": "active",
     "created_at": "2024-03-01T10:00:00+00:00"},
    {"id": "member-2", "email": "max@example.com", "name": "Max Verified", "role": "member",
     "zone_id": "zone-2", "ward_id": "ward-1", "verified": True, "status": "active",
     "verified_at": "2024-03-02T10:00:00+00:00", "created_at": "2024-03-01T11:00:00+00:00"},
    {"id": "member-3", "email": "nia@example.com", "name": "Nia Elsewhere", "role": "member",
     "zone_id": "zone-3", "ward_id": "ward-2", "verified": False, "status": "active",
     "created_at": "2024-03-01T12:00:00+00:00"},
]


def _user(user_id):
    return next(u for u in USERS if u["id"] == user_id)


@pytest.fixture
def fake_supabase():
    """Fresh in-memory registry per test."""
    return FakeSupabaseClient({
        "wards": WARDS,
        "zones": ZONES,
        "users": USERS,
        "activities": [],
        "admin_appointments": [],
    })


@pytest.fixture
def super_admin() -> CurrentUser:
    return actor_from_row(_user("super-1"))


@pytest.fixture
def ward_admin() -> CurrentUser:
    return actor_from_row(_user("ward-admin-1"))


@pytest.fixture
def zonal_admin() -> CurrentUser:
    return actor_from_row(_user("zonal-admin-1"))


@pytest.fixture
def member_user() -> CurrentUser:
    return actor_from_row(_user("member-2"))


# ============================================================
# App / client
# ============================================================
@pytest.fixture(scope="function")
def app():
    """Create a test FastAPI application instance."""
    return create_app()


@pytest.fixture(scope="function")
def client(app, fake_supabase) -> Generator[TestClient, None, None]:
    """Test client whose Supabase calls all land in fake_supabase."""
    with patch("core.supabase_client.get_supabase_client", return_value=fake_supabase):
        with TestClient(app) as test_client:
            yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(app):
    """Override the authenticated actor: login_as(ward_admin)."""
    def _login(user: CurrentUser):
        app.dependency_overrides[get_current_user] = lambda: user
        return user
    return _login
