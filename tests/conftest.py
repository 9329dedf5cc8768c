"""
tests/conftest.py

An in-memory stand-in for RemoteService plus app/client fixtures. The fake
mimics the parts of the hosted backend the app relies on: unique usernames,
owner-only log mutation, joined item reads, auth events and object storage.
"""
from __future__ import annotations

import datetime as _dt
import itertools
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from tone.api.main import create_app
from tone.core.config import Settings
from tone.core.errors import RemoteError
from tone.models.schemas import AuthSession
from tone.services.remote import Filter

BASE_TIME = _dt.datetime(2099, 1, 1, tzinfo=_dt.timezone.utc)


class FakeSubscription:
    def __init__(self, listeners: List[Callable], callback: Callable) -> None:
        self._listeners = listeners
        self._callback = callback

    def unsubscribe(self) -> None:
        if self._callback in self._listeners:
            self._listeners.remove(self._callback)


def _ilike(pattern: str, value: Any) -> bool:
    """Postgres ILIKE: % and _ are wildcards, backslash escapes the next char."""
    regex = []
    chars = iter(pattern)
    for ch in chars:
        if ch == "\\":
            regex.append(re.escape(next(chars, "\\")))
        elif ch == "%":
            regex.append(".*")
        elif ch == "_":
            regex.append(".")
        else:
            regex.append(re.escape(ch))
    return re.fullmatch("".join(regex), str(value or ""), flags=re.IGNORECASE | re.DOTALL) is not None


class FakeRemote:
    """Implements the RemoteService contract against Python lists."""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {"profiles": [], "items": [], "logs": []}
        self.objects: Dict[Tuple[str, str], Tuple[bytes, str]] = {}
        self.calls: List[Tuple[str, Optional[str]]] = []
        self.failures: Dict[str, RemoteError] = {}
        self.magic_links: List[Tuple[str, str]] = []
        self.listeners: List[Callable[[str, Optional[AuthSession]], None]] = []
        self.session: Optional[AuthSession] = None
        self._codes: Dict[str, AuthSession] = {}
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)

    # -- test helpers -------------------------------------------------------

    def fail(self, operation: str, message: str = "boom", code: Optional[str] = None) -> None:
        """Make every later call of operation (or operation:table) raise."""
        self.failures[operation] = RemoteError(message, operation=operation, code=code)

    def recover(self) -> None:
        self.failures.clear()

    def make_session(self, user_id: str, email: str = "") -> AuthSession:
        return AuthSession(user_id=user_id, email=email or f"{user_id}@example.com", access_token=f"token-{user_id}")

    def sign_in_as(self, user_id: str, email: str = "") -> AuthSession:
        session = self.make_session(user_id, email)
        self._emit("SIGNED_IN", session)
        return session

    def issue_code(self, user_id: str, email: str = "") -> str:
        code = f"code-{user_id}"
        self._codes[code] = self.make_session(user_id, email)
        return code

    def calls_to(self, operation: str) -> List[Tuple[str, Optional[str]]]:
        return [c for c in self.calls if c[0] == operation]

    def _emit(self, event: str, session: Optional[AuthSession]) -> None:
        self.session = session
        for listener in list(self.listeners):
            listener(event, session)

    def _record(self, operation: str, table: Optional[str] = None) -> None:
        self.calls.append((operation, table))
        for key in (f"{operation}:{table}", operation):
            if key in self.failures:
                raise self.failures[key]

    def _now(self) -> str:
        return (BASE_TIME + _dt.timedelta(seconds=next(self._clock))).isoformat()

    def _current_user(self) -> Optional[str]:
        return self.session.user_id if self.session else None

    def _visible(self, table: str, row: Dict[str, Any]) -> bool:
        # Row-level security: private logs are visible to their owner only.
        if table == "logs":
            return bool(row.get("is_public")) or row.get("user_id") == self._current_user()
        return True

    def _owns(self, table: str, row: Dict[str, Any]) -> bool:
        return table != "logs" or row.get("user_id") == self._current_user()

    # -- auth ---------------------------------------------------------------

    def get_session(self) -> Optional[AuthSession]:
        self._record("auth.get_session")
        return self.session

    def on_session_change(self, callback: Callable[[str, Optional[AuthSession]], None]) -> FakeSubscription:
        self.listeners.append(callback)
        return FakeSubscription(self.listeners, callback)

    def send_magic_link(self, email: str, redirect_to: str) -> None:
        self._record("auth.sign_in_with_otp")
        self.magic_links.append((email, redirect_to))

    def exchange_code(self, code: str) -> Optional[AuthSession]:
        self._record("auth.exchange_code_for_session")
        if code not in self._codes:
            raise RemoteError("invalid flow state, no valid flow state found", operation="auth.exchange_code_for_session")
        session = self._codes.pop(code)
        self._emit("SIGNED_IN", session)
        return session

    def sign_out(self) -> None:
        self._record("auth.sign_out")
        self._emit("SIGNED_OUT", None)

    # -- tables -------------------------------------------------------------

    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[List[Filter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        self._record("select", table)
        rows = [dict(r) for r in self.tables[table] if self._visible(table, r)]
        for f in filters or []:
            if f.op == "eq":
                rows = [r for r in rows if r.get(f.column) == f.value]
            elif f.op == "ilike":
                rows = [r for r in rows if _ilike(str(f.value), r.get(f.column))]
        if order_by:
            rows.sort(key=lambda r: r.get(order_by) or "", reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        if "items(*)" in columns:
            for r in rows:
                item = next((i for i in self.tables["items"] if i["id"] == r.get("item_id")), None)
                r["items"] = dict(item) if item else None
        return rows

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        self._record("insert", table)
        if not self._owns(table, row):
            raise RemoteError("new row violates row-level security policy", operation="insert", code="42501")
        new = dict(row, id=next(self._ids))
        if table in ("logs", "items"):
            new["created_at"] = self._now()
        self.tables[table].append(new)
        return dict(new)

    def update_by_id(self, table: str, row_id: Any, values: Dict[str, Any]) -> List[Dict[str, Any]]:
        self._record("update", table)
        for row in self.tables[table]:
            if str(row["id"]) == str(row_id) and self._owns(table, row):
                row.update(values)
                return [dict(row)]
        return []

    def delete_by_id(self, table: str, row_id: Any) -> None:
        self._record("delete", table)
        self.tables[table] = [
            r for r in self.tables[table] if not (str(r["id"]) == str(row_id) and self._owns(table, r))
        ]

    def upsert(self, table: str, row: Dict[str, Any], on_conflict: str = "id") -> Dict[str, Any]:
        self._record("upsert", table)
        if table == "profiles":
            for other in self.tables[table]:
                if other["username"] == row["username"] and other["id"] != row["id"]:
                    raise RemoteError(
                        'duplicate key value violates unique constraint "profiles_username_key"',
                        operation="upsert",
                        code="23505",
                    )
        for existing in self.tables[table]:
            if existing[on_conflict] == row[on_conflict]:
                existing.clear()
                existing.update(row)
                return dict(existing)
        self.tables[table].append(dict(row))
        return dict(row)

    # -- storage ------------------------------------------------------------

    def upload(self, bucket: str, path: str, data: bytes, content_type: str, upsert: bool = True) -> None:
        self._record("storage.upload", bucket)
        self.objects[(bucket, path)] = (data, content_type)

    def public_url(self, bucket: str, path: str) -> str:
        self._record("storage.get_public_url", bucket)
        return f"https://storage.test/{bucket}/{path}"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        SUPABASE_URL="https://tone-test.supabase.co",
        SUPABASE_ANON_KEY="anon-key",
        SITE_URL="http://tone.test",
    )


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def app(settings: Settings, remote: FakeRemote):
    return create_app(settings=settings, remote=remote)


@pytest.fixture
def client(app):
    """A client whose lifespan (session controller start/stop) is active."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def user_client(client, remote: FakeRemote):
    """Client with user-1 signed in."""
    remote.sign_in_as("user-1", "one@example.com")
    return client


def add_item(remote: FakeRemote, title: str, category: str = "movie") -> Dict[str, Any]:
    row = {"id": next(remote._ids), "title": title, "category": category, "created_at": remote._now()}
    remote.tables["items"].append(row)
    return row


def add_log(remote: FakeRemote, user_id: str, item_id: Any, stamp: str = "fire", is_public: bool = True,
            memo: Optional[str] = None) -> Dict[str, Any]:
    row = {
        "id": next(remote._ids),
        "user_id": user_id,
        "item_id": item_id,
        "stamp": stamp,
        "memo": memo,
        "is_public": is_public,
        "created_at": remote._now(),
    }
    remote.tables["logs"].append(row)
    return row


def add_profile(remote: FakeRemote, user_id: str, username: str, display_name: Optional[str] = None,
                avatar_url: Optional[str] = None) -> Dict[str, Any]:
    row = {
        "id": user_id,
        "username": username,
        "display_name": display_name,
        "avatar_url": avatar_url,
        "updated_at": remote._now(),
    }
    remote.tables["profiles"].append(row)
    return row
