"""
Supabase client facade.

RemoteService wraps a single configured supabase.Client and exposes the three
capabilities this application relies on: the auth session lifecycle, table
queries, and file storage. It is constructed once by create_remote_service()
at startup and passed explicitly to every component that needs it.

Design notes:
- Callers never see supabase/postgrest/storage types. Library failures are
  logged and translated to RemoteError (operation, provider message, code).
- Query composition mirrors the filter/order/limit helpers used by the table
  endpoints: a list of simple filters, an optional order column, a limit.
"""

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Literal, Optional

import httpx
from postgrest.exceptions import APIError
from pydantic import BaseModel, Field
from storage3.utils import StorageException
from supabase import AuthError, Client, create_client
from supabase.client import ClientOptions

from ..core.config import Settings
from ..core.errors import ConfigurationError, RemoteError
from ..core.logger import get_logger
from ..models.schemas import AuthSession

_logger = get_logger(__name__)

SessionCallback = Callable[[str, Optional[AuthSession]], None]


# PUBLIC_INTERFACE
class Filter(BaseModel):
    """Represents a single filter on a column with an operator and a value."""
    column: str = Field(..., description="Column name to filter on")
    op: Literal["eq", "ilike"] = Field(..., description="Comparison operator")
    value: Any = Field(..., description="Value to compare against")


def _apply_filters(q: Any, filters: Optional[List[Filter]]) -> Any:
    """Apply supported filters to a Supabase query object."""
    if not filters:
        return q
    for f in filters:
        if f.op == "eq":
            q = q.eq(f.column, f.value)
        elif f.op == "ilike":
            # Caller provides %wildcards% as needed
            q = q.ilike(f.column, str(f.value))
    return q


def _apply_order(q: Any, order_by: Optional[str], descending: bool) -> Any:
    if not order_by:
        return q
    return q.order(order_by, desc=descending)


def _to_auth_session(session: Any) -> Optional[AuthSession]:
    if session is None or getattr(session, "user", None) is None:
        return None
    return AuthSession(
        user_id=str(session.user.id),
        email=getattr(session.user, "email", None),
        access_token=session.access_token,
        expires_at=getattr(session, "expires_at", None),
    )


@contextmanager
def _remote_call(operation: str, **context: Any) -> Iterator[None]:
    """Translate library failures raised inside the block into RemoteError."""
    try:
        yield
    except APIError as exc:
        _logger.error(
            "Supabase query error",
            extra={"operation": operation, "code": exc.code, "error": exc.message, **context},
        )
        raise RemoteError(exc.message or "Supabase query failed.", operation=operation, code=exc.code) from exc
    except AuthError as exc:
        _logger.error("Supabase auth error", extra={"operation": operation, "error": exc.message, **context})
        raise RemoteError(exc.message, operation=operation, code=getattr(exc, "code", None)) from exc
    except StorageException as exc:
        _logger.error("Supabase storage error", extra={"operation": operation, "error": str(exc), **context})
        raise RemoteError("Supabase storage request failed.", operation=operation, detail=str(exc)) from exc
    except httpx.HTTPError as exc:
        _logger.error("Supabase transport error", exc_info=exc, extra={"operation": operation, **context})
        raise RemoteError("Could not reach Supabase.", operation=operation, detail=str(exc)) from exc


# PUBLIC_INTERFACE
class RemoteService:
    """Auth, table and storage access over one Supabase client."""

    def __init__(self, client: Client) -> None:
        self._client = client

    # -- auth ---------------------------------------------------------------

    def get_session(self) -> Optional[AuthSession]:
        """Return the session persisted in the client, if any."""
        with _remote_call("auth.get_session"):
            return _to_auth_session(self._client.auth.get_session())

    def on_session_change(self, callback: SessionCallback) -> Any:
        """Register callback(event, session) for sign-in/sign-out/refresh events.

        Returns the subscription; call ``unsubscribe()`` on it to stop listening.
        """
        def _listener(event: Any, session: Any) -> None:
            callback(str(getattr(event, "value", event)), _to_auth_session(session))

        return self._client.auth.on_auth_state_change(_listener)

    def send_magic_link(self, email: str, redirect_to: str) -> None:
        with _remote_call("auth.sign_in_with_otp"):
            self._client.auth.sign_in_with_otp(
                {"email": email, "options": {"email_redirect_to": redirect_to}}
            )

    def exchange_code(self, code: str) -> Optional[AuthSession]:
        """Trade the PKCE code from a magic link for a session."""
        with _remote_call("auth.exchange_code_for_session"):
            response = self._client.auth.exchange_code_for_session({"auth_code": code})
        return _to_auth_session(getattr(response, "session", None))

    def sign_out(self) -> None:
        with _remote_call("auth.sign_out"):
            self._client.auth.sign_out()

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
        with _remote_call("select", table=table):
            q = self._client.table(table).select(columns)
            q = _apply_filters(q, filters)
            q = _apply_order(q, order_by, descending)
            if limit is not None:
                q = q.limit(limit)
            resp = q.execute()
        return list(resp.data or [])

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored."""
        with _remote_call("insert", table=table):
            resp = self._client.table(table).insert(row).execute()
        rows = resp.data or []
        if not rows:
            raise RemoteError("Supabase returned no row for the insert.", operation="insert")
        return rows[0]

    def update_by_id(self, table: str, row_id: Any, values: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Update one row by id. Rows hidden by row-level security yield []."""
        with _remote_call("update", table=table, row_id=row_id):
            resp = self._client.table(table).update(values).eq("id", row_id).execute()
        return list(resp.data or [])

    def delete_by_id(self, table: str, row_id: Any) -> None:
        with _remote_call("delete", table=table, row_id=row_id):
            self._client.table(table).delete().eq("id", row_id).execute()

    def upsert(self, table: str, row: Dict[str, Any], on_conflict: str = "id") -> Dict[str, Any]:
        """Insert or replace one row keyed by ``on_conflict``."""
        with _remote_call("upsert", table=table):
            resp = self._client.table(table).upsert(row, on_conflict=on_conflict).execute()
        rows = resp.data or []
        return rows[0] if rows else dict(row)

    # -- storage ------------------------------------------------------------

    def upload(self, bucket: str, path: str, data: bytes, content_type: str, upsert: bool = True) -> None:
        with _remote_call("storage.upload", bucket=bucket, path=path):
            self._client.storage.from_(bucket).upload(
                path,
                data,
                {"content-type": content_type, "upsert": "true" if upsert else "false"},
            )

    def public_url(self, bucket: str, path: str) -> str:
        with _remote_call("storage.get_public_url", bucket=bucket, path=path):
            return self._client.storage.from_(bucket).get_public_url(path)


# PUBLIC_INTERFACE
def create_remote_service(settings: Settings) -> RemoteService:
    """
    Build the process-wide RemoteService.

    Raises ConfigurationError when SUPABASE_URL/SUPABASE_ANON_KEY are missing or
    the client rejects them; the application cannot start without a client.
    """
    url, key = settings.require_remote_credentials()
    options = ClientOptions(flow_type="pkce", persist_session=True, auto_refresh_token=True)
    try:
        # create_client validates URL/key formats internally and can raise.
        client = create_client(url, key, options=options)
    except Exception as exc:
        _logger.error("Failed to initialize Supabase client.", exc_info=exc)
        raise ConfigurationError(f"Invalid Supabase configuration: {exc}") from exc
    _logger.info("Supabase client initialized.", extra={"supabase_url": url})
    return RemoteService(client)
