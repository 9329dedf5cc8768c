"""
tests/test_remote.py

RemoteService against a mocked supabase client: query composition and error
translation.
"""
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError

from tone.core.errors import ConfigurationError, RemoteError
from tone.core.config import Settings
from tone.services.remote import Filter, RemoteService, create_remote_service


def _client():
    return MagicMock()


def test_select_applies_filters_order_and_limit():
    client = _client()
    chain = client.table.return_value.select.return_value
    chain.eq.return_value.order.return_value.limit.return_value.execute.return_value = SimpleNamespace(
        data=[{"id": 1}]
    )
    remote = RemoteService(client)

    rows = remote.select(
        "logs",
        columns="*, items(*)",
        filters=[Filter(column="user_id", op="eq", value="u1")],
        order_by="created_at",
        descending=True,
        limit=5,
    )

    assert rows == [{"id": 1}]
    client.table.assert_called_once_with("logs")
    client.table.return_value.select.assert_called_once_with("*, items(*)")
    chain.eq.assert_called_once_with("user_id", "u1")
    chain.eq.return_value.order.assert_called_once_with("created_at", desc=True)
    chain.eq.return_value.order.return_value.limit.assert_called_once_with(5)


def test_select_ilike():
    client = _client()
    chain = client.table.return_value.select.return_value
    chain.ilike.return_value.limit.return_value.execute.return_value = SimpleNamespace(data=None)
    rows = RemoteService(client).select("items", filters=[Filter(column="title", op="ilike", value="%foo%")], limit=10)
    assert rows == []
    chain.ilike.assert_called_once_with("title", "%foo%")


def test_api_error_keeps_code():
    client = _client()
    client.table.return_value.upsert.return_value.execute.side_effect = APIError(
        {"message": "duplicate key value violates unique constraint", "code": "23505", "hint": None, "details": None}
    )
    with pytest.raises(RemoteError) as info:
        RemoteService(client).upsert("profiles", {"id": "u1", "username": "x"})
    assert info.value.code == "23505"
    assert info.value.operation == "upsert"
    client.table.return_value.upsert.assert_called_once_with({"id": "u1", "username": "x"}, on_conflict="id")


def test_transport_error_is_translated():
    client = _client()
    client.table.return_value.delete.return_value.eq.return_value.execute.side_effect = httpx.ConnectError("down")
    with pytest.raises(RemoteError) as info:
        RemoteService(client).delete_by_id("logs", 3)
    assert info.value.message == "Could not reach Supabase."


def test_insert_returns_stored_row():
    client = _client()
    client.table.return_value.insert.return_value.execute.return_value = SimpleNamespace(
        data=[{"id": 7, "title": "Foo", "category": "other"}]
    )
    row = RemoteService(client).insert("items", {"title": "Foo", "category": "other"})
    assert row["id"] == 7


def test_update_hidden_row_returns_empty():
    client = _client()
    client.table.return_value.update.return_value.eq.return_value.execute.return_value = SimpleNamespace(data=[])
    assert RemoteService(client).update_by_id("logs", 3, {"stamp": "fire"}) == []


def test_session_is_converted():
    client = _client()
    client.auth.get_session.return_value = SimpleNamespace(
        user=SimpleNamespace(id="u1", email="a@example.com"), access_token="tok", expires_at=100
    )
    session = RemoteService(client).get_session()
    assert (session.user_id, session.email, session.access_token) == ("u1", "a@example.com", "tok")

    client.auth.get_session.return_value = None
    assert RemoteService(client).get_session() is None


def test_magic_link_request_shape():
    client = _client()
    RemoteService(client).send_magic_link("a@example.com", "http://tone.test/auth/callback")
    client.auth.sign_in_with_otp.assert_called_once_with(
        {"email": "a@example.com", "options": {"email_redirect_to": "http://tone.test/auth/callback"}}
    )


def test_session_listener_receives_converted_session():
    client = _client()
    seen = []
    RemoteService(client).on_session_change(lambda event, session: seen.append((event, session)))
    listener = client.auth.on_auth_state_change.call_args[0][0]
    listener("SIGNED_OUT", None)
    assert seen == [("SIGNED_OUT", None)]


def test_storage_upload_and_url():
    client = _client()
    bucket = client.storage.from_.return_value
    bucket.get_public_url.return_value = "https://cdn/avatars/a.png"
    remote = RemoteService(client)
    remote.upload("avatars", "a.png", b"img", "image/png")
    assert remote.public_url("avatars", "a.png") == "https://cdn/avatars/a.png"
    bucket.upload.assert_called_once_with("a.png", b"img", {"content-type": "image/png", "upsert": "true"})


def test_missing_credentials_are_fatal():
    with pytest.raises(ConfigurationError, match="SUPABASE_ANON_KEY"):
        create_remote_service(Settings(_env_file=None, SUPABASE_URL="https://x.supabase.co", SUPABASE_ANON_KEY=""))
