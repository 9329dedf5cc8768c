"""
tests/test_items.py
"""
from conftest import add_item


def test_blank_query_is_a_noop(user_client, remote):
    rv = user_client.get("/items/search", params={"q": "   "})
    assert rv.status_code == 200
    body = rv.json()
    assert body["status"] == "idle"
    assert body["searched"] is False
    assert body["can_create"] is False
    assert ("select", "items") not in remote.calls


def test_search_is_case_insensitive_substring(user_client, remote):
    add_item(remote, "The Matrix")
    add_item(remote, "Matrix Reloaded")
    add_item(remote, "Dune")

    body = user_client.get("/items/search", params={"q": "matr"}).json()
    assert body["status"] == "results"
    assert sorted(i["title"] for i in body["results"]) == ["Matrix Reloaded", "The Matrix"]


def test_search_caps_results_at_ten(user_client, remote):
    for n in range(15):
        add_item(remote, f"Star {n}")
    body = user_client.get("/items/search", params={"q": "star"}).json()
    assert len(body["results"]) == 10


def test_create_offered_even_when_results_exist(user_client, remote):
    add_item(remote, "Foo Fighters")
    body = user_client.get("/items/search", params={"q": "Foo"}).json()
    assert body["results"]
    assert body["can_create"] is True


def test_create_on_miss_opens_log_form(user_client, remote):
    body = user_client.get("/items/search", params={"q": "Foo"}).json()
    assert body["results"] == []
    assert body["can_create"] is True

    rv = user_client.post("/items")
    assert rv.status_code == 201
    form = rv.json()
    assert form["view"] == "log_form"
    assert form["item"]["title"] == "Foo"
    assert form["default_stamp"] == "fire"

    assert [i["title"] for i in remote.tables["items"]] == ["Foo"]
    assert remote.tables["items"][0]["category"] == "other"
    assert user_client.get("/").json()["selected_item"]["title"] == "Foo"


def test_create_uses_given_title(user_client, remote):
    user_client.get("/items/search", params={"q": "foo"})
    rv = user_client.post("/items", json={"title": "Foo (Director's Cut)"})
    assert rv.json()["item"]["title"] == "Foo (Director's Cut)"


def test_create_requires_a_search_first(user_client, remote):
    assert user_client.post("/items").status_code == 400
    assert remote.tables["items"] == []


def test_duplicate_titles_are_allowed(user_client, remote):
    add_item(remote, "Foo")
    user_client.get("/items/search", params={"q": "Foo"})
    assert user_client.post("/items").status_code == 201
    assert [i["title"] for i in remote.tables["items"]] == ["Foo", "Foo"]


def test_pick_search_result(user_client, remote):
    item = add_item(remote, "Dune")
    user_client.get("/items/search", params={"q": "dune"})
    rv = user_client.post(f"/items/{item['id']}/select")
    assert rv.status_code == 200
    assert rv.json()["item"]["id"] == item["id"]
    assert user_client.post("/items/999/select").status_code == 404


def test_search_failure(user_client, remote):
    remote.fail("select:items")
    rv = user_client.get("/items/search", params={"q": "dune"})
    assert rv.status_code == 502
    assert rv.json()["detail"] == "Search failed."


def test_create_failure(user_client, remote):
    user_client.get("/items/search", params={"q": "dune"})
    remote.fail("insert:items")
    rv = user_client.post("/items")
    assert rv.status_code == 502
    assert rv.json()["detail"] == "Failed to create the item."


def test_search_treats_wildcards_literally(user_client, remote):
    add_item(remote, "Dune")
    add_item(remote, "snake_case")
    add_item(remote, "100% Orange")

    def titles(q):
        return [i["title"] for i in user_client.get("/items/search", params={"q": q}).json()["results"]]

    assert titles("_") == ["snake_case"]
    assert titles("%") == ["100% Orange"]
    assert titles("\\") == []
    assert titles("d_ne") == []
