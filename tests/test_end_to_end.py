"""
tests/test_end_to_end.py

Sign in, create an item from a missed search, log it, share it, hide it.
"""


def test_matrix_walkthrough(client, remote):
    code = remote.issue_code("neo", "neo@example.com")
    assert client.post("/auth/sign-in", json={"email": "neo@example.com"}).status_code == 200
    assert client.get("/auth/callback", params={"code": code}).status_code == 200
    assert client.put("/profile", json={"username": "Neo_1"}).status_code == 200

    search = client.get("/items/search", params={"q": "Matrix"}).json()
    assert search["results"] == [] and search["can_create"]
    form = client.post("/items").json()
    assert form["view"] == "log_form" and form["item"]["title"] == "Matrix"

    rv = client.post("/logs", json={"stamp": "fire", "memo": "great", "is_public": True})
    assert rv.status_code == 201
    log_id = rv.json()["id"]

    cards = client.get("/").json()["log_list"]["logs"]
    assert len(cards) == 1
    assert (cards[0]["title"], cards[0]["stamp_icon"], cards[0]["memo"]) == ("Matrix", "🔥", "great")

    public = client.get("/u/neo_1").json()
    assert [(c["title"], c["stamp"], c["memo"]) for c in public["log_list"]["logs"]] == [("Matrix", "fire", "great")]

    rv = client.patch(f"/logs/{log_id}", json={"stamp": "fire", "memo": "great", "is_public": False})
    assert rv.status_code == 200

    assert client.get("/u/neo_1").json()["log_list"]["logs"] == []
    assert len(client.get("/logs").json()["logs"]) == 1
