import asyncio

from family_list.models.user import User


def _receive(channel, timeout: float = 1.0):
    return asyncio.run(asyncio.wait_for(channel.receive(), timeout))


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_signup_login_and_me(client, signup):
    user, headers = signup("Alice", "alice@example.com")
    assert user["familyId"] is None
    assert "hashedPassword" not in user

    login = client.post("/api/auth/login", json={"email": "ALICE@example.com", "password": "secret-pass"})
    assert login.status_code == 200
    assert login.json()["id"] == user["id"]

    me = client.get("/api/users/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["name"] == "Alice"
    assert me.json()["family"] is None


def test_login_with_bad_password(client, signup):
    signup("Alice", "alice@example.com")
    res = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope"})
    assert res.status_code == 401
    assert res.json()["error"]["kind"] == "Unauthenticated"


def test_duplicate_signup_is_conflict(client, signup):
    signup("Alice", "alice@example.com")
    res = client.post("/api/auth/signup", json={"name": "A2", "email": "Alice@Example.com", "password": "x"})
    assert res.status_code == 409
    assert res.json()["error"]["kind"] == "Conflict"


def test_identity_is_required_and_checked(client):
    res = client.get("/api/items")
    assert res.status_code == 401
    assert res.json()["error"]["kind"] == "Unauthenticated"

    res = client.get("/api/items", headers={"X-User-Id": "ghost"})
    assert res.status_code == 401
    assert res.json()["error"]["kind"] == "UnknownUser"


def test_identity_can_come_from_query_string(client, signup):
    user, _ = signup("Alice", "alice@example.com")
    res = client.get("/api/users/me", params={"userId": user["id"]})
    assert res.status_code == 200


def test_ungrouped_user_lists_nothing(client, signup):
    _, headers = signup("Carol", "carol@example.com")
    res = client.get("/api/items", headers=headers)
    assert res.status_code == 200
    assert res.json() == []


def test_family_flow(client, signup):
    alice, a_headers = signup("Alice", "alice@example.com")
    bob, b_headers = signup("Bob", "bob@example.com")

    created = client.post("/api/families", json={"name": "Smiths"}, headers=a_headers)
    assert created.status_code == 201
    family = created.json()

    again = client.post("/api/families", json={"name": "More"}, headers=a_headers)
    assert again.json()["error"]["kind"] == "AlreadyInFamily"

    wrong = client.post("/api/families/join", json={"code": family["code"], "name": "Jones"}, headers=b_headers)
    assert wrong.status_code == 403
    assert wrong.json()["error"]["kind"] == "NameMismatch"

    missing = client.post("/api/families/join", json={"code": "NOPE-0000", "name": "Smiths"}, headers=b_headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["kind"] == "FamilyNotFound"

    joined = client.post(
        "/api/families/join",
        json={"code": family["code"].lower(), "name": " smiths "},
        headers=b_headers,
    )
    assert joined.status_code == 200
    assert joined.json()["id"] == family["id"]

    members = client.get("/api/families/members", headers=a_headers).json()
    assert sorted(m["name"] for m in members) == ["Alice", "Bob"]
    assert all(set(m) == {"id", "name", "email"} for m in members)

    assert client.get("/api/families/me", headers=b_headers).json()["code"] == family["code"]
    assert client.get("/api/users/me", headers=b_headers).json()["family"]["id"] == family["id"]

    left = client.post("/api/families/leave", headers=b_headers)
    assert left.json() == {"ok": True}
    assert client.get("/api/users/me", headers=b_headers).json()["familyId"] is None

    not_in = client.post("/api/families/leave", headers=b_headers)
    assert not_in.status_code == 409
    assert not_in.json()["error"]["kind"] == "NotInFamily"


def test_smiths_scenario_notifies_every_open_stream(client, signup, session_factory):
    alice, a_headers = signup("Alice", "alice@example.com")
    bob, b_headers = signup("Bob", "bob@example.com")
    family = client.post("/api/families", json={"name": "Smiths"}, headers=a_headers).json()
    client.post("/api/families/join", json={"code": family["code"], "name": "smiths"}, headers=b_headers)

    broadcaster = client.app.state.broadcaster
    with session_factory() as s:
        a_channel = broadcaster.subscribe(s.get(User, alice["id"]))
        b_channel = broadcaster.subscribe(s.get(User, bob["id"]))

    res = client.post("/api/items", json={"name": "Milk", "category": "Food"}, headers=a_headers)
    assert res.status_code == 201

    assert _receive(a_channel) == {"kind": "item_added", "action": "added"}
    assert _receive(b_channel) == {"kind": "item_added", "action": "added"}

    for headers in (a_headers, b_headers):
        [item] = client.get("/api/items", headers=headers).json()
        assert item["name"] == "Milk"
        assert item["who"] == "Alice"
        assert item["urgency"] == "normal"
        assert item["done"] is False
        assert "createdAt" in item

    broadcaster.unsubscribe(a_channel)
    broadcaster.unsubscribe(b_channel)


def test_item_crud_and_broadcasts(client, signup, session_factory):
    alice, headers = signup("Alice", "alice@example.com")
    client.post("/api/families", json={"name": "Smiths"}, headers=headers)
    broadcaster = client.app.state.broadcaster
    with session_factory() as s:
        channel = broadcaster.subscribe(s.get(User, alice["id"]))

    milk = client.post(
        "/api/items",
        json={"name": "Milk", "category": "Food", "urgency": "urgent", "note": "oat"},
        headers=headers,
    ).json()
    soap = client.post("/api/items", json={"name": "Soap", "category": "Household"}, headers=headers).json()
    assert _receive(channel)["kind"] == "item_added"
    assert _receive(channel)["kind"] == "item_added"

    patched = client.patch(f"/api/items/{milk['id']}", json={"done": True}, headers=headers)
    assert patched.status_code == 200
    assert patched.json()["done"] is True
    assert patched.json()["note"] == "oat"
    assert _receive(channel) == {"kind": "item_updated", "action": "updated"}

    cleared = client.delete("/api/items/done/all", headers=headers)
    assert cleared.json() == {"ok": True, "deleted": 1}
    assert _receive(channel) == {"kind": "items_cleared", "action": "cleared"}

    # nothing left to clear still notifies
    assert client.delete("/api/items/done/all", headers=headers).json()["deleted"] == 0
    assert _receive(channel)["kind"] == "items_cleared"

    deleted = client.delete(f"/api/items/{soap['id']}", headers=headers)
    assert deleted.json() == {"ok": True}
    assert _receive(channel) == {"kind": "item_deleted", "action": "deleted"}

    assert client.get("/api/items", headers=headers).json() == []
    broadcaster.unsubscribe(channel)


def test_cross_family_item_access(client, signup):
    _, a_headers = signup("Alice", "alice@example.com")
    _, c_headers = signup("Carol", "carol@example.com")
    client.post("/api/families", json={"name": "Smiths"}, headers=a_headers)
    client.post("/api/families", json={"name": "Joneses"}, headers=c_headers)
    item = client.post("/api/items", json={"name": "Milk", "category": "Food"}, headers=a_headers).json()

    assert client.get("/api/items", headers=c_headers).json() == []

    patch = client.patch(f"/api/items/{item['id']}", json={"done": True}, headers=c_headers)
    assert patch.status_code == 403
    assert patch.json()["error"]["kind"] == "Forbidden"
    assert "Milk" not in patch.text

    delete = client.delete(f"/api/items/{item['id']}", headers=c_headers)
    assert delete.status_code == 403

    missing = client.patch("/api/items/nope", json={"done": True}, headers=c_headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["kind"] == "NotFound"


def test_item_validation_errors(client, signup):
    _, headers = signup("Alice", "alice@example.com")
    ungrouped = client.post("/api/items", json={"name": "Milk", "category": "Food"}, headers=headers)
    assert ungrouped.status_code == 409
    assert ungrouped.json()["error"]["kind"] == "NotInFamily"

    client.post("/api/families", json={"name": "Smiths"}, headers=headers)
    no_category = client.post("/api/items", json={"name": "Milk"}, headers=headers)
    assert no_category.status_code == 400
    assert no_category.json()["error"]["kind"] == "ValidationError"

    bad_category = client.post("/api/items", json={"name": "Milk", "category": "Gadgets"}, headers=headers)
    assert bad_category.status_code == 400
    assert bad_category.json()["error"]["kind"] == "ValidationError"


def test_event_stream_rejects_unauthenticated_and_ungrouped(client, signup):
    assert client.get("/api/events").json()["error"]["kind"] == "Unauthenticated"

    user, _ = signup("Carol", "carol@example.com")
    res = client.get("/api/events", params={"userId": user["id"]})
    assert res.status_code == 409
    assert res.json()["error"]["kind"] == "NotInFamily"
