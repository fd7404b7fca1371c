from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import grant_admin
from quicktweet.app import create_app


@pytest.fixture()
def client(db_env):
    with TestClient(create_app()) as test_client:
        yield test_client


def _as(username: str) -> dict:
    return {"X-Auth-User": username}


def _register(client, username: str):
    payload = {
        "username": username,
        "email": f"{username}@example.com",
        "password": "s3cret-pass",
        "security_question": "First pet?",
        "security_answer": "Rex",
    }
    return client.post("/users", json=payload)


def _approved(client, admin: str, *usernames: str):
    for name in usernames:
        assert _register(client, name).status_code == 201
        assert client.put(f"/admin/requests/{name}", headers=_as(admin)).status_code == 200


@pytest.fixture()
def admin(client):
    assert _register(client, "root").status_code == 201
    grant_admin("root")
    client.app.state.services.lifecycle.approve("root")
    return "root"


def test_registration_and_moderation_flow(client, admin):
    created = _register(client, "alice")
    assert created.status_code == 201
    assert created.json()["pending_request"] is True

    assert client.get("/admin/requests", headers=_as("alice")).status_code == 403
    pending = client.get("/admin/requests", headers=_as(admin))
    assert [u["username"] for u in pending.json()] == ["alice"]

    assert client.put("/admin/requests/alice", headers=_as(admin)).json()["pending_request"] is False
    assert client.get("/admin/requests", headers=_as(admin)).json() == []
    assert client.delete("/admin/requests/alice", headers=_as(admin)).status_code == 404


def test_friend_flow_and_errors(client, admin):
    _approved(client, admin, "alice", "bob")

    resp = client.put("/users/friends/requests/bob", json={"friend_username": '"alice"'}, headers=_as("bob"))
    assert resp.status_code == 200
    again = client.put("/users/friends/requests/bob", json={"friend_username": "alice"}, headers=_as("bob"))
    assert again.status_code == 409
    assert again.json()["error"] == "already_requested"

    requests = client.get("/users/friends/requests/alice", headers=_as("alice")).json()
    assert [u["username"] for u in requests] == ["bob"]

    assert client.put("/users/friends/alice", json={"friend_username": "bob"}, headers=_as("alice")).status_code == 200
    assert client.get("/users/friends/requests/alice", headers=_as("alice")).json() == []
    assert [u["username"] for u in client.get("/users/friends/bob", headers=_as("bob")).json()] == ["alice"]

    forbidden = client.put("/users/friends/alice", json={"friend_username": "bob"}, headers=_as("bob"))
    assert forbidden.status_code == 403

    assert client.post("/users/friends/bob", json={"friend_username": "alice"}, headers=_as("bob")).status_code == 200
    missing = client.post("/users/friends/bob", json={"friend_username": "alice"}, headers=_as("bob"))
    assert missing.status_code == 409
    assert missing.json()["error"] == "not_friends"


def test_delete_account_scrubs_friends(client, admin):
    _approved(client, admin, "alice", "bob")
    client.put("/users/friends/alice", json={"friend_username": "bob"}, headers=_as("alice"))
    alice_id = client.get("/users/username/alice", headers=_as("alice")).json()["id"]

    resp = client.delete(f"/users/{alice_id}", headers=_as("alice"))

    assert resp.status_code == 200
    assert client.get("/users/friends/bob", headers=_as("bob")).json() == []
    assert client.get(f"/users/{alice_id}", headers=_as("bob")).status_code == 404


def test_caller_identity_is_required(client, admin):
    assert client.get("/users").status_code == 401
    assert client.get("/users", headers=_as("nobody")).status_code == 401
    assert [u["username"] for u in client.get("/users", headers=_as(admin)).json()] == ["root"]


def test_profile_and_status_routes(client, admin):
    _approved(client, admin, "alice")

    resp = client.put("/users/alice", json={"bio": "hello", "interests": ["music"]}, headers=_as("alice"))
    assert resp.json()["interests"] == ["music"]
    assert client.put("/users/status/alice", json={"status": '"online"'}, headers=_as("alice")).json() == {"status": "online"}
    assert client.get("/users/status/alice", headers=_as(admin)).json() == {"status": "online"}
    assert client.put("/users/status/alice", json={"status": ""}, headers=_as("alice")).status_code == 400
    found = client.post("/users/interests", json={"interests": ["music"]}, headers=_as(admin)).json()
    assert [u["username"] for u in found] == ["alice"]
    assert [u["username"] for u in client.get("/users/search", params={"query": "ALI"}, headers=_as(admin)).json()] == ["alice"]


def test_toggle_role_route(client, admin):
    _approved(client, admin, "alice")
    alice_id = client.get("/users/username/alice", headers=_as(admin)).json()["id"]

    assert client.put(f"/admin/users/{alice_id}", headers=_as("alice")).status_code == 403
    assert client.put(f"/admin/users/{alice_id}", headers=_as(admin)).json() == {"message": "User role updated to ADMIN"}
