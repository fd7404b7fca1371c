"""
Smoke tests for the SQLRepository against a temporary SQLite database.
"""
from __future__ import annotations

from quicktweet.db.models import User
from quicktweet.db.session import transaction
from quicktweet.repositories.sql_repository import SQLRepository


def _user(username: str, **extra) -> User:
    fields = dict(
        username=username,
        email=f"{username}@example.com",
        password_hash="argon2$hash",
        security_question="q",
        security_answer="a",
        pending_request=False,
    )
    fields.update(extra)
    return User(**fields)


def test_save_and_lookups(db_env):
    with transaction() as session:
        repo = SQLRepository(session)
        alice = repo.save(_user("alice"))
        repo.set_interests(alice, {"music", "go"})
        alice_id = alice.id

    with transaction() as session:
        repo = SQLRepository(session)
        assert repo.find_by_id(alice_id).username == "alice"
        assert repo.find_by_username("alice").id == alice_id
        assert repo.find_by_email("alice@example.com").id == alice_id
        assert repo.find_by_username("ALICE") is None
        assert set(repo.find_by_id(alice_id).interests) == {"music", "go"}


def test_edge_lookups(db_env):
    with transaction() as session:
        repo = SQLRepository(session)
        alice, bob, carol = (repo.save(_user(name)) for name in ("alice", "bob", "carol"))
        bob.friends.add(alice)
        carol.friend_requests.add(alice)

    with transaction() as session:
        repo = SQLRepository(session)
        alice = repo.find_by_username("alice")
        assert [u.username for u in repo.find_friend_holders(alice)] == ["bob"]
        assert [u.username for u in repo.find_request_recipients(alice)] == ["carol"]
        locked = repo.lock_by_usernames(["carol", "alice", "ghost"])
        assert sorted(locked) == ["alice", "carol"]


def test_delete_and_find_all(db_env):
    with transaction() as session:
        repo = SQLRepository(session)
        repo.save(_user("alice"))
        repo.save(_user("pending", pending_request=True))

    with transaction() as session:
        repo = SQLRepository(session)
        assert [u.username for u in repo.find_all()] == ["alice", "pending"]
        assert [u.username for u in repo.find_all(include_pending=False)] == ["alice"]
        repo.delete(repo.find_by_username("alice"))

    with transaction() as session:
        assert SQLRepository(session).find_by_username("alice") is None


def test_ledger_record(db_env):
    with transaction() as session:
        repo = SQLRepository(session)
        assert repo.get_ledger(1) is None
        repo.create_ledger(1)

    with transaction() as session:
        ledger = SQLRepository(session).get_ledger(1, for_update=True)
        assert ledger.pending_users == set()
