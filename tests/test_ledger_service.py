from __future__ import annotations

import pytest

from conftest import candidate
from quicktweet.db.session import transaction
from quicktweet.domain.errors import NotFound, Unauthorized
from quicktweet.repositories.sql_repository import SQLRepository
from quicktweet.services.ledger_service import AuthorizationLedger


def test_bootstrap_is_idempotent(db_env):
    ledger = AuthorizationLedger(7)
    ledger.bootstrap()
    ledger.bootstrap()

    with transaction() as session:
        assert SQLRepository(session).get_ledger(7) is not None


def test_list_pending_requires_admin_role(services):
    services.lifecycle.register(candidate("alice"))

    with pytest.raises(Unauthorized):
        services.ledger.list_pending("USER")
    with pytest.raises(Unauthorized):
        services.ledger.list_pending(None)

    pending = services.ledger.list_pending("ADMIN")
    assert [u.username for u in pending] == ["alice"]


def test_missing_ledger_is_reported(db_env):
    ledger = AuthorizationLedger(99)
    with pytest.raises(NotFound):
        ledger.list_pending("ADMIN")


def test_remove_unknown_entry_raises(services, make_user):
    make_user("bob")
    with transaction() as session:
        bob = SQLRepository(session).find_by_username("bob")
        assert services.ledger.contains(session, bob) is False
        with pytest.raises(NotFound):
            services.ledger.remove(session, bob)
