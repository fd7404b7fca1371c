from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the quicktweet package importable for local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from quicktweet.core import config as core_config  # noqa: E402
from quicktweet.db import models  # noqa: E402
from quicktweet.db import session as db_session  # noqa: E402
from quicktweet.db.create_tables import create_all  # noqa: E402
from quicktweet.db.session import transaction  # noqa: E402
from quicktweet.domain.accounts import RegistrationCandidate  # noqa: E402
from quicktweet.repositories.sql_repository import SQLRepository  # noqa: E402
from quicktweet.services.registry import ServiceRegistry  # noqa: E402


def _reset_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Configure a temporary SQLite file and reset settings/engine caches."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("LEDGER_ID", "1")
    _reset_caches()

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    create_all()

    yield db_file

    engine.dispose()
    _reset_caches()


@pytest.fixture()
def services(db_env) -> ServiceRegistry:
    registry = ServiceRegistry.build()
    registry.startup()
    return registry


def candidate(username: str, **overrides) -> RegistrationCandidate:
    fields = {
        "username": username,
        "email": f"{username}@example.com",
        "password": "s3cret-pass",
        "security_question": "First pet?",
        "security_answer": "Rex",
    }
    fields.update(overrides)
    return RegistrationCandidate(**fields)


@pytest.fixture()
def make_user(services):
    """Register and approve a user, returning its summary."""

    def _make(username: str, **overrides):
        services.lifecycle.register(candidate(username, **overrides))
        return services.lifecycle.approve(username)

    return _make


def grant_admin(username: str) -> None:
    with transaction() as session:
        SQLRepository(session).find_by_username(username).role = "ADMIN"
