"""Approval ledger: the single record of accounts awaiting administrator review."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quicktweet.core.config import get_settings
from quicktweet.core.logging import get_logger
from quicktweet.db.models import Ledger, User
from quicktweet.db.session import transaction
from quicktweet.domain.accounts import Role, UserSummary
from quicktweet.domain.errors import NotFound, Unauthorized
from quicktweet.repositories.sql_repository import SQLRepository

log = get_logger(__name__)


class AuthorizationLedger:
    """
    Service object wrapping the well-known ledger record.

    Build it once at startup, call ``bootstrap()``, then hand the same
    instance to every service that needs it. ``add``/``remove``/``contains``
    take the caller's session so they commit together with the user record.
    """

    def __init__(self, ledger_id: int | None = None) -> None:
        self.ledger_id = ledger_id if ledger_id is not None else get_settings().ledger_id

    def bootstrap(self) -> None:
        """Create the ledger record if it does not exist yet."""
        try:
            with transaction() as session:
                repo = SQLRepository(session)
                if repo.get_ledger(self.ledger_id) is not None:
                    return
                repo.create_ledger(self.ledger_id)
        except IntegrityError:
            # Another worker created it between our check and insert.
            log.info("ledger.bootstrap_raced", ledger_id=self.ledger_id)
            return
        log.info("ledger.created", ledger_id=self.ledger_id)

    def _load(self, session: Session, *, for_update: bool = False) -> Ledger:
        ledger = SQLRepository(session).get_ledger(self.ledger_id, for_update=for_update)
        if ledger is None:
            raise NotFound("Authorization ledger has not been created.")
        return ledger

    def list_pending(self, requester_role: str | Role | None) -> list[UserSummary]:
        if requester_role != Role.ADMIN:
            raise Unauthorized("User is not authorized to access this.")
        with transaction() as session:
            ledger = self._load(session)
            users = sorted(ledger.pending_users, key=lambda u: u.id)
            return [UserSummary.from_entity(user) for user in users]

    def contains(self, session: Session, user: User) -> bool:
        return user in self._load(session).pending_users

    def add(self, session: Session, user: User) -> None:
        ledger = self._load(session, for_update=True)
        ledger.pending_users.add(user)
        session.flush()

    def remove(self, session: Session, user: User) -> None:
        ledger = self._load(session, for_update=True)
        if user not in ledger.pending_users:
            raise NotFound(f"No pending request for {user.username}")
        ledger.pending_users.discard(user)
        session.flush()
