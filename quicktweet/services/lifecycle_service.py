"""
Account lifecycle: registration, approval, rejection and deletion.

States: CREATED (pending) -> APPROVED | REJECTED, APPROVED -> DELETED.
Every transition commits the user record and the ledger together so the
``pending_request`` flag and ledger membership never diverge.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quicktweet.core.logging import get_logger
from quicktweet.core.security import hash_password
from quicktweet.db.models import User
from quicktweet.db.session import transaction
from quicktweet.domain.accounts import RegistrationCandidate, Role, UserSummary, normalize_interests
from quicktweet.domain.errors import AlreadyExists, InvalidArgument, NotFound
from quicktweet.repositories.sql_repository import SQLRepository
from quicktweet.services.ledger_service import AuthorizationLedger

log = get_logger(__name__)


@dataclass
class ScrubReport:
    user_id: int
    friend_edges: int
    request_edges: int

    @property
    def total(self) -> int:
        return self.friend_edges + self.request_edges


class AccountLifecycle:
    """Governs pending accounts and the cleanup owed when an account goes away."""

    def __init__(self, ledger: AuthorizationLedger) -> None:
        self.ledger = ledger

    # -------------------------------------- helpers --------------------------------------
    def _pending_user(self, session: Session, username: str) -> User:
        username = (username or "").strip()
        if not username:
            raise InvalidArgument("Username cannot be empty")
        user = SQLRepository(session).find_by_username(username, for_update=True)
        if user is None:
            raise NotFound("User does not exist.")
        if not user.pending_request or not self.ledger.contains(session, user):
            raise NotFound(f"No pending request for {username}")
        return user

    def _scrub(self, repo: SQLRepository, user: User) -> ScrubReport:
        friend_edges = 0
        request_edges = 0

        # Friends, plus anyone still holding a one-sided friend edge to this user.
        holders = set(user.friends) | set(repo.find_friend_holders(user))
        for other in holders:
            if user in other.friends:
                other.friends.discard(user)
                friend_edges += 1
        friend_edges += len(user.friends)
        user.friends.clear()

        # Requests received: drop any crossing request back to the sender.
        for sender in list(user.friend_requests):
            if user in sender.friend_requests:
                sender.friend_requests.discard(user)
                request_edges += 1
        request_edges += len(user.friend_requests)
        user.friend_requests.clear()

        # Requests sent are not tracked on this record, so look them up.
        for recipient in repo.find_request_recipients(user):
            if user in recipient.friend_requests:
                recipient.friend_requests.discard(user)
                request_edges += 1

        repo.session.flush()
        return ScrubReport(user_id=user.id, friend_edges=friend_edges, request_edges=request_edges)

    # -------------------------------------- registration --------------------------------------
    def register(self, candidate: RegistrationCandidate) -> UserSummary:
        missing = candidate.missing_fields()
        if missing:
            raise InvalidArgument(f"Missing required fields: {', '.join(missing)}")
        oversized = candidate.oversized_fields()
        if oversized:
            raise InvalidArgument(f"Fields too long: {', '.join(oversized)}")
        username = candidate.username.strip()
        email = candidate.email.strip()
        try:
            with transaction() as session:
                repo = SQLRepository(session)
                if repo.find_by_username(username) is not None:
                    raise AlreadyExists("Username is not unique.")
                if repo.find_by_email(email) is not None:
                    raise AlreadyExists("Email is already registered.")
                user = User(
                    username=username,
                    email=email,
                    password_hash=hash_password(candidate.password),
                    role=Role.USER.value,
                    security_question=candidate.security_question,
                    security_answer=candidate.security_answer,
                    bio=candidate.bio,
                    photo=candidate.photo,
                    pending_request=True,
                )
                repo.set_interests(user, normalize_interests(candidate.interests))
                repo.save(user)
                self.ledger.add(session, user)
                result = UserSummary.from_entity(user)
        except IntegrityError as exc:
            # Unique constraint lost a race with a concurrent registration.
            raise AlreadyExists("Username is not unique.") from exc
        log.info("account.registered", user_id=result.id, username=result.username)
        return result

    # -------------------------------------- moderation --------------------------------------
    def approve(self, username: str) -> UserSummary:
        with transaction() as session:
            user = self._pending_user(session, username)
            user.pending_request = False
            self.ledger.remove(session, user)
            SQLRepository(session).save(user)
            result = UserSummary.from_entity(user)
        log.info("account.approved", user_id=result.id, username=result.username)
        return result

    def reject(self, username: str) -> str:
        with transaction() as session:
            user = self._pending_user(session, username)
            user_id = user.id
            self.ledger.remove(session, user)
            SQLRepository(session).delete(user)
        log.info("account.rejected", user_id=user_id, username=username)
        return "User request has been rejected"

    # -------------------------------------- deletion --------------------------------------
    def scrub_references(self, user_id: int) -> ScrubReport:
        """Remove every friend and request edge touching ``user_id``; safe to repeat."""
        with transaction() as session:
            repo = SQLRepository(session)
            user = repo.find_by_id(user_id, for_update=True)
            if user is None:
                raise NotFound(f"User not found with id: {user_id}")
            report = self._scrub(repo, user)
        log.info("account.scrubbed", user_id=user_id, removed=report.total)
        return report

    def delete_approved_account(self, user_id: int) -> ScrubReport:
        """
        Delete an account after scrubbing all back-references to it.

        The scrub and the delete share one transaction with the user's row
        locked, so a failure leaves the graph untouched and a retry starts
        from a consistent state.
        """
        with transaction() as session:
            repo = SQLRepository(session)
            user: Optional[User] = repo.find_by_id(user_id, for_update=True)
            if user is None:
                raise NotFound(f"User not found with id: {user_id}")
            report = self._scrub(repo, user)
            if self.ledger.contains(session, user):
                self.ledger.remove(session, user)
            repo.delete(user)
        log.info(
            "account.deleted",
            user_id=user_id,
            friend_edges=report.friend_edges,
            request_edges=report.request_edges,
        )
        return report
