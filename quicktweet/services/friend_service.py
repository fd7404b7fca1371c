"""Friend graph use cases (requests, friendships and their listings)."""

from __future__ import annotations

from typing import Callable, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from quicktweet.core.logging import get_logger
from quicktweet.db.models import User
from quicktweet.db.session import transaction
from quicktweet.domain.accounts import UserSummary, require_identifiers
from quicktweet.domain.errors import AlreadyFriends, AlreadyRequested, InvalidArgument, NotFound, NotFriends
from quicktweet.repositories.sql_repository import SQLRepository

log = get_logger(__name__)

T = TypeVar("T")

# Edge writes that lost a race surface as constraint violations or as
# deletes matching no row.
WRITE_CONFLICTS = (IntegrityError, StaleDataError)
MAX_ATTEMPTS = 3


def _summaries(users) -> list[UserSummary]:
    return [UserSummary.from_entity(user) for user in sorted(users, key=lambda u: u.username)]


class FriendGraph:
    """
    Maintains the symmetric friends relation and the incoming request relation.

    Mutations lock both participants (ascending id order) and commit both
    sides in one transaction, so a friendship is never half written. A write
    that still collides with a concurrent one is rolled back and re-run from
    a fresh read, which then raises the matching domain error. Pending
    accounts are invisible here until an administrator approves them.
    """

    def _pair(self, session: Session, username: str, other_username: str) -> tuple[User, User]:
        require_identifiers(username, other_username)
        if username == other_username:
            raise InvalidArgument("A user cannot befriend themselves")
        locked = SQLRepository(session).lock_by_usernames([username, other_username])
        user = locked.get(username)
        if user is None or user.pending_request:
            raise NotFound("User does not exist")
        other = locked.get(other_username)
        if other is None or other.pending_request:
            raise NotFound(f"No user with username {other_username} exists")
        return user, other

    def _single(self, session: Session, username: str) -> User:
        require_identifiers(username)
        user = SQLRepository(session).find_by_username(username)
        if user is None or user.pending_request:
            raise NotFound("User does not exist")
        return user

    def _mutate(self, action: Callable[[Session], T], *, op: str) -> T:
        for attempt in range(1, MAX_ATTEMPTS):
            try:
                with transaction() as session:
                    return action(session)
            except WRITE_CONFLICTS as exc:
                log.warning("friend.write_conflict", op=op, attempt=attempt, error=type(exc).__name__)
        with transaction() as session:
            return action(session)

    def send_request(self, sender: str, recipient: str) -> str:
        """Record that ``sender`` asked to friend ``recipient``."""

        def _send(session: Session) -> None:
            user, target = self._pair(session, sender, recipient)
            if user in target.friend_requests:
                raise AlreadyRequested(f"Friend request has already been sent to {recipient}")
            if target in user.friends:
                raise AlreadyFriends(f"User is already friends with {recipient}")
            target.friend_requests.add(user)
            SQLRepository(session).save(target)

        self._mutate(_send, op="send_request")
        log.info("friend.request_sent", sender=sender, recipient=recipient)
        return f"Sent friend request to {recipient}"

    def accept_direct(self, username: str, friend_username: str) -> str:
        """Make the two users friends, resolving any request between them."""

        def _accept(session: Session) -> None:
            user, friend = self._pair(session, username, friend_username)
            if friend in user.friends:
                raise AlreadyFriends(f"User is already friends with {friend_username}")
            user.friends.add(friend)
            friend.friends.add(user)
            user.friend_requests.discard(friend)
            friend.friend_requests.discard(user)
            repo = SQLRepository(session)
            repo.save(user)
            repo.save(friend)

        self._mutate(_accept, op="accept_direct")
        log.info("friend.added", user=username, friend=friend_username)
        return f"User {friend_username} added to friends list"

    def remove(self, username: str, friend_username: str) -> str:
        def _remove(session: Session) -> None:
            user, friend = self._pair(session, username, friend_username)
            if friend not in user.friends:
                raise NotFriends(f"User is not friends with {friend_username}")
            user.friends.discard(friend)
            friend.friends.discard(user)
            repo = SQLRepository(session)
            repo.save(user)
            repo.save(friend)

        self._mutate(_remove, op="remove")
        log.info("friend.removed", user=username, friend=friend_username)
        return f"Deleted user {friend_username} from friends list"

    def list_friends(self, username: str) -> list[UserSummary]:
        with transaction() as session:
            return _summaries(self._single(session, username).friends)

    def list_incoming_requests(self, username: str) -> list[UserSummary]:
        with transaction() as session:
            return _summaries(self._single(session, username).friend_requests)
