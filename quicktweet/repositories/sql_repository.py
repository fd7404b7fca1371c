"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from quicktweet.db.models import Ledger, User, UserInterest, friend_request_edges, friendships


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SQLRepository:
    """CRUD helpers over the session of the current unit of work."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # -------------------------- users --------------------------
    def find_by_id(self, user_id: int, *, for_update: bool = False) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def find_by_username(self, username: str, *, for_update: bool = False) -> Optional[User]:
        stmt = select(User).where(User.username == username)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email)
        return self.session.execute(stmt).scalar_one_or_none()

    def lock_by_usernames(self, usernames: Iterable[str]) -> dict[str, User]:
        """Load and row-lock several users in ascending id order."""
        names = sorted(set(usernames))
        stmt = select(User).where(User.username.in_(names)).order_by(User.id).with_for_update()
        return {user.username: user for user in self.session.execute(stmt).scalars().all()}

    def find_all(self, *, include_pending: bool = True) -> list[User]:
        stmt = select(User).order_by(User.id)
        if not include_pending:
            stmt = stmt.where(User.pending_request.is_(False))
        return list(self.session.execute(stmt).scalars().all())

    def find_by_interests_intersecting(self, tags: Iterable[str], *, include_pending: bool = False) -> list[User]:
        tag_list = sorted(set(tags))
        if not tag_list:
            return []
        stmt = (
            select(User)
            .join(UserInterest, UserInterest.user_id == User.id)
            .where(UserInterest.tag.in_(tag_list))
            .distinct()
            .order_by(User.id)
        )
        if not include_pending:
            stmt = stmt.where(User.pending_request.is_(False))
        return list(self.session.execute(stmt).scalars().all())

    def find_by_username_substring(self, query: str, *, include_pending: bool = False) -> list[User]:
        stmt = select(User).where(User.username.ilike(_like_pattern(query), escape="\\")).order_by(User.username)
        if not include_pending:
            stmt = stmt.where(User.pending_request.is_(False))
        return list(self.session.execute(stmt).scalars().all())

    def find_friend_holders(self, user: User) -> list[User]:
        """Users whose friends collection references ``user``."""
        stmt = (
            select(User)
            .join(friendships, friendships.c.user_id == User.id)
            .where(friendships.c.friend_id == user.id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def find_request_recipients(self, user: User) -> list[User]:
        """Users holding a pending request sent by ``user``."""
        stmt = (
            select(User)
            .join(friend_request_edges, friend_request_edges.c.recipient_id == User.id)
            .where(friend_request_edges.c.sender_id == user.id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def set_interests(self, user: User, tags: Iterable[str]) -> None:
        wanted = set(tags)
        for tag in set(user.interests) - wanted:
            user.interests.discard(tag)
        for tag in wanted - set(user.interests):
            user.interests.add(tag)

    def save(self, user: User) -> User:
        self.session.add(user)
        self.session.flush()
        return user

    def delete(self, user: User) -> None:
        self.session.delete(user)
        self.session.flush()

    # -------------------------- ledger --------------------------
    def get_ledger(self, ledger_id: int, *, for_update: bool = False) -> Optional[Ledger]:
        stmt = select(Ledger).where(Ledger.id == ledger_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def create_ledger(self, ledger_id: int) -> Ledger:
        ledger = Ledger(id=ledger_id)
        self.session.add(ledger)
        self.session.flush()
        return ledger
