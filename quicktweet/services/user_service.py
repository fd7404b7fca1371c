"""Profile, status and directory lookups for approved accounts."""

from __future__ import annotations

from typing import Iterable, Optional

from quicktweet.core.logging import get_logger
from quicktweet.db.session import transaction
from quicktweet.domain.accounts import Role, UserSummary, clean_identifier, normalize_interests
from quicktweet.domain.errors import InvalidArgument, NotFound, Unauthorized
from quicktweet.repositories.sql_repository import SQLRepository

log = get_logger(__name__)


class UserDirectory:
    """Read and update profile data; none of these touch the friend graph."""

    def list_users(self) -> list[UserSummary]:
        with transaction() as session:
            users = SQLRepository(session).find_all(include_pending=False)
            return [UserSummary.from_entity(user) for user in users]

    def get_by_id(self, user_id: int) -> UserSummary:
        with transaction() as session:
            user = SQLRepository(session).find_by_id(user_id)
            if user is None:
                raise NotFound(f"User not found with id: {user_id}")
            return UserSummary.from_entity(user)

    def get_by_username(self, username: str) -> UserSummary:
        with transaction() as session:
            user = SQLRepository(session).find_by_username(username)
            if user is None:
                raise NotFound(f"User not found with username: {username}")
            return UserSummary.from_entity(user)

    def update_profile(
        self,
        username: str,
        *,
        bio: Optional[str] = None,
        photo: Optional[str] = None,
        status: Optional[str] = None,
        interests: Optional[Iterable[str]] = None,
    ) -> UserSummary:
        """Overwrite the profile fields; ``None`` clears a field."""
        with transaction() as session:
            repo = SQLRepository(session)
            user = repo.find_by_username(username, for_update=True)
            if user is None:
                raise NotFound(f"User not found with username: {username}")
            user.bio = bio
            user.photo = photo
            user.status = clean_identifier(status) if status is not None else None
            repo.set_interests(user, normalize_interests(interests))
            repo.save(user)
            return UserSummary.from_entity(user)

    def get_status(self, username: str) -> Optional[str]:
        with transaction() as session:
            user = SQLRepository(session).find_by_username(username)
            if user is None:
                raise NotFound("User does not exist.")
            return user.status

    def update_status(self, username: str, status: str) -> str:
        if not username or not status:
            raise InvalidArgument("Username and Status fields cannot be empty")
        value = clean_identifier(status)
        with transaction() as session:
            repo = SQLRepository(session)
            user = repo.find_by_username(username, for_update=True)
            if user is None:
                raise NotFound("No user with specified username exists")
            user.status = value
            repo.save(user)
        return value

    def find_by_interests(self, interests: Iterable[str]) -> list[UserSummary]:
        tags = normalize_interests(interests)
        with transaction() as session:
            users = SQLRepository(session).find_by_interests_intersecting(tags)
            return [UserSummary.from_entity(user) for user in users]

    def search(self, query: str) -> list[UserSummary]:
        query = (query or "").strip()
        if not query:
            return []
        with transaction() as session:
            users = SQLRepository(session).find_by_username_substring(query)
            return [UserSummary.from_entity(user) for user in users]

    def toggle_role(self, user_id: int, admin_username: str) -> str:
        """Flip a user between USER and ADMIN; only an administrator may do this."""
        with transaction() as session:
            repo = SQLRepository(session)
            admin = repo.find_by_username(clean_identifier(admin_username))
            if admin is None or admin.role != Role.ADMIN.value:
                raise Unauthorized("User is not authorized to access this.")
            user = repo.find_by_id(user_id, for_update=True)
            if user is None:
                raise NotFound(f"User not found with id: {user_id}")
            user.role = Role.USER.value if user.role == Role.ADMIN.value else Role.ADMIN.value
            repo.save(user)
            new_role = user.role
        log.info("account.role_changed", user_id=user_id, role=new_role, admin=admin_username)
        return f"User role updated to {new_role}"
