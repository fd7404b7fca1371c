"""Account value types and identifier helpers."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from .errors import InvalidArgument


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


def clean_identifier(value: str | None) -> str:
    """Strip whitespace and stray quote characters left by transport layers."""
    return (value or "").replace('"', "").strip()


def require_identifiers(*values: str | None) -> None:
    if any(not value for value in values):
        raise InvalidArgument("Username fields cannot be empty")


# Column widths in quicktweet.db.models.
MAX_USERNAME_LENGTH = 64
MAX_EMAIL_LENGTH = 255
MAX_INTEREST_LENGTH = 64


def normalize_interests(values: Iterable[str] | None) -> set[str]:
    tags = {tag.strip() for tag in (values or ()) if tag and tag.strip()}
    too_long = sorted(tag for tag in tags if len(tag) > MAX_INTEREST_LENGTH)
    if too_long:
        raise InvalidArgument(f"Interests cannot exceed {MAX_INTEREST_LENGTH} characters: {too_long[0]}")
    return tags


@dataclass
class RegistrationCandidate:
    username: str
    email: str
    password: str
    security_question: str
    security_answer: str
    bio: Optional[str] = None
    photo: Optional[str] = None
    interests: list[str] = field(default_factory=list)

    def missing_fields(self) -> list[str]:
        required = ("username", "email", "password", "security_question", "security_answer")
        return [name for name in required if not (getattr(self, name) or "").strip()]

    def oversized_fields(self) -> list[str]:
        limits = {"username": MAX_USERNAME_LENGTH, "email": MAX_EMAIL_LENGTH}
        return [name for name, limit in limits.items() if len((getattr(self, name) or "").strip()) > limit]


@dataclass
class UserSummary:
    """Public view of a user, safe to hand across the service boundary."""

    id: int
    username: str
    email: str
    role: str
    bio: Optional[str]
    photo: Optional[str]
    status: Optional[str]
    interests: list[str]
    pending_request: bool

    @classmethod
    def from_entity(cls, user) -> "UserSummary":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            role=user.role,
            bio=user.bio,
            photo=user.photo,
            status=user.status,
            interests=sorted(user.interests),
            pending_request=bool(user.pending_request),
        )
