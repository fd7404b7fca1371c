"""SQLAlchemy models for accounts, the friend graph and the approval ledger."""
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.orm import relationship

from .session import Base


# Both directions of a friendship are stored; they are always written together.
friendships = Table(
    "friendships",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("friend_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
)

# Incoming requests: sender asked to friend recipient.
friend_request_edges = Table(
    "friend_requests",
    Base.metadata,
    Column("recipient_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("sender_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)

ledger_entries = Table(
    "ledger_entries",
    Base.metadata,
    Column("ledger_id", Integer, ForeignKey("authorization_ledgers.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class UserInterest(Base):
    __tablename__ = "user_interests"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    tag = Column(String(64), primary_key=True, index=True)

    def __init__(self, tag: str):
        self.tag = tag


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    role = Column(String(16), default="USER", nullable=False)
    security_question = Column(Text, nullable=False)
    security_answer = Column(Text, nullable=False)
    bio = Column(Text, nullable=True)
    photo = Column(Text, nullable=True)
    status = Column(Text, nullable=True)
    pending_request = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    friends = relationship(
        "User",
        secondary=friendships,
        primaryjoin=lambda: User.id == friendships.c.user_id,
        secondaryjoin=lambda: User.id == friendships.c.friend_id,
        collection_class=set,
    )
    friend_requests = relationship(
        "User",
        secondary=friend_request_edges,
        primaryjoin=lambda: User.id == friend_request_edges.c.recipient_id,
        secondaryjoin=lambda: User.id == friend_request_edges.c.sender_id,
        collection_class=set,
    )
    interest_rows = relationship(
        "UserInterest",
        collection_class=set,
        cascade="all,delete-orphan",
        lazy="selectin",
    )
    interests = association_proxy("interest_rows", "tag", creator=lambda tag: UserInterest(tag=tag))

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"


class Ledger(Base):
    """Well-known record listing the accounts awaiting administrator approval."""

    __tablename__ = "authorization_ledgers"

    id = Column(Integer, primary_key=True, autoincrement=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    pending_users = relationship("User", secondary=ledger_entries, collection_class=set)
